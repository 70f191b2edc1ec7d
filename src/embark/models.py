"""Data models returned by collection scans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DataEnvelope:
    """A document's key paired with its stored text."""

    id: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class ScanFailure:
    """A directory entry that could not be turned into an envelope."""

    name: str       # file name inside the collection directory
    error: str


@dataclass
class ScanResult:
    """Outcome of a resilient scan: everything readable plus what was not."""

    envelopes: list[DataEnvelope] = field(default_factory=list)
    failures: list[ScanFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def ids(self) -> set[int]:
        return {e.id for e in self.envelopes}
