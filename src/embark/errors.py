"""Store error hierarchy.

    EmbarkError
    ├── InvalidNameError     — tag or id rejected by the path policy
    ├── CorruptEntryError    — collection entry that cannot be parsed or read
    ├── KeyExhaustedError    — 64-bit key space used up
    └── CounterCorruptError  — persisted key counter unreadable

Filesystem failures are not wrapped: OSError reaches the caller unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class EmbarkError(Exception):
    """Base error for all store failures."""


class InvalidNameError(EmbarkError, ValueError):
    """A tag or document id that cannot be used as a path component."""

    def __init__(self, kind: str, value: object) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"invalid {kind}: {value!r}")


class CorruptEntryError(EmbarkError):
    """A file in a collection directory is not a readable document."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class KeyExhaustedError(EmbarkError, OverflowError):
    pass


class CounterCorruptError(EmbarkError):
    pass
