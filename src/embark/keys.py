"""KeyProvider: durable, strictly increasing 64-bit document keys.

One counter per store, shared by every collection. The value on disk is the
last key handed out; it is rewritten (temp file + rename) before new_key()
returns, so a crash can lose an unused key but never reissue one.

Not thread-safe on its own: FileDataStore calls it under a lock.
"""

from __future__ import annotations

import logging
from pathlib import Path

from embark.errors import CounterCorruptError, KeyExhaustedError
from embark.paths import MAX_KEY, atomic_write_text

logger = logging.getLogger("embark.keys")

_COUNTER_FILENAME = "key"


class KeyProvider:
    """Issues keys from a counter file under <base>/Map/."""

    def __init__(self, map_dir: Path | str, *, fsync: bool = True) -> None:
        self.map_dir = Path(map_dir)
        self.map_dir.mkdir(parents=True, exist_ok=True)
        self.fsync = fsync
        self._last = self._load()

    @property
    def counter_path(self) -> Path:
        return self.map_dir / _COUNTER_FILENAME

    @property
    def last_key(self) -> int:
        """Last key issued (0 before the first)."""
        return self._last

    def new_key(self) -> int:
        key = self._last + 1
        if key > MAX_KEY:
            msg = f"key counter exhausted at {self._last}"
            raise KeyExhaustedError(msg)
        atomic_write_text(self.counter_path, f"{key}\n", fsync=self.fsync)
        self._last = key
        logger.debug("issued key %d", key)
        return key

    def _load(self) -> int:
        path = self.counter_path
        if not path.exists():
            return 0
        raw = path.read_bytes().strip()
        if not raw.isdigit():
            msg = f"counter file {path} holds {raw!r}, expected a decimal integer"
            raise CounterCorruptError(msg)
        value = int(raw)
        if value > MAX_KEY:
            msg = f"counter file {path} out of range: {value}"
            raise CounterCorruptError(msg)
        logger.debug("loaded key counter %d from %s", value, path)
        return value
