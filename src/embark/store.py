"""FileDataStore: CRUD over tagged collections, one file per document.

    store = FileDataStore("/path/to/data")
    key = store.insert("Animals", "Mittens")        # -> 1
    store.get("Animals", key)                       # -> "Mittens"
    store.update("Animals", key, "Whiskers")        # -> True
    store.get_all("Animals")                        # -> [DataEnvelope(1, "Whiskers")]
    store.delete("Animals", key)                    # -> True

Content is opaque text, stored verbatim (UTF-8, no newline translation).
A document exists iff its file exists; the directory listing is the only
index.

Locking (lock_mode):
    "store"       one guard around every operation on every collection.
                  Operations are totally ordered by lock acquisition.
    "collection"  one guard per tag plus one for the key counter. Operations
                  on the same tag are serialized; different tags run in
                  parallel. Keys stay unique and increasing either way.

Nothing here coordinates separate processes: two stores on one directory
race on the key counter.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from embark.errors import CorruptEntryError
from embark.keys import KeyProvider
from embark.models import DataEnvelope, ScanFailure, ScanResult
from embark.paths import (
    COLLECTIONS_DIR,
    MAP_DIR,
    CollectionPaths,
    atomic_write_text,
    check_tag,
    is_temp_name,
    parse_document_name,
    read_text,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from contextlib import AbstractContextManager

    from embark.config import EmbarkConfig

logger = logging.getLogger("embark.store")

LOCK_MODES = ("store", "collection")


class _LockTable:
    """Hands out the lock guarding a tag, and the one guarding the counter."""

    def __init__(self, mode: str) -> None:
        if mode not in LOCK_MODES:
            msg = f"lock_mode must be one of {LOCK_MODES}, got {mode!r}"
            raise ValueError(msg)
        self.mode = mode
        self._store_lock = threading.Lock()
        self._key_lock = threading.Lock()
        self._registry_lock = threading.Lock()
        self._tag_locks: dict[str, threading.Lock] = {}

    def for_tag(self, tag: str) -> threading.Lock:
        check_tag(tag)
        if self.mode == "store":
            return self._store_lock
        with self._registry_lock:
            return self._tag_locks.setdefault(tag, threading.Lock())

    def for_keys(self) -> AbstractContextManager[object]:
        # In "store" mode the caller already holds the one lock.
        if self.mode == "store":
            return contextlib.nullcontext()
        return self._key_lock


class FileDataStore:
    """Filesystem document store rooted at base_dir."""

    def __init__(self, base_dir: Path | str, *, lock_mode: str = "store", fsync: bool = True) -> None:
        self.base_dir = Path(base_dir)
        self.fsync = fsync
        self._locks = _LockTable(lock_mode)
        self.paths = CollectionPaths(self.base_dir / COLLECTIONS_DIR)
        self.keys = KeyProvider(self.base_dir / MAP_DIR, fsync=fsync)

    @classmethod
    def from_config(cls, cfg: EmbarkConfig) -> FileDataStore:
        return cls(cfg.store.data_dir, lock_mode=cfg.store.lock_mode, fsync=cfg.store.fsync)

    @property
    def lock_mode(self) -> str:
        return self._locks.mode

    @property
    def last_key(self) -> int:
        return self.keys.last_key

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def insert(self, tag: str, content: str) -> int:
        """Store content under a fresh key and return the key.

        If the write fails the key is spent; keys are never reused.
        """
        with self._locks.for_tag(tag):
            tag_dir = self.paths.collection_dir(tag)
            with self._locks.for_keys():
                key = self.keys.new_key()
            atomic_write_text(tag_dir / str(key), content, fsync=self.fsync)
        logger.debug("insert %s/%d (%d chars)", tag, key, len(content))
        return key

    def update(self, tag: str, doc_id: str | int, content: str) -> bool:
        """Replace an existing document's content. Never creates one."""
        with self._locks.for_tag(tag):
            path = self.paths.document_path(tag, doc_id)
            if not path.is_file():
                return False
            atomic_write_text(path, content, fsync=self.fsync)
        logger.debug("update %s/%s (%d chars)", tag, path.name, len(content))
        return True

    def delete(self, tag: str, doc_id: str | int) -> bool:
        with self._locks.for_tag(tag):
            path = self.paths.document_path(tag, doc_id)
            if not path.is_file():
                return False
            path.unlink()
        logger.debug("delete %s/%s", tag, path.name)
        return True

    def get(self, tag: str, doc_id: str | int) -> str | None:
        """Return the document's content, or None if there is no such document."""
        with self._locks.for_tag(tag):
            path = self.paths.document_path(tag, doc_id)
            if not path.is_file():
                return None
            return read_text(path)

    def exists(self, tag: str, doc_id: str | int) -> bool:
        with self._locks.for_tag(tag):
            return self.paths.document_path(tag, doc_id).is_file()

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def get_all(self, tag: str) -> list[DataEnvelope]:
        """Every document in the collection, in directory order.

        All-or-nothing: the first entry that cannot be parsed or read raises
        CorruptEntryError. Use scan() to get partial results instead.
        """
        with self._locks.for_tag(tag):
            tag_dir = self.paths.collection_dir(tag)
            return [self._read_strict(path) for path in self._entries(tag_dir)]

    def scan(self, tag: str) -> ScanResult:
        """Like get_all, but bad entries are collected instead of raised."""
        result = ScanResult()
        with self._locks.for_tag(tag):
            tag_dir = self.paths.collection_dir(tag)
            for path in self._entries(tag_dir):
                try:
                    result.envelopes.append(_read_envelope(path))
                except (ValueError, OSError) as exc:
                    logger.warning("scan %s: skipping %s: %s", tag, path.name, exc)
                    result.failures.append(ScanFailure(name=path.name, error=str(exc)))
        return result

    def iter_all(self, tag: str) -> Iterator[DataEnvelope]:
        """Lazily yield documents, taking the lock per document.

        The listing is a snapshot: documents inserted after it are not
        yielded, documents deleted after it are skipped. Bad entries raise
        CorruptEntryError as in get_all.
        """
        with self._locks.for_tag(tag):
            tag_dir = self.paths.collection_dir(tag)
            names = [path.name for path in self._entries(tag_dir)]
        for name in names:
            with self._locks.for_tag(tag):
                path = tag_dir / name
                if not path.is_file():
                    continue
                envelope = self._read_strict(path)
            yield envelope

    def count(self, tag: str) -> int:
        with self._locks.for_tag(tag):
            return sum(1 for _ in self._entries(self.paths.collection_dir(tag)))

    def collections(self) -> list[str]:
        return self.paths.collections()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _entries(tag_dir: Path) -> Iterator[Path]:
        for path in tag_dir.iterdir():
            if not is_temp_name(path.name) and path.is_file():
                yield path

    @staticmethod
    def _read_strict(path: Path) -> DataEnvelope:
        try:
            return _read_envelope(path)
        except (ValueError, OSError) as exc:
            raise CorruptEntryError(path, str(exc)) from exc


def _read_envelope(path: Path) -> DataEnvelope:
    key = parse_document_name(path.name)
    return DataEnvelope(id=key, text=read_text(path))
