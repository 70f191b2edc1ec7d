"""On-disk layout: tags to directories, (tag, id) pairs to document files.

    <base>/
        Collections/
            <tag>/
                <id>          # document text, verbatim (no extension)
                .<id>.tmp     # in-flight atomic write, ignored by scans
        Map/
            key               # last issued key, decimal

Tags and ids are used directly as path components, so both are checked
before they reach the filesystem. Ids are canonicalized to their decimal
form: "007" and 7 name the same document as "7".
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from embark.errors import InvalidNameError

COLLECTIONS_DIR = "Collections"
MAP_DIR = "Map"
TMP_SUFFIX = ".tmp"

MAX_KEY = 2**63 - 1

_TAG_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]{0,127}")
_ID_RE = re.compile(r"[0-9]{1,19}")


def check_tag(tag: str) -> str:
    """Return tag unchanged, or raise InvalidNameError."""
    if not isinstance(tag, str) or not _TAG_RE.fullmatch(tag):
        raise InvalidNameError("tag", tag)
    return tag


def parse_id(doc_id: str | int) -> int:
    """Canonicalize a document id to an int in [0, MAX_KEY]."""
    if isinstance(doc_id, bool):
        raise InvalidNameError("id", doc_id)
    if isinstance(doc_id, int):
        value = doc_id
    elif isinstance(doc_id, str) and _ID_RE.fullmatch(doc_id):
        value = int(doc_id)
    else:
        raise InvalidNameError("id", doc_id)
    if not 0 <= value <= MAX_KEY:
        raise InvalidNameError("id", doc_id)
    return value


def parse_document_name(name: str) -> int:
    """Inverse of the document file naming. Raises ValueError."""
    if not _ID_RE.fullmatch(name):
        msg = f"not a document name: {name!r}"
        raise ValueError(msg)
    value = int(name)
    if str(value) != name:
        msg = f"non-canonical document name: {name!r}"
        raise ValueError(msg)
    if value > MAX_KEY:
        msg = f"key out of range: {name!r}"
        raise ValueError(msg)
    return value


def is_temp_name(name: str) -> bool:
    return name.startswith(".")


def atomic_write_text(path: Path, text: str, *, fsync: bool = True) -> None:
    """Write text to a dotted sibling temp file, then rename it over path."""
    tmp = path.with_name(f".{path.name}{TMP_SUFFIX}")
    try:
        with tmp.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            if fsync:
                os.fsync(f.fileno())
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    if fsync:
        _fsync_dir(path.parent)


def read_text(path: Path) -> str:
    """Read a document back exactly as written."""
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def _fsync_dir(directory: Path) -> None:
    # Directory fds are a POSIX thing; elsewhere the rename is as durable as it gets.
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class CollectionPaths:
    """Maps collection tags and document ids to paths under <base>/Collections."""

    def __init__(self, collections_dir: Path | str) -> None:
        self.collections_dir = Path(collections_dir)

    def collection_dir(self, tag: str) -> Path:
        """Directory for tag, created on first use."""
        path = self.collections_dir / check_tag(tag)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def document_path(self, tag: str, doc_id: str | int) -> Path:
        key = parse_id(doc_id)
        return self.collection_dir(tag) / str(key)

    def collections(self) -> list[str]:
        """Tags that currently have a directory, sorted."""
        if not self.collections_dir.exists():
            return []
        return sorted(
            d.name for d in self.collections_dir.iterdir()
            if d.is_dir() and _TAG_RE.fullmatch(d.name)
        )
