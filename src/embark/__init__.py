"""File-based document store: one directory per collection, one file per document.

Layout:
    <base>/
        Collections/
            <tag>/
                <id>        # document text, verbatim
        Map/
            key             # last issued key (shared by all collections)

Keys are 64-bit, strictly increasing, never reused. The counter is made
durable (temp file + rename) before a key is returned.

Concurrent callers in one process are serialized by the store's lock(s);
separate processes on one directory are not coordinated.
"""

from embark.config import EmbarkConfig, init_config, load_config
from embark.errors import (
    CorruptEntryError,
    CounterCorruptError,
    EmbarkError,
    InvalidNameError,
    KeyExhaustedError,
)
from embark.keys import KeyProvider
from embark.models import DataEnvelope, ScanFailure, ScanResult
from embark.paths import CollectionPaths
from embark.store import FileDataStore

__all__ = [
    "CollectionPaths",
    "CorruptEntryError",
    "CounterCorruptError",
    "DataEnvelope",
    "EmbarkConfig",
    "EmbarkError",
    "FileDataStore",
    "InvalidNameError",
    "KeyExhaustedError",
    "KeyProvider",
    "ScanFailure",
    "ScanResult",
    "init_config",
    "load_config",
]
