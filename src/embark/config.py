"""EmbarkConfig: project-local config for the document store.

Default layout (all relative to the project root):

    embark.toml           # project config
    .embark/              # store base directory
        Collections/
        Map/

embark.toml example:

    [store]
    data_dir = ".embark"
    lock_mode = "store"     # store | collection
    fsync = true

    [logging]
    level = "WARNING"

EMBARK_DATA_DIR in the environment overrides store.data_dir.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from embark.store import LOCK_MODES

_CONFIG_FILENAME = "embark.toml"
_DEFAULT_DATA_DIR = ".embark"
_DATA_DIR_ENV = "EMBARK_DATA_DIR"


@dataclass
class StoreConfig:
    data_dir: Path = field(default_factory=lambda: Path(_DEFAULT_DATA_DIR))
    lock_mode: str = "store"
    fsync: bool = True


_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LoggingConfig:
    level: str = "WARNING"

    @property
    def level_no(self) -> int:
        name = self.level.upper()
        return int(getattr(logging, name)) if name in _LEVELS else logging.WARNING


@dataclass
class EmbarkConfig:
    """Resolved configuration for a store project."""

    root: Path                      # directory that contains embark.toml
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_path(self) -> Path:
        return self.root / _CONFIG_FILENAME

    def ensure_dirs(self) -> None:
        self.store.data_dir.mkdir(parents=True, exist_ok=True)


def load_config(root: Path | str | None = None) -> EmbarkConfig:
    """Load embark.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    store_section = raw.get("store", {})
    log_section = raw.get("logging", {})

    data_rel = os.environ.get(_DATA_DIR_ENV) or str(store_section.get("data_dir", _DEFAULT_DATA_DIR))
    lock_mode = str(store_section.get("lock_mode", "store"))
    if lock_mode not in LOCK_MODES:
        msg = f"{config_path}: store.lock_mode must be one of {LOCK_MODES}, got {lock_mode!r}"
        raise ValueError(msg)

    return EmbarkConfig(
        root=root_path,
        store=StoreConfig(
            data_dir=root_path / Path(data_rel).expanduser(),
            lock_mode=lock_mode,
            fsync=bool(store_section.get("fsync", True)),
        ),
        logging=LoggingConfig(
            level=str(log_section.get("level", "WARNING")),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for embark.toml."""
    start = start.resolve()
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, data_dir: str | None = None) -> Path:
    """Write a default embark.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"embark.toml already exists at {config_path}"
        raise FileExistsError(msg)

    content = f"""\
[store]
data_dir = "{data_dir or _DEFAULT_DATA_DIR}"
# lock_mode = "store"   # store: one lock for everything; collection: one lock per tag
# fsync = true          # fsync documents and the key counter before returning

# [logging]
# level = "WARNING"
"""
    config_path.write_text(content)
    return config_path
