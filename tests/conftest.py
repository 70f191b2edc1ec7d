"""Shared fixtures.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import pytest

from embark.store import LOCK_MODES, FileDataStore


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep a developer's EMBARK_DATA_DIR out of the tests."""
    monkeypatch.delenv("EMBARK_DATA_DIR", raising=False)


@pytest.fixture
def base_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(base_dir):
    """Store with the default single lock; fsync off to keep tests fast."""
    return FileDataStore(base_dir, fsync=False)


@pytest.fixture(params=LOCK_MODES)
def any_store(request, base_dir):
    """The same store under each lock mode."""
    return FileDataStore(base_dir, lock_mode=request.param, fsync=False)
