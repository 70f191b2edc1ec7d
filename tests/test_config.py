"""Unit tests for embark.config — embark.toml loading."""

from __future__ import annotations

import logging

import pytest

from embark.config import init_config, load_config


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(tmp_path)
        assert cfg.root == tmp_path.resolve()
        assert cfg.store.data_dir == tmp_path.resolve() / ".embark"
        assert cfg.store.lock_mode == "store"
        assert cfg.store.fsync is True
        assert cfg.logging.level_no == logging.WARNING

    def test_reads_file(self, tmp_path):
        (tmp_path / "embark.toml").write_text(
            "[store]\n"
            'data_dir = "var/db"\n'
            'lock_mode = "collection"\n'
            "fsync = false\n"
            "[logging]\n"
            'level = "debug"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.store.data_dir == tmp_path.resolve() / "var" / "db"
        assert cfg.store.lock_mode == "collection"
        assert cfg.store.fsync is False
        assert cfg.logging.level_no == logging.DEBUG

    def test_searches_upward(self, tmp_path, monkeypatch):
        (tmp_path / "embark.toml").write_text('[store]\ndata_dir = "db"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        cfg = load_config()
        assert cfg.root == tmp_path.resolve()
        assert cfg.store.data_dir == tmp_path.resolve() / "db"

    def test_env_overrides_data_dir(self, tmp_path, monkeypatch):
        (tmp_path / "embark.toml").write_text('[store]\ndata_dir = "db"\n')
        other = tmp_path / "elsewhere"
        monkeypatch.setenv("EMBARK_DATA_DIR", str(other))
        cfg = load_config(tmp_path)
        assert cfg.store.data_dir == other

    def test_bad_lock_mode(self, tmp_path):
        (tmp_path / "embark.toml").write_text('[store]\nlock_mode = "row"\n')
        with pytest.raises(ValueError, match="lock_mode"):
            load_config(tmp_path)

    def test_unknown_log_level_falls_back(self, tmp_path):
        (tmp_path / "embark.toml").write_text('[logging]\nlevel = "chatty"\n')
        assert load_config(tmp_path).logging.level_no == logging.WARNING


class TestInitConfig:
    def test_writes_loadable_file(self, tmp_path):
        path = init_config(tmp_path, data_dir="store")
        assert path == tmp_path / "embark.toml"
        cfg = load_config(tmp_path)
        assert cfg.store.data_dir == tmp_path.resolve() / "store"

    def test_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)

    def test_ensure_dirs(self, tmp_path):
        init_config(tmp_path)
        cfg = load_config(tmp_path)
        cfg.ensure_dirs()
        assert cfg.store.data_dir.is_dir()
