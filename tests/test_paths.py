"""Unit tests for embark.paths — naming policy and layout."""

from __future__ import annotations

import pytest

from embark.errors import InvalidNameError
from embark.paths import (
    MAX_KEY,
    CollectionPaths,
    atomic_write_text,
    check_tag,
    parse_document_name,
    parse_id,
    read_text,
)


class TestTagPolicy:
    @pytest.mark.parametrize("tag", ["Animals", "a", "my-tag_2", "v1.0", "X" * 128])
    def test_accepts(self, tag):
        assert check_tag(tag) == tag

    @pytest.mark.parametrize("tag", [
        "", ".", "..", ".hidden", "-leading", "a/b", "a\\b", "../etc",
        "with space", "nul\x00", "colon:", "X" * 129, None, 5,
    ])
    def test_rejects(self, tag):
        with pytest.raises(InvalidNameError) as exc_info:
            check_tag(tag)
        assert exc_info.value.kind == "tag"


class TestIdPolicy:
    def test_canonicalizes(self):
        assert parse_id("007") == 7
        assert parse_id("0") == 0
        assert parse_id(42) == 42
        assert parse_id(str(MAX_KEY)) == MAX_KEY

    @pytest.mark.parametrize("doc_id", [
        "", "-1", "+1", "1.5", "1e3", " 1", "1 ", "../1", "abc", "1_000",
        str(MAX_KEY + 1), MAX_KEY + 1, -1, True, 1.0, None,
    ])
    def test_rejects(self, doc_id):
        with pytest.raises(InvalidNameError) as exc_info:
            parse_id(doc_id)
        assert exc_info.value.kind == "id"

    def test_invalid_name_is_value_error(self):
        with pytest.raises(ValueError):
            parse_id("nope")


class TestDocumentName:
    def test_parses_decimal_names(self):
        assert parse_document_name("12") == 12

    @pytest.mark.parametrize("name", ["12.txt", "x", ".12.tmp", "001", "00", str(MAX_KEY + 1)])
    def test_rejects_other_names(self, name):
        with pytest.raises(ValueError):
            parse_document_name(name)


class TestCollectionPaths:
    def test_collection_dir_is_created_once(self, tmp_path):
        paths = CollectionPaths(tmp_path / "Collections")
        first = paths.collection_dir("Animals")
        second = paths.collection_dir("Animals")
        assert first == second == tmp_path / "Collections" / "Animals"
        assert first.is_dir()

    def test_document_path_nested_under_collection(self, tmp_path):
        paths = CollectionPaths(tmp_path / "Collections")
        doc = paths.document_path("Animals", "007")
        assert doc.parent == paths.collection_dir("Animals")
        assert doc.name == "7"
        assert parse_document_name(doc.name) == 7

    def test_invalid_names_touch_nothing(self, tmp_path):
        paths = CollectionPaths(tmp_path / "Collections")
        with pytest.raises(InvalidNameError):
            paths.collection_dir("../outside")
        with pytest.raises(InvalidNameError):
            paths.document_path("Animals", "../../x")
        assert not (tmp_path / "Collections").exists()
        assert not (tmp_path / "outside").exists()

    def test_collections_lists_tag_dirs(self, tmp_path):
        paths = CollectionPaths(tmp_path / "Collections")
        assert paths.collections() == []
        paths.collection_dir("b")
        paths.collection_dir("a")
        (tmp_path / "Collections" / "stray.txt").write_text("")
        assert paths.collections() == ["a", "b"]


class TestAtomicWrite:
    def test_replaces_content(self, tmp_path):
        target = tmp_path / "1"
        atomic_write_text(target, "first")
        atomic_write_text(target, "second\r\n")
        assert read_text(target) == "second\r\n"
        assert [p.name for p in tmp_path.iterdir()] == ["1"]

    def test_failed_write_leaves_original(self, tmp_path, monkeypatch):
        target = tmp_path / "1"
        atomic_write_text(target, "original", fsync=False)

        def _fail(self, other):
            raise OSError("rename refused")

        monkeypatch.setattr(type(target), "replace", _fail)
        with pytest.raises(OSError, match="rename refused"):
            atomic_write_text(target, "new", fsync=False)
        monkeypatch.undo()

        assert read_text(target) == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["1"]
