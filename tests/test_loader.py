"""Tests for specref.loader."""

from __future__ import annotations

import io
import textwrap
from pathlib import Path

import pytest

from specref.exceptions import DocumentLoadError
from specref.loader import FileFetcher, decode_content, load_file, read_source, stringify_keys


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class TestDecodeContent:
    def test_json(self) -> None:
        assert decode_content('{"openapi": "3.0.3"}') == {"openapi": "3.0.3"}

    def test_yaml_fallback(self) -> None:
        content = textwrap.dedent("""\
            openapi: "3.1.0"
            paths: {}
        """)
        assert decode_content(content) == {"openapi": "3.1.0", "paths": {}}

    def test_top_level_list(self) -> None:
        assert decode_content("- a\n- b\n", hint="yaml") == ["a", "b"]

    def test_invalid_json_with_json_hint(self) -> None:
        with pytest.raises(DocumentLoadError, match="Invalid JSON"):
            decode_content("openapi: 3", hint="json")

    def test_undecodable(self) -> None:
        with pytest.raises(DocumentLoadError, match="Failed to decode document as JSON or YAML"):
            decode_content("{ not: [valid")

    def test_scalar_rejected(self) -> None:
        with pytest.raises(DocumentLoadError, match="object or array"):
            decode_content("just a string")

    def test_yaml_keys_become_strings(self) -> None:
        content = textwrap.dedent("""\
            responses:
              200:
                description: ok
              true: yes
        """)
        assert decode_content(content) == {"responses": {"200": {"description": "ok"}, "True": True}}

    def test_yaml_aliases_stay_shared(self) -> None:
        data = decode_content("base: &b {1: a}\ncopy: *b\n", hint="yaml")
        assert data["base"] == {"1": "a"}
        assert data["copy"] is data["base"]


class TestStringifyKeys:
    def test_nested(self) -> None:
        assert stringify_keys({1: [{2.5: "x"}, None]}) == {"1": [{"2.5": "x"}, None]}

    def test_input_not_modified(self) -> None:
        data = {1: {"a": 1}}
        stringify_keys(data)
        assert 1 in data

    def test_self_containing_list(self) -> None:
        data: list = []
        data.append(data)
        result = stringify_keys(data)
        assert result[0] is result


# ---------------------------------------------------------------------------
# Files and stdin
# ---------------------------------------------------------------------------


class TestLoadFile:
    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.yml"
        path.write_text("info:\n  title: Pets\n", encoding="utf-8")
        assert load_file(path) == {"info": {"title": "Pets"}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentLoadError, match="Document not found"):
            load_file(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="Document is empty"):
            load_file(path)

    def test_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "latin.yaml"
        path.write_bytes(b"Foo: \xff\xfe\n")
        with pytest.raises(DocumentLoadError, match="not valid UTF-8"):
            load_file(path)

    def test_decode_error_names_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="broken.json: Invalid JSON"):
            load_file(path)


class TestReadSource:
    def test_path(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.json"
        path.write_text('{"a": 1}', encoding="utf-8")
        assert read_source(str(path)) == {"a": 1}

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("a: 1\n"))
        assert read_source("-") == {"a": 1}

    def test_empty_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(DocumentLoadError, match="No input received from stdin"):
            read_source("-")


class TestFileFetcher:
    def test_fetch_file_uri(self, tmp_path: Path) -> None:
        path = tmp_path / "pet.yaml"
        path.write_text("Pet:\n  type: object\n", encoding="utf-8")
        assert FileFetcher().fetch(path.resolve().as_uri()) == {"Pet": {"type": "object"}}

    def test_other_schemes_rejected(self) -> None:
        with pytest.raises(DocumentLoadError, match="only local file:// documents"):
            FileFetcher().fetch("https://example.com/pet.yaml")
