"""Unit tests for layout document persistence."""

from __future__ import annotations

import json

import pytest

from core.config import BuildLayoutConfig
from core.errors import DanglingReferenceError, LayoutFormatError
from store.layout_io import load_layout, save_layout


def _config(strict: bool = False, indent: int = 2) -> BuildLayoutConfig:
    return BuildLayoutConfig(strict_references=strict, json_indent=indent, log_level="info")


def _write_dangling_document(path) -> None:
    document = {
        "formatVersion": 1,
        "toolVersion": "1",
        "packageVersion": "1",
        "builtInBundles": [{"name": "a", "dependencies": ["missing.bundle"]}],
    }
    path.write_text(json.dumps(document), encoding="utf-8")


def test_save_layout_writes_json_with_configured_indent(tmp_path, sample_layout) -> None:
    """JSON output should honor the configured indentation."""
    target = save_layout(sample_layout, tmp_path / "buildlayout.json", config=_config(indent=4))

    text = target.read_text(encoding="utf-8")

    assert text.startswith('{\n    "formatVersion": 1') and json.loads(text)["toolVersion"]


def test_save_layout_writes_yaml_by_suffix(tmp_path, sample_layout) -> None:
    """A .yaml suffix should select YAML output."""
    target = save_layout(sample_layout, tmp_path / "nested" / "layout.yaml", config=_config())

    text = target.read_text(encoding="utf-8")

    assert text.startswith("formatVersion: 1")


def test_save_layout_rejects_unknown_suffix(tmp_path, sample_layout) -> None:
    """Unsupported suffixes should fail before anything is written."""
    with pytest.raises(LayoutFormatError):
        save_layout(sample_layout, tmp_path / "layout.txt", config=_config())

    assert not (tmp_path / "layout.txt").exists()


def test_load_layout_raises_for_missing_file(tmp_path) -> None:
    """Loading should fail clearly when the document does not exist."""
    with pytest.raises(LayoutFormatError, match="not found"):
        load_layout(tmp_path / "missing.json", config=_config())


def test_load_layout_raises_for_invalid_json(tmp_path) -> None:
    """Loading should wrap JSON syntax errors."""
    source = tmp_path / "broken.json"
    source.write_text("{not json", encoding="utf-8")

    with pytest.raises(LayoutFormatError):
        load_layout(source, config=_config())


def test_load_layout_raises_for_invalid_yaml(tmp_path) -> None:
    """Loading should wrap YAML syntax errors."""
    source = tmp_path / "broken.yaml"
    source.write_text("groups: [unclosed\n", encoding="utf-8")

    with pytest.raises(LayoutFormatError):
        load_layout(source, config=_config())


def test_load_layout_reports_dangling_references_when_lenient(tmp_path) -> None:
    """Lenient loads should return the partially resolved graph with a report."""
    source = tmp_path / "dangling.json"
    _write_dangling_document(source)

    result = load_layout(source, config=_config(strict=False))

    assert [reference.missing_key for reference in result.dangling_references] == [
        "missing.bundle"
    ]


def test_load_layout_raises_for_dangling_references_when_strict(tmp_path) -> None:
    """Strict loads should raise with the unresolved references attached."""
    source = tmp_path / "dangling.json"
    _write_dangling_document(source)

    with pytest.raises(DanglingReferenceError) as error_info:
        load_layout(source, config=_config(strict=True))

    assert error_info.value.references[0].entity_key == "a"


def test_load_layout_strict_argument_overrides_config(tmp_path) -> None:
    """An explicit strict argument should win over configuration."""
    source = tmp_path / "dangling.json"
    _write_dangling_document(source)

    result = load_layout(source, strict=False, config=_config(strict=True))

    assert len(result.dangling_references) == 1


def test_load_layout_reads_strict_policy_from_env(tmp_path, monkeypatch) -> None:
    """Without explicit config the environment decides the policy."""
    source = tmp_path / "dangling.json"
    _write_dangling_document(source)
    monkeypatch.setenv("BUILDLAYOUT_STRICT_REFERENCES", "1")

    with pytest.raises(DanglingReferenceError):
        load_layout(source)


def test_load_layout_raises_for_non_utf8_document(tmp_path) -> None:
    """Undecodable bytes should be reported as a format error."""
    source = tmp_path / "layout.json"
    source.write_bytes(b'{"toolVersion": "\xff\xfe"}')

    with pytest.raises(LayoutFormatError, match="UTF-8"):
        load_layout(source, config=_config())
