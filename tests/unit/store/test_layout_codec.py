"""Unit tests for the layout document codec."""

from __future__ import annotations

import pytest

from core.errors import LayoutFormatError, LayoutNotFinalizedError
from layout.model import BuildLayout
from store.layout_codec import layout_from_document, layout_to_document


def _bundle_document(name: str, dependencies: list[str] | None = None) -> dict[str, object]:
    return {"name": name, "fileSize": 10, "compression": "LZ4", "dependencies": dependencies or []}


def test_layout_to_document_writes_keys_not_copies(sample_layout) -> None:
    """Cross references should be written as stable keys."""
    document = layout_to_document(sample_layout)
    heroes = document["groups"][0]["bundles"][0]
    knight = heroes["files"][0]["assets"][0]

    assert heroes["group"] == "guid-group-characters"
    assert heroes["expandedDependencies"] == [
        "environment_props.bundle",
        "unitybuiltinshaders.bundle",
    ]
    assert knight["file"] == "CAB-heroes"
    assert knight["externallyReferencedAssets"] == ["guid-crate"]
    assert knight["internalReferencedImplicitAssets"] == ["guid-steel"]


def test_layout_to_document_keeps_duplicate_schema_keys(sample_layout) -> None:
    """Schema key/value pairs should be written as ordered pairs."""
    document = layout_to_document(sample_layout)

    details = document["groups"][0]["schemas"][0]["kvpDetails"]

    assert details == [["Compression", "LZ4"], ["IncludeInBuild", "True"], ["Compression", "LZMA"]]


def test_layout_to_document_requires_finalized_layout() -> None:
    """Unfinalized layouts have no closures and cannot be written."""
    layout = BuildLayout(tool_version="1", package_version="1")

    with pytest.raises(LayoutNotFinalizedError):
        layout_to_document(layout)


def test_layout_from_document_resolves_forward_references() -> None:
    """Dependencies on bundles defined later in the document should resolve."""
    document = {
        "toolVersion": "1",
        "packageVersion": "1",
        "builtInBundles": [_bundle_document("a", ["b"]), _bundle_document("b")],
    }

    result = layout_from_document(document)
    first, second = result.layout.built_in_bundles

    assert first.dependencies == (second,) and first.expanded_dependencies == (second,)


def test_layout_from_document_recomputes_expanded_dependencies() -> None:
    """Stored closures are checked for keys but rebuilt from direct edges."""
    bundle = _bundle_document("a", ["b"])
    bundle["expandedDependencies"] = ["b", "c"]
    document = {"builtInBundles": [bundle, _bundle_document("b"), _bundle_document("c")]}

    result = layout_from_document(document)

    assert [item.name for item in result.layout.built_in_bundles[0].expanded_dependencies] == ["b"]


def test_layout_from_document_reports_dangling_references() -> None:
    """Unresolvable keys should be reported, not dropped silently."""
    document = {"builtInBundles": [_bundle_document("a", ["missing.bundle"])]}

    result = layout_from_document(document)

    assert [reference.describe() for reference in result.dangling_references] == [
        "bundle 'a' dependencies -> 'missing.bundle'"
    ]
    assert result.layout.built_in_bundles[0].dependencies == () and not result.is_complete


def test_layout_from_document_reports_dangling_asset_keys() -> None:
    """Asset and implicit reference keys should be checked as well."""
    file_document = {
        "name": "CAB-1",
        "assets": [
            {
                "guid": "guid-a",
                "assetPath": "Assets/a.prefab",
                "internalReferencedImplicitAssets": ["guid-gone"],
                "externallyReferencedAssets": ["guid-elsewhere"],
            }
        ],
        "otherAssets": [{"assetGuid": "guid-tex", "referencingAssets": ["guid-ghost"]}],
    }
    bundle = _bundle_document("a")
    bundle["files"] = [file_document]

    result = layout_from_document({"builtInBundles": [bundle]})

    assert {(item.field_name, item.missing_key) for item in result.dangling_references} == {
        ("internalReferencedImplicitAssets", "guid-gone"),
        ("externallyReferencedAssets", "guid-elsewhere"),
        ("referencingAssets", "guid-ghost"),
    }


def test_layout_from_document_ignores_unknown_fields() -> None:
    """Additive fields from newer producers should be tolerated."""
    bundle = _bundle_document("a")
    bundle["hashes"] = {"crc": 123}
    document = {"formatVersion": 99, "futureField": True, "builtInBundles": [bundle]}

    result = layout_from_document(document)

    assert result.lookup.bundle_by_name("a") is result.layout.built_in_bundles[0]


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"groups": {"name": "not-a-list"}},
        {"builtInBundles": [{"fileSize": 1}]},
        {"builtInBundles": [{"name": "a", "fileSize": -1}]},
        {"builtInBundles": [{"name": "a", "fileSize": True}]},
        {"builtInBundles": [{"name": "a"}, {"name": "a"}]},
        {"builtInBundles": [{"name": "a", "dependencies": ["a"]}]},
        {"formatVersion": "one"},
    ],
)
def test_layout_from_document_rejects_malformed_documents(document: object) -> None:
    """Schema and invariant violations should raise LayoutFormatError."""
    with pytest.raises(LayoutFormatError):
        layout_from_document(document)


def test_layout_from_document_expands_cyclic_dependencies() -> None:
    """Mutually dependent bundles should each expand to the other only."""
    document = {"builtInBundles": [_bundle_document("a", ["b"]), _bundle_document("b", ["a"])]}

    result = layout_from_document(document)
    first, second = result.layout.built_in_bundles

    assert first.expanded_dependencies == (second,)
    assert second.expanded_dependencies == (first,)
