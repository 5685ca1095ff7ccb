"""Document codec for build layouts.

This module converts a layout graph to and from a plain document in
which every cross-reference is a stable key and every entity body is
written once under its owner. Loading rebuilds the owned tree first,
then resolves reference keys through lookup tables filled during parse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from core.constants import LAYOUT_FORMAT_VERSION
from core.errors import (
    InvalidKeyError,
    InvalidReferenceError,
    LayoutFormatError,
    LayoutNotFinalizedError,
)
from core.logging_config import get_logger
from core.types import DanglingReference, SchemaData, SubFile
from layout.lookup import LayoutLookupTables
from layout.model import Bundle, BuildLayout, ExplicitAsset, File, Group, ImplicitAssetData

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class LayoutLoadResult:
    """Outcome of decoding a layout document.

    Attributes:
        layout: Finalized layout with every resolvable reference wired.
        lookup: Lookup tables built while decoding.
        dangling_references: Reference keys that did not resolve.
    """

    layout: BuildLayout
    lookup: LayoutLookupTables
    dangling_references: tuple[DanglingReference, ...]

    @property
    def is_complete(self) -> bool:
        return not self.dangling_references


@dataclass
class _PendingReferences:
    """Reference keys read in the first pass, resolved in the second."""

    dependencies: list[tuple[Bundle, list[str]]] = field(default_factory=list)
    expanded_dependencies: list[tuple[Bundle, list[str]]] = field(default_factory=list)
    implicit_links: list[tuple[ExplicitAsset, list[str]]] = field(default_factory=list)
    explicit_links: list[tuple[ExplicitAsset, str, list[str]]] = field(default_factory=list)
    referencing_links: list[tuple[ImplicitAssetData, list[str]]] = field(default_factory=list)


def layout_to_document(layout: BuildLayout) -> dict[str, Any]:
    """Encode a finalized layout as a key-referenced document.

    Args:
        layout: Layout to encode.

    Returns:
        JSON and YAML compatible document.

    Raises:
        LayoutNotFinalizedError: If the layout is still being built.
    """
    if not layout.is_finalized:
        raise LayoutNotFinalizedError(
            "Cannot serialize a layout before finalize(). "
            "Dependency closures are only computed by finalize()."
        )
    return {
        "formatVersion": LAYOUT_FORMAT_VERSION,
        "toolVersion": layout.tool_version,
        "packageVersion": layout.package_version,
        "groups": [_group_to_dict(group) for group in layout.groups],
        "builtInBundles": [_bundle_to_dict(bundle) for bundle in layout.built_in_bundles],
    }


def _group_to_dict(group: Group) -> dict[str, Any]:
    return {
        "name": group.name,
        "guid": group.guid,
        "packingMode": group.packing_mode,
        "schemas": [
            {
                "guid": schema.guid,
                "type": schema.type,
                "kvpDetails": [[key, value] for key, value in schema.kvp_details],
            }
            for schema in group.schemas
        ],
        "bundles": [_bundle_to_dict(bundle) for bundle in group.bundles],
    }


def _bundle_to_dict(bundle: Bundle) -> dict[str, Any]:
    group = bundle.group
    return {
        "name": bundle.name,
        "fileSize": bundle.file_size,
        "compression": bundle.compression,
        "group": group.guid if group is not None else None,
        "dependencies": [dependency.name for dependency in bundle.dependencies],
        "expandedDependencies": [
            dependency.name for dependency in bundle.expanded_dependencies
        ],
        "files": [_file_to_dict(file) for file in bundle.files],
    }


def _file_to_dict(file: File) -> dict[str, Any]:
    return {
        "name": file.name,
        "bundle": file.bundle.name,
        "writeResultFilename": file.write_result_filename,
        "bundleObjectSize": file.bundle_object_size,
        "preloadInfoSize": file.preload_info_size,
        "scriptCount": file.script_count,
        "scriptSize": file.script_size,
        "subFiles": [
            {
                "name": sub_file.name,
                "isSerializedFile": sub_file.is_serialized_file,
                "size": sub_file.size,
            }
            for sub_file in file.sub_files
        ],
        "assets": [_asset_to_dict(asset) for asset in file.assets],
        "otherAssets": [_implicit_to_dict(implicit) for implicit in file.other_assets],
    }


def _asset_to_dict(asset: ExplicitAsset) -> dict[str, Any]:
    return {
        "guid": asset.guid,
        "assetPath": asset.asset_path,
        "addressableName": asset.addressable_name,
        "serializedSize": asset.serialized_size,
        "streamedSize": asset.streamed_size,
        "file": asset.file.name,
        "internalReferencedImplicitAssets": [
            implicit.asset_guid for implicit in asset.internal_referenced_implicit_assets
        ],
        "internalReferencedExplicitAssets": [
            other.guid for other in asset.internal_referenced_explicit_assets
        ],
        "externallyReferencedAssets": [
            other.guid for other in asset.externally_referenced_assets
        ],
    }


def _implicit_to_dict(implicit: ImplicitAssetData) -> dict[str, Any]:
    return {
        "assetGuid": implicit.asset_guid,
        "assetPath": implicit.asset_path,
        "objectCount": implicit.object_count,
        "serializedSize": implicit.serialized_size,
        "streamedSize": implicit.streamed_size,
        "referencingAssets": [asset.guid for asset in implicit.referencing_assets],
    }


def layout_from_document(payload: object) -> LayoutLoadResult:
    """Decode a layout document into a finalized, identity-preserving graph.

    Unknown fields are ignored. Reference keys that do not resolve are
    reported in the result and left unwired.

    Args:
        payload: Parsed document.

    Returns:
        Load result with layout, lookup tables, and dangling references.

    Raises:
        LayoutFormatError: If the document does not match the layout schema.
    """
    root = _expect_mapping(payload, "layout document")
    _check_format_version(root)
    layout = BuildLayout(
        tool_version=_optional_str(root, "toolVersion", "layout document"),
        package_version=_optional_str(root, "packageVersion", "layout document"),
    )
    tables = LayoutLookupTables()
    pending = _PendingReferences()
    try:
        for group_payload in _sequence_field(root, "groups", "layout document"):
            _load_group(layout, tables, pending, group_payload)
        for bundle_payload in _sequence_field(root, "builtInBundles", "layout document"):
            _load_bundle(layout, tables, pending, None, bundle_payload)
        dangling = _resolve_references(layout, tables, pending)
    except (InvalidKeyError, InvalidReferenceError) as error:
        raise LayoutFormatError(
            f"Layout document violates layout invariants: {error}"
        ) from error
    layout.finalize()
    for reference in dangling:
        _LOGGER.warning(
            "dangling_reference",
            entity_kind=reference.entity_kind,
            entity_key=reference.entity_key,
            field=reference.field_name,
            missing_key=reference.missing_key,
        )
    return LayoutLoadResult(layout=layout, lookup=tables, dangling_references=tuple(dangling))


def _check_format_version(root: Mapping[str, object]) -> None:
    raw_version = root.get("formatVersion", LAYOUT_FORMAT_VERSION)
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise LayoutFormatError(
            f"Layout field 'formatVersion' must be an integer, got {type(raw_version).__name__}."
        )
    if raw_version > LAYOUT_FORMAT_VERSION:
        _LOGGER.warning(
            "layout_format_version_newer",
            document_version=raw_version,
            supported_version=LAYOUT_FORMAT_VERSION,
        )


def _load_group(
    layout: BuildLayout,
    tables: LayoutLookupTables,
    pending: _PendingReferences,
    payload: object,
) -> None:
    mapping = _expect_mapping(payload, "group")
    group = layout.add_group(
        name=_require_str(mapping, "name", "group"),
        guid=_require_str(mapping, "guid", "group"),
        packing_mode=_optional_str(mapping, "packingMode", "group"),
    )
    tables.add_group(group)
    context = f"group '{group.name}'"
    for schema_payload in _sequence_field(mapping, "schemas", context):
        layout.add_schema(group, _schema_from_dict(schema_payload, context))
    for bundle_payload in _sequence_field(mapping, "bundles", context):
        _load_bundle(layout, tables, pending, group, bundle_payload)


def _schema_from_dict(payload: object, context: str) -> SchemaData:
    mapping = _expect_mapping(payload, f"schema of {context}")
    details = []
    for pair in _sequence_field(mapping, "kvpDetails", f"schema of {context}"):
        items = _expect_sequence(pair, f"kvpDetails entry of {context}")
        if len(items) != 2 or not all(isinstance(item, str) for item in items):
            raise LayoutFormatError(
                f"Invalid kvpDetails entry of {context}: expected [key, value] strings."
            )
        details.append((str(items[0]), str(items[1])))
    return SchemaData(
        guid=_optional_str(mapping, "guid", f"schema of {context}"),
        type=_optional_str(mapping, "type", f"schema of {context}"),
        kvp_details=tuple(details),
    )


def _load_bundle(
    layout: BuildLayout,
    tables: LayoutLookupTables,
    pending: _PendingReferences,
    owner: Group | None,
    payload: object,
) -> None:
    mapping = _expect_mapping(payload, "bundle")
    bundle = layout.add_bundle(
        owner,
        name=_require_str(mapping, "name", "bundle"),
        file_size=_size_field(mapping, "fileSize", "bundle"),
        compression=_optional_str(mapping, "compression", "bundle"),
    )
    tables.add_bundle(bundle)
    context = f"bundle '{bundle.name}'"
    pending.dependencies.append((bundle, _key_list(mapping, "dependencies", context)))
    pending.expanded_dependencies.append(
        (bundle, _key_list(mapping, "expandedDependencies", context))
    )
    for file_payload in _sequence_field(mapping, "files", context):
        _load_file(layout, tables, pending, bundle, file_payload)


def _load_file(
    layout: BuildLayout,
    tables: LayoutLookupTables,
    pending: _PendingReferences,
    bundle: Bundle,
    payload: object,
) -> None:
    mapping = _expect_mapping(payload, "file")
    name = _require_str(mapping, "name", "file")
    context = f"file '{name}'"
    file = layout.add_file(
        bundle,
        name=name,
        write_result_filename=_optional_str(mapping, "writeResultFilename", context),
        bundle_object_size=_size_field(mapping, "bundleObjectSize", context),
        preload_info_size=_size_field(mapping, "preloadInfoSize", context),
        script_count=_size_field(mapping, "scriptCount", context),
        script_size=_size_field(mapping, "scriptSize", context),
    )
    tables.add_file(file)
    for sub_payload in _sequence_field(mapping, "subFiles", context):
        sub_mapping = _expect_mapping(sub_payload, f"sub file of {context}")
        is_serialized = sub_mapping.get("isSerializedFile", False)
        if not isinstance(is_serialized, bool):
            raise LayoutFormatError(
                f"Invalid sub file of {context}: 'isSerializedFile' must be a boolean."
            )
        layout.add_sub_file(
            file,
            SubFile(
                name=_require_str(sub_mapping, "name", f"sub file of {context}"),
                is_serialized_file=is_serialized,
                size=_size_field(sub_mapping, "size", f"sub file of {context}"),
            ),
        )
    for implicit_payload in _sequence_field(mapping, "otherAssets", context):
        implicit_mapping = _expect_mapping(implicit_payload, f"implicit asset of {context}")
        implicit_context = f"implicit asset of {context}"
        implicit = layout.add_implicit_asset(
            file,
            asset_guid=_require_str(implicit_mapping, "assetGuid", implicit_context),
            asset_path=_optional_str(implicit_mapping, "assetPath", implicit_context),
            object_count=_size_field(implicit_mapping, "objectCount", implicit_context),
            serialized_size=_size_field(implicit_mapping, "serializedSize", implicit_context),
            streamed_size=_size_field(implicit_mapping, "streamedSize", implicit_context),
        )
        pending.referencing_links.append(
            (implicit, _key_list(implicit_mapping, "referencingAssets", implicit_context))
        )
    for asset_payload in _sequence_field(mapping, "assets", context):
        _load_asset(layout, tables, pending, file, asset_payload)


def _load_asset(
    layout: BuildLayout,
    tables: LayoutLookupTables,
    pending: _PendingReferences,
    file: File,
    payload: object,
) -> None:
    mapping = _expect_mapping(payload, "asset")
    guid = _require_str(mapping, "guid", "asset")
    context = f"asset '{guid}'"
    addressable_name = mapping.get("addressableName")
    if addressable_name is not None and not isinstance(addressable_name, str):
        raise LayoutFormatError(f"Invalid {context}: 'addressableName' must be a string.")
    asset = layout.add_asset(
        file,
        guid=guid,
        asset_path=_optional_str(mapping, "assetPath", context),
        addressable_name=addressable_name,
        serialized_size=_size_field(mapping, "serializedSize", context),
        streamed_size=_size_field(mapping, "streamedSize", context),
    )
    tables.add_asset(asset)
    pending.implicit_links.append(
        (asset, _key_list(mapping, "internalReferencedImplicitAssets", context))
    )
    for field_name in ("internalReferencedExplicitAssets", "externallyReferencedAssets"):
        pending.explicit_links.append((asset, field_name, _key_list(mapping, field_name, context)))


def _resolve_references(
    layout: BuildLayout,
    tables: LayoutLookupTables,
    pending: _PendingReferences,
) -> list[DanglingReference]:
    """Wire every pending reference, collecting keys that do not resolve."""
    dangling: list[DanglingReference] = []
    for bundle, keys in pending.dependencies:
        for key in keys:
            target = tables.bundle_by_name(key)
            if target is None:
                dangling.append(DanglingReference("bundle", bundle.name, "dependencies", key))
            else:
                layout.add_dependency(bundle, target)
    for bundle, keys in pending.expanded_dependencies:
        for key in keys:
            if tables.bundle_by_name(key) is None:
                dangling.append(
                    DanglingReference("bundle", bundle.name, "expandedDependencies", key)
                )
    for asset, keys in pending.implicit_links:
        for key in keys:
            implicit = asset.file.implicit_asset(key)
            if implicit is None:
                dangling.append(
                    DanglingReference("asset", asset.guid, "internalReferencedImplicitAssets", key)
                )
            else:
                layout.add_implicit_reference(asset, implicit)
    for asset, field_name, keys in pending.explicit_links:
        for key in keys:
            referenced = tables.asset_by_guid(key)
            if referenced is None:
                dangling.append(DanglingReference("asset", asset.guid, field_name, key))
            else:
                layout.add_asset_reference(asset, referenced)
    for implicit, keys in pending.referencing_links:
        for key in keys:
            referencing = tables.asset_by_guid(key)
            if referencing is None:
                dangling.append(
                    DanglingReference(
                        "implicit_asset", implicit.asset_guid, "referencingAssets", key
                    )
                )
            else:
                layout.add_implicit_reference(referencing, implicit)
    return dangling


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        return value
    raise LayoutFormatError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise LayoutFormatError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _sequence_field(mapping: Mapping[str, object], key: str, context: str) -> Sequence[object]:
    value = mapping.get(key)
    if value is None:
        return ()
    return _expect_sequence(value, f"'{key}' of {context}")


def _key_list(mapping: Mapping[str, object], key: str, context: str) -> list[str]:
    keys = []
    for item in _sequence_field(mapping, key, context):
        if not isinstance(item, str) or not item:
            raise LayoutFormatError(
                f"Invalid '{key}' of {context}: expected non-empty string keys, got {item!r}."
            )
        keys.append(item)
    return keys


def _require_str(mapping: Mapping[str, object], key: str, context: str) -> str:
    value = mapping.get(key)
    if not isinstance(value, str) or not value:
        raise LayoutFormatError(
            f"Invalid {context}: field '{key}' must be a non-empty string, got {value!r}."
        )
    return value


def _optional_str(mapping: Mapping[str, object], key: str, context: str) -> str:
    value = mapping.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise LayoutFormatError(
            f"Invalid {context}: field '{key}' must be a string, got {type(value).__name__}."
        )
    return value


def _size_field(mapping: Mapping[str, object], key: str, context: str) -> int:
    value = mapping.get(key, 0)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise LayoutFormatError(
            f"Invalid {context}: field '{key}' must be a non-negative integer, got {value!r}."
        )
    return value
