"""Build layout entity graph.

This module owns groups, bundles, files, and assets recorded by a build.
Entities live in flat tables keyed by stable names and guids; every
back-reference and cross-reference is stored as a key and resolved
through the owning layout, so one key always yields one instance.
The producer populates a layout through the ``add_*`` operations,
calls ``finalize`` once, and hands the frozen graph to readers.
"""

from __future__ import annotations

from typing import Any

from core.errors import FrozenModelError, InvalidKeyError, InvalidReferenceError
from core.logging_config import get_logger
from core.types import SchemaData, SubFile
from layout.dependency_closure import build_dependency_closures

_LOGGER = get_logger(__name__)


class _LayoutEntity:
    """Base for entities whose attributes freeze with their layout."""

    _layout: "BuildLayout"

    def __setattr__(self, name: str, value: Any) -> None:
        layout = self.__dict__.get("_layout")
        if layout is not None and layout.is_finalized:
            raise FrozenModelError(
                f"Cannot set '{name}' on {type(self).__name__}: the layout is finalized. "
                "Build a new layout instead of editing a published one."
            )
        object.__setattr__(self, name, value)


class Group(_LayoutEntity):
    """Logical asset group that produced zero or more bundles."""

    def __init__(self, layout: BuildLayout, name: str, guid: str, packing_mode: str) -> None:
        self._layout = layout
        self.name = name
        self.guid = guid
        self.packing_mode = packing_mode
        self._bundle_names: list[str] = []
        self._schemas: list[SchemaData] = []

    @property
    def bundles(self) -> tuple[Bundle, ...]:
        """Bundles owned by this group in insertion order."""
        return tuple(self._layout._bundles[name] for name in self._bundle_names)

    @property
    def schemas(self) -> tuple[SchemaData, ...]:
        return tuple(self._schemas)

    def __repr__(self) -> str:
        return f"Group(name={self.name!r}, guid={self.guid!r})"


class Bundle(_LayoutEntity):
    """Packed build artifact owned by a group or built in."""

    def __init__(
        self,
        layout: BuildLayout,
        name: str,
        file_size: int,
        compression: str,
        group_guid: str | None,
    ) -> None:
        self._layout = layout
        self.name = name
        self.file_size = file_size
        self.compression = compression
        self._group_guid = group_guid
        self._file_names: list[str] = []
        self._dependency_names: dict[str, None] = {}
        self._expanded_names: tuple[str, ...] = ()

    @property
    def group(self) -> Group | None:
        """Owning group, or None for built-in bundles."""
        if self._group_guid is None:
            return None
        return self._layout._groups[self._group_guid]

    @property
    def is_built_in(self) -> bool:
        return self._group_guid is None

    @property
    def files(self) -> tuple[File, ...]:
        return tuple(self._layout._files[name] for name in self._file_names)

    @property
    def dependencies(self) -> tuple[Bundle, ...]:
        """Direct dependencies in the order they were first added."""
        return tuple(self._layout._bundles[name] for name in self._dependency_names)

    @property
    def expanded_dependencies(self) -> tuple[Bundle, ...]:
        """Transitive dependencies in depth-first discovery order.

        Empty until the owning layout is finalized.
        """
        return tuple(self._layout._bundles[name] for name in self._expanded_names)

    def __repr__(self) -> str:
        return f"Bundle(name={self.name!r})"


class File(_LayoutEntity):
    """Serialized file written for a bundle."""

    def __init__(
        self,
        layout: BuildLayout,
        bundle_name: str,
        name: str,
        write_result_filename: str,
        bundle_object_size: int,
        preload_info_size: int,
        script_count: int,
        script_size: int,
    ) -> None:
        self._layout = layout
        self._bundle_name = bundle_name
        self.name = name
        self.write_result_filename = write_result_filename
        self.bundle_object_size = bundle_object_size
        self.preload_info_size = preload_info_size
        self.script_count = script_count
        self.script_size = script_size
        self._sub_files: list[SubFile] = []
        self._asset_guids: list[str] = []
        self._implicit_guids: list[str] = []

    @property
    def bundle(self) -> Bundle:
        return self._layout._bundles[self._bundle_name]

    @property
    def sub_files(self) -> tuple[SubFile, ...]:
        return tuple(self._sub_files)

    @property
    def assets(self) -> tuple[ExplicitAsset, ...]:
        return tuple(self._layout._assets[guid] for guid in self._asset_guids)

    @property
    def other_assets(self) -> tuple[ImplicitAssetData, ...]:
        """Implicit asset data pulled into this file by its explicit assets."""
        return tuple(
            self._layout._implicit_assets[(self.name, guid)] for guid in self._implicit_guids
        )

    def implicit_asset(self, asset_guid: str) -> ImplicitAssetData | None:
        """Return implicit data for ``asset_guid`` packed into this file, if any."""
        return self._layout._implicit_assets.get((self.name, asset_guid))

    def __repr__(self) -> str:
        return f"File(name={self.name!r}, bundle={self._bundle_name!r})"


class ExplicitAsset(_LayoutEntity):
    """Asset included in a file by user configuration."""

    def __init__(
        self,
        layout: BuildLayout,
        file_name: str,
        guid: str,
        asset_path: str,
        addressable_name: str | None,
        serialized_size: int,
        streamed_size: int,
    ) -> None:
        self._layout = layout
        self._file_name = file_name
        self.guid = guid
        self.asset_path = asset_path
        self.addressable_name = addressable_name
        self.serialized_size = serialized_size
        self.streamed_size = streamed_size
        self._internal_implicit_guids: list[str] = []
        self._internal_explicit_guids: list[str] = []
        self._external_guids: list[str] = []

    @property
    def file(self) -> File:
        return self._layout._files[self._file_name]

    @property
    def internal_referenced_implicit_assets(self) -> tuple[ImplicitAssetData, ...]:
        return tuple(
            self._layout._implicit_assets[(self._file_name, guid)]
            for guid in self._internal_implicit_guids
        )

    @property
    def internal_referenced_explicit_assets(self) -> tuple[ExplicitAsset, ...]:
        return tuple(self._layout._assets[guid] for guid in self._internal_explicit_guids)

    @property
    def externally_referenced_assets(self) -> tuple[ExplicitAsset, ...]:
        """Referenced explicit assets that were packed into other files."""
        return tuple(self._layout._assets[guid] for guid in self._external_guids)

    def __repr__(self) -> str:
        return f"ExplicitAsset(guid={self.guid!r}, asset_path={self.asset_path!r})"


class ImplicitAssetData(_LayoutEntity):
    """Asset data packed into a file only because explicit assets reference it."""

    def __init__(
        self,
        layout: BuildLayout,
        file_name: str,
        asset_guid: str,
        asset_path: str,
        object_count: int,
        serialized_size: int,
        streamed_size: int,
    ) -> None:
        self._layout = layout
        self._file_name = file_name
        self.asset_guid = asset_guid
        self.asset_path = asset_path
        self.object_count = object_count
        self.serialized_size = serialized_size
        self.streamed_size = streamed_size
        self._referencing_guids: list[str] = []

    @property
    def file(self) -> File:
        return self._layout._files[self._file_name]

    @property
    def referencing_assets(self) -> tuple[ExplicitAsset, ...]:
        return tuple(self._layout._assets[guid] for guid in self._referencing_guids)

    def __repr__(self) -> str:
        return f"ImplicitAssetData(asset_guid={self.asset_guid!r}, file={self._file_name!r})"


class BuildLayout:
    """Root of one build's layout graph.

    Construction is single-writer: every ``add_*`` call takes the logical
    parent, wires the back-reference, and returns the new entity. After
    ``finalize`` the graph is immutable and safe to share between readers.
    """

    def __init__(self, tool_version: str, package_version: str) -> None:
        """Create an empty layout.

        Args:
            tool_version: Version of the tool that ran the build.
            package_version: Version of the bundling package.
        """
        self.tool_version = tool_version
        self.package_version = package_version
        self._groups: dict[str, Group] = {}
        self._built_in_names: list[str] = []
        self._bundles: dict[str, Bundle] = {}
        self._files: dict[str, File] = {}
        self._assets: dict[str, ExplicitAsset] = {}
        self._implicit_assets: dict[tuple[str, str], ImplicitAssetData] = {}
        self._finalized = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_finalized"):
            raise FrozenModelError(
                f"Cannot set '{name}' on BuildLayout: the layout is finalized. "
                "Build a new layout instead of editing a published one."
            )
        object.__setattr__(self, name, value)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def groups(self) -> tuple[Group, ...]:
        return tuple(self._groups.values())

    @property
    def built_in_bundles(self) -> tuple[Bundle, ...]:
        return tuple(self._bundles[name] for name in self._built_in_names)

    def add_group(self, name: str, guid: str, packing_mode: str) -> Group:
        """Add a group to the layout.

        Args:
            name: Display name of the group.
            guid: Unique group identifier.
            packing_mode: Packing mode label.

        Returns:
            The new group.

        Raises:
            InvalidKeyError: If the guid is empty or already used.
            FrozenModelError: If the layout is finalized.
        """
        self._ensure_mutable("add_group")
        _require_key(name, "group name")
        _require_unique(guid, "group guid", self._groups)
        group = Group(self, name, guid, packing_mode)
        self._groups[guid] = group
        return group

    def add_schema(self, group: Group, schema: SchemaData) -> None:
        """Append a schema snapshot to a group."""
        self._ensure_mutable("add_schema")
        self._require_member(group, self._groups, group.guid)
        group._schemas.append(schema)

    def add_bundle(
        self,
        owner: Group | None,
        name: str,
        file_size: int = 0,
        compression: str = "",
    ) -> Bundle:
        """Add a bundle owned by ``owner``, or a built-in bundle when owner is None.

        Args:
            owner: Owning group, or None for a built-in bundle.
            name: Bundle name, unique across the layout.
            file_size: Size of the bundle on disk in bytes.
            compression: Compression algorithm label.

        Returns:
            The new bundle.

        Raises:
            InvalidKeyError: If the name is empty or already used.
            InvalidReferenceError: If owner belongs to another layout.
            FrozenModelError: If the layout is finalized.
        """
        self._ensure_mutable("add_bundle")
        if owner is not None:
            self._require_member(owner, self._groups, owner.guid)
        _require_unique(name, "bundle name", self._bundles)
        bundle = Bundle(self, name, file_size, compression, owner.guid if owner else None)
        self._bundles[name] = bundle
        if owner is None:
            self._built_in_names.append(name)
        else:
            owner._bundle_names.append(name)
        return bundle

    def add_file(
        self,
        bundle: Bundle,
        name: str,
        write_result_filename: str = "",
        bundle_object_size: int = 0,
        preload_info_size: int = 0,
        script_count: int = 0,
        script_size: int = 0,
    ) -> File:
        """Add a file written for ``bundle``.

        Raises:
            InvalidKeyError: If the file name is empty or already used.
            InvalidReferenceError: If bundle belongs to another layout.
            FrozenModelError: If the layout is finalized.
        """
        self._ensure_mutable("add_file")
        self._require_member(bundle, self._bundles, bundle.name)
        _require_unique(name, "file name", self._files)
        file = File(
            self,
            bundle.name,
            name,
            write_result_filename,
            bundle_object_size,
            preload_info_size,
            script_count,
            script_size,
        )
        self._files[name] = file
        bundle._file_names.append(name)
        return file

    def add_sub_file(self, file: File, sub_file: SubFile) -> None:
        self._ensure_mutable("add_sub_file")
        self._require_member(file, self._files, file.name)
        file._sub_files.append(sub_file)

    def add_asset(
        self,
        file: File,
        guid: str,
        asset_path: str,
        addressable_name: str | None = None,
        serialized_size: int = 0,
        streamed_size: int = 0,
    ) -> ExplicitAsset:
        """Add an explicit asset packed into ``file``.

        Raises:
            InvalidKeyError: If the guid is empty or already used.
            InvalidReferenceError: If file belongs to another layout.
            FrozenModelError: If the layout is finalized.
        """
        self._ensure_mutable("add_asset")
        self._require_member(file, self._files, file.name)
        _require_unique(guid, "asset guid", self._assets)
        asset = ExplicitAsset(
            self, file.name, guid, asset_path, addressable_name, serialized_size, streamed_size
        )
        self._assets[guid] = asset
        file._asset_guids.append(guid)
        return asset

    def add_implicit_asset(
        self,
        file: File,
        asset_guid: str,
        asset_path: str,
        object_count: int = 0,
        serialized_size: int = 0,
        streamed_size: int = 0,
    ) -> ImplicitAssetData:
        """Add implicit asset data packed into ``file``.

        The same asset guid may appear in several files, but only once per file.

        Raises:
            InvalidKeyError: If the guid is empty or already present in the file.
            InvalidReferenceError: If file belongs to another layout.
            FrozenModelError: If the layout is finalized.
        """
        self._ensure_mutable("add_implicit_asset")
        self._require_member(file, self._files, file.name)
        _require_key(asset_guid, "implicit asset guid")
        table_key = (file.name, asset_guid)
        if table_key in self._implicit_assets:
            raise InvalidKeyError(
                f"Duplicate implicit asset guid '{asset_guid}' in file '{file.name}'. "
                "Record each implicit asset once per file."
            )
        implicit = ImplicitAssetData(
            self, file.name, asset_guid, asset_path, object_count, serialized_size, streamed_size
        )
        self._implicit_assets[table_key] = implicit
        file._implicit_guids.append(asset_guid)
        return implicit

    def add_dependency(self, bundle: Bundle, dependency: Bundle) -> None:
        """Record that ``bundle`` directly depends on ``dependency``.

        Repeated edges are ignored.

        Raises:
            InvalidReferenceError: For self-dependencies or foreign bundles.
            FrozenModelError: If the layout is finalized.
        """
        self._ensure_mutable("add_dependency")
        self._require_member(bundle, self._bundles, bundle.name)
        self._require_member(dependency, self._bundles, dependency.name)
        if dependency is bundle:
            raise InvalidReferenceError(
                f"Bundle '{bundle.name}' cannot depend on itself. Remove the self edge."
            )
        bundle._dependency_names[dependency.name] = None

    def add_asset_reference(self, asset: ExplicitAsset, referenced: ExplicitAsset) -> None:
        """Record that ``asset`` references another explicit asset.

        The edge is stored as internal when both assets share a file and
        as external otherwise. Repeated edges are ignored.
        """
        self._ensure_mutable("add_asset_reference")
        self._require_member(asset, self._assets, asset.guid)
        self._require_member(referenced, self._assets, referenced.guid)
        if referenced is asset:
            raise InvalidReferenceError(
                f"Asset '{asset.guid}' cannot reference itself. Remove the self reference."
            )
        if referenced._file_name == asset._file_name:
            targets = asset._internal_explicit_guids
        else:
            targets = asset._external_guids
        if referenced.guid not in targets:
            targets.append(referenced.guid)

    def add_implicit_reference(self, asset: ExplicitAsset, implicit: ImplicitAssetData) -> None:
        """Link an explicit asset to implicit data it pulled into its own file.

        Both directions are wired: the asset's internal implicit list and the
        implicit data's referencing assets.
        """
        self._ensure_mutable("add_implicit_reference")
        self._require_member(asset, self._assets, asset.guid)
        self._require_member(
            implicit, self._implicit_assets, (implicit._file_name, implicit.asset_guid)
        )
        if implicit._file_name != asset._file_name:
            raise InvalidReferenceError(
                f"Implicit asset '{implicit.asset_guid}' is packed into file "
                f"'{implicit._file_name}', not '{asset._file_name}' where asset "
                f"'{asset.guid}' lives. Reference implicit data from the same file."
            )
        if implicit.asset_guid not in asset._internal_implicit_guids:
            asset._internal_implicit_guids.append(implicit.asset_guid)
        if asset.guid not in implicit._referencing_guids:
            implicit._referencing_guids.append(asset.guid)

    def finalize(self) -> None:
        """Compute dependency closures and freeze the layout.

        Raises:
            FrozenModelError: If the layout was already finalized.
        """
        self._ensure_mutable("finalize")
        edges = {name: tuple(bundle._dependency_names) for name, bundle in self._bundles.items()}
        closures = build_dependency_closures(edges)
        for name, bundle in self._bundles.items():
            bundle._expanded_names = closures[name]
        self._finalized = True
        _LOGGER.debug(
            "layout_finalized",
            group_count=len(self._groups),
            bundle_count=len(self._bundles),
            file_count=len(self._files),
            asset_count=len(self._assets),
        )

    def _ensure_mutable(self, operation: str) -> None:
        if self._finalized:
            raise FrozenModelError(
                f"Cannot {operation}: the layout is finalized. "
                "Populate the layout completely before calling finalize()."
            )

    def _require_member(self, entity: object, table: dict[Any, Any], key: object) -> None:
        if table.get(key) is not entity:
            raise InvalidReferenceError(
                f"{type(entity).__name__} {key!r} does not belong to this layout. "
                "Create entities through the same layout they are wired into."
            )


def _require_key(value: str, label: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidKeyError(f"Invalid {label}: expected a non-empty string, got {value!r}.")


def _require_unique(value: str, label: str, table: dict[str, Any]) -> None:
    _require_key(value, label)
    if value in table:
        raise InvalidKeyError(
            f"Duplicate {label} '{value}'. Each {label} must be unique within a layout."
        )
