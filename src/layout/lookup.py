"""Key-based lookup tables over a build layout.

This module indexes bundles, files, explicit assets, and groups by their
stable keys. Tables are filled either in one pass over a finalized layout
or incrementally by the document loader while it parses.
"""

from __future__ import annotations

from core.errors import LayoutNotFinalizedError
from layout.model import Bundle, BuildLayout, ExplicitAsset, File, Group
from layout.traversal import enumerate_assets, enumerate_bundles, enumerate_files


class LayoutLookupTables:
    """Lookup index from stable keys to layout entities.

    Registering a key twice keeps the last entity registered. A conforming
    layout never produces duplicates, so this only affects documents from
    producers that skipped the construction checks.
    """

    def __init__(self) -> None:
        self.bundles: dict[str, Bundle] = {}
        self.files: dict[str, File] = {}
        self.assets: dict[str, ExplicitAsset] = {}
        self.groups: dict[str, Group] = {}

    @classmethod
    def from_layout(cls, layout: BuildLayout) -> "LayoutLookupTables":
        """Index every group, bundle, file, and explicit asset of a layout.

        Args:
            layout: Finalized layout to index.

        Returns:
            Populated lookup tables.

        Raises:
            LayoutNotFinalizedError: If the layout is still being built.
        """
        if not layout.is_finalized:
            raise LayoutNotFinalizedError(
                "Cannot index a layout before finalize(). "
                "Finish construction and call finalize() first."
            )
        tables = cls()
        for group in layout.groups:
            tables.add_group(group)
        for bundle in enumerate_bundles(layout):
            tables.add_bundle(bundle)
        for file in enumerate_files(layout):
            tables.add_file(file)
        for asset in enumerate_assets(layout):
            tables.add_asset(asset)
        return tables

    def add_group(self, group: Group) -> None:
        self.groups[group.name] = group

    def add_bundle(self, bundle: Bundle) -> None:
        self.bundles[bundle.name] = bundle

    def add_file(self, file: File) -> None:
        self.files[file.name] = file

    def add_asset(self, asset: ExplicitAsset) -> None:
        self.assets[asset.guid] = asset

    def bundle_by_name(self, name: str) -> Bundle | None:
        return self.bundles.get(name)

    def file_by_name(self, name: str) -> File | None:
        return self.files.get(name)

    def asset_by_guid(self, guid: str) -> ExplicitAsset | None:
        return self.assets.get(guid)

    def group_by_name(self, name: str) -> Group | None:
        """Return the group registered under ``name``, or None."""
        return self.groups.get(name)
