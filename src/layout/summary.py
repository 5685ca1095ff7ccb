"""Aggregate statistics over a finalized layout.

This module derives counts, size totals, and implicit asset duplication
from the traversal surface without touching the graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from layout.model import BuildLayout
from layout.traversal import (
    enumerate_assets,
    enumerate_bundles,
    enumerate_files,
    enumerate_implicit_assets,
)


@dataclass(frozen=True)
class LayoutSummary:
    """Read-only summary of one build layout.

    Attributes:
        group_count: Number of groups.
        bundle_count: Number of bundles, built-in included.
        built_in_bundle_count: Number of bundles not owned by a group.
        file_count: Number of files across all bundles.
        asset_count: Number of explicit assets.
        implicit_asset_count: Number of implicit asset entries across files.
        total_bundle_size: Sum of bundle file sizes in bytes.
        total_serialized_size: Sum of explicit asset serialized sizes.
        total_streamed_size: Sum of explicit asset streamed sizes.
        duplicated_implicit_assets: Implicit asset guid to the names of every
            file it was packed into, for guids found in more than one file.
    """

    group_count: int
    bundle_count: int
    built_in_bundle_count: int
    file_count: int
    asset_count: int
    implicit_asset_count: int
    total_bundle_size: int
    total_serialized_size: int
    total_streamed_size: int
    duplicated_implicit_assets: Mapping[str, tuple[str, ...]]


def summarize_layout(layout: BuildLayout) -> LayoutSummary:
    """Summarize a layout.

    Args:
        layout: Layout to summarize.

    Returns:
        Counts, size totals, and duplicated implicit assets.
    """
    bundles = list(enumerate_bundles(layout))
    assets = list(enumerate_assets(layout))
    files_by_implicit_guid: dict[str, list[str]] = {}
    implicit_count = 0
    for implicit in enumerate_implicit_assets(layout):
        implicit_count += 1
        files_by_implicit_guid.setdefault(implicit.asset_guid, []).append(implicit.file.name)
    duplicated = {
        guid: tuple(file_names)
        for guid, file_names in files_by_implicit_guid.items()
        if len(file_names) > 1
    }
    return LayoutSummary(
        group_count=len(layout.groups),
        bundle_count=len(bundles),
        built_in_bundle_count=len(layout.built_in_bundles),
        file_count=sum(1 for _ in enumerate_files(layout)),
        asset_count=len(assets),
        implicit_asset_count=implicit_count,
        total_bundle_size=sum(bundle.file_size for bundle in bundles),
        total_serialized_size=sum(asset.serialized_size for asset in assets),
        total_streamed_size=sum(asset.streamed_size for asset in assets),
        duplicated_implicit_assets=duplicated,
    )
