"""Order-preserving flattening over a finalized layout.

Every function here is a generator: calling it again yields a fresh
sequence, and nothing is materialized or mutated along the way.
"""

from __future__ import annotations

from typing import Iterator

from layout.model import Bundle, BuildLayout, ExplicitAsset, File, ImplicitAssetData


def enumerate_bundles(layout: BuildLayout) -> Iterator[Bundle]:
    """Yield built-in bundles, then grouped bundles in group and bundle order."""
    yield from layout.built_in_bundles
    for group in layout.groups:
        yield from group.bundles


def _bundles_of(source: BuildLayout | Bundle) -> Iterator[Bundle]:
    if isinstance(source, Bundle):
        yield source
    else:
        yield from enumerate_bundles(source)


def enumerate_files(source: BuildLayout | Bundle) -> Iterator[File]:
    """Yield files of a layout or a single bundle.

    Args:
        source: Layout to flatten, or one bundle.

    Returns:
        Files in bundle order, then file order within each bundle.
    """
    for bundle in _bundles_of(source):
        yield from bundle.files


def enumerate_assets(source: BuildLayout | Bundle) -> Iterator[ExplicitAsset]:
    """Yield explicit assets in file order, then asset order within each file."""
    for file in enumerate_files(source):
        yield from file.assets


def enumerate_implicit_assets(source: BuildLayout | Bundle) -> Iterator[ImplicitAssetData]:
    """Yield implicit asset data in file order, then stored order within each file."""
    for file in enumerate_files(source):
        yield from file.other_assets
