"""Public SDK surface for build layouts.

This module provides a stable import path for layout producers and readers.
It re-exports the model, reader surfaces, persistence, and error types.
"""

from __future__ import annotations

from core.config import BuildLayoutConfig
from core.errors import (
    BuildLayoutConfigError,
    BuildLayoutError,
    DanglingReferenceError,
    FrozenModelError,
    InvalidKeyError,
    InvalidReferenceError,
    LayoutFormatError,
    LayoutNotFinalizedError,
)
from core.types import DanglingReference, SchemaData, SubFile
from layout.lookup import LayoutLookupTables
from layout.model import Bundle, BuildLayout, ExplicitAsset, File, Group, ImplicitAssetData
from layout.summary import LayoutSummary, summarize_layout
from layout.traversal import (
    enumerate_assets,
    enumerate_bundles,
    enumerate_files,
    enumerate_implicit_assets,
)
from store.layout_codec import LayoutLoadResult, layout_from_document, layout_to_document
from store.layout_io import load_layout, save_layout

__all__ = [
    "Bundle",
    "BuildLayout",
    "BuildLayoutConfig",
    "BuildLayoutConfigError",
    "BuildLayoutError",
    "DanglingReference",
    "DanglingReferenceError",
    "ExplicitAsset",
    "File",
    "FrozenModelError",
    "Group",
    "ImplicitAssetData",
    "InvalidKeyError",
    "InvalidReferenceError",
    "LayoutFormatError",
    "LayoutLoadResult",
    "LayoutLookupTables",
    "LayoutNotFinalizedError",
    "LayoutSummary",
    "SchemaData",
    "SubFile",
    "enumerate_assets",
    "enumerate_bundles",
    "enumerate_files",
    "enumerate_implicit_assets",
    "layout_from_document",
    "layout_to_document",
    "load_layout",
    "save_layout",
    "summarize_layout",
]
