"""Build layout CLI entry points.

This module exposes commands for inspecting persisted build layouts.
It maps argparse commands onto load, traversal, and summary calls.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from core.errors import DanglingReferenceError, LayoutFormatError
from layout.summary import summarize_layout
from layout.traversal import enumerate_bundles
from store.layout_codec import LayoutLoadResult
from store.layout_io import load_layout


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="buildlayout", description="Build layout inspection CLI")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on unresolved references, overriding BUILDLAYOUT_STRICT_REFERENCES",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    summary_parser = subparsers.add_parser("summary", help="Print layout totals")
    summary_parser.add_argument("path", help="Layout document path")
    bundles_parser = subparsers.add_parser("bundles", help="List bundles in traversal order")
    bundles_parser.add_argument("path", help="Layout document path")
    dependencies_parser = subparsers.add_parser(
        "dependencies", help="List the expanded dependencies of one bundle"
    )
    dependencies_parser.add_argument("path", help="Layout document path")
    dependencies_parser.add_argument("bundle", help="Bundle name")
    validate_parser = subparsers.add_parser("validate", help="Report unresolved references")
    validate_parser.add_argument("path", help="Layout document path")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the build layout CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        strict = False if args.command == "validate" else args.strict
        result = load_layout(args.path, strict=strict)
    except (LayoutFormatError, DanglingReferenceError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    if args.command == "summary":
        return _run_summary_command(result)
    if args.command == "bundles":
        return _run_bundles_command(result)
    if args.command == "dependencies":
        return _run_dependencies_command(result, args.bundle)
    if args.command == "validate":
        return _run_validate_command(result)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_summary_command(result: LayoutLoadResult) -> int:
    summary = summarize_layout(result.layout)
    rows = (
        ("tool_version", result.layout.tool_version),
        ("package_version", result.layout.package_version),
        ("groups", summary.group_count),
        ("bundles", summary.bundle_count),
        ("built_in_bundles", summary.built_in_bundle_count),
        ("files", summary.file_count),
        ("assets", summary.asset_count),
        ("implicit_assets", summary.implicit_asset_count),
        ("total_bundle_size", summary.total_bundle_size),
        ("total_serialized_size", summary.total_serialized_size),
        ("total_streamed_size", summary.total_streamed_size),
        ("duplicated_implicit_assets", len(summary.duplicated_implicit_assets)),
    )
    for key, value in rows:
        print(f"{key}\t{value}")
    return 0


def _run_bundles_command(result: LayoutLoadResult) -> int:
    for bundle in enumerate_bundles(result.layout):
        group = bundle.group
        print(
            f"{bundle.name}\t"
            f"{group.name if group is not None else '-'}\t"
            f"{bundle.file_size}\t"
            f"{bundle.compression or '-'}"
        )
    return 0


def _run_dependencies_command(result: LayoutLoadResult, bundle_name: str) -> int:
    """Handle dependencies command.

    Args:
        result: Loaded layout.
        bundle_name: Bundle to expand.

    Returns:
        Exit code, 1 when the bundle is unknown.
    """
    bundle = result.lookup.bundle_by_name(bundle_name)
    if bundle is None:
        print(f"error: bundle '{bundle_name}' not found in layout", file=sys.stderr)
        return 1
    for dependency in bundle.expanded_dependencies:
        print(dependency.name)
    return 0


def _run_validate_command(result: LayoutLoadResult) -> int:
    if result.is_complete:
        print("ok")
        return 0
    for reference in result.dangling_references:
        print(reference.describe())
    return 1
