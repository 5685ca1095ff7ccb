"""Build layout document persistence.

This module reads and writes layout documents as JSON or YAML files,
chosen by file suffix, and applies the configured reference policy.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from core.config import BuildLayoutConfig
from core.constants import JSON_SUFFIXES, YAML_SUFFIXES
from core.errors import DanglingReferenceError, LayoutFormatError
from core.logging_config import get_logger
from layout.model import BuildLayout
from store.layout_codec import LayoutLoadResult, layout_from_document, layout_to_document

_LOGGER = get_logger(__name__)


def save_layout(
    layout: BuildLayout,
    path: str | Path,
    config: BuildLayoutConfig | None = None,
) -> Path:
    """Write a finalized layout to a JSON or YAML document.

    Args:
        layout: Finalized layout.
        path: Destination file; the suffix selects the format.
        config: Optional runtime configuration.

    Returns:
        Resolved path of the written document.

    Raises:
        LayoutFormatError: If the suffix is not a supported format.
        LayoutNotFinalizedError: If the layout is still being built.
    """
    resolved_config = config or BuildLayoutConfig.from_env()
    target = Path(path).expanduser().resolve()
    document_format = _document_format(target)
    document = layout_to_document(layout)
    if document_format == "yaml":
        body = yaml.safe_dump(document, sort_keys=False)
    else:
        body = json.dumps(document, indent=resolved_config.json_indent) + "\n"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(body, encoding="utf-8")
    _LOGGER.info(
        "layout_saved",
        path=str(target),
        format=document_format,
        tool_version=layout.tool_version,
        package_version=layout.package_version,
    )
    return target


def load_layout(
    path: str | Path,
    strict: bool | None = None,
    config: BuildLayoutConfig | None = None,
) -> LayoutLoadResult:
    """Load a layout document from disk.

    Args:
        path: Source JSON or YAML document.
        strict: Fail on dangling references; defaults to the configured policy.
        config: Optional runtime configuration.

    Returns:
        Load result with the finalized layout and any dangling references.

    Raises:
        LayoutFormatError: If the document is missing or malformed.
        DanglingReferenceError: If strict and any reference key is unresolved.
    """
    resolved_config = config or BuildLayoutConfig.from_env()
    strict_references = resolved_config.strict_references if strict is None else strict
    source = Path(path).expanduser().resolve()
    payload = read_layout_document(source)
    result = layout_from_document(payload)
    _LOGGER.info(
        "layout_loaded",
        path=str(source),
        bundle_count=len(result.lookup.bundles),
        dangling_reference_count=len(result.dangling_references),
    )
    if strict_references and result.dangling_references:
        details = "; ".join(reference.describe() for reference in result.dangling_references)
        raise DanglingReferenceError(
            f"Layout at {source} has {len(result.dangling_references)} unresolved "
            f"reference(s): {details}. Regenerate the layout or load without strict mode.",
            result.dangling_references,
        )
    return result


def read_layout_document(source: Path) -> Any:
    """Read and parse a layout document without decoding it.

    Args:
        source: Document path.

    Returns:
        Parsed JSON or YAML payload.

    Raises:
        LayoutFormatError: If the file is missing, unreadable, or unparsable.
    """
    document_format = _document_format(source)
    if not source.exists():
        raise LayoutFormatError(
            f"Layout document not found at {source}. Provide the path written by the build."
        )
    try:
        text = source.read_text(encoding="utf-8-sig")
    except OSError as error:
        raise LayoutFormatError(
            f"Failed to read layout document at {source}: {error}. Check file permissions."
        ) from error
    except UnicodeDecodeError as error:
        raise LayoutFormatError(
            f"Layout document at {source} is not valid UTF-8: {error.reason} "
            f"at byte {error.start}. Write the layout as UTF-8."
        ) from error
    if document_format == "yaml":
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as error:
            raise LayoutFormatError(
                f"Failed to parse YAML layout at {source}: {error}. Fix YAML syntax and retry."
            ) from error
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        raise LayoutFormatError(
            f"Failed to parse JSON layout at {source}: {error.msg}. "
            "Regenerate the layout document from the build."
        ) from error


def _document_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in YAML_SUFFIXES:
        return "yaml"
    raise LayoutFormatError(
        f"Unsupported layout document suffix '{path.suffix}' for {path}. "
        f"Use one of: {', '.join(JSON_SUFFIXES + YAML_SUFFIXES)}."
    )
