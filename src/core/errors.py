"""Build layout exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Construction, loading, and configuration each raise a specific type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.types import DanglingReference


class BuildLayoutError(Exception):
    """Base exception for all build layout failures."""


class BuildLayoutConfigError(BuildLayoutError):
    """Raised for invalid runtime configuration."""


class InvalidKeyError(BuildLayoutError):
    """Raised when a construction call would break key uniqueness."""


class InvalidReferenceError(BuildLayoutError):
    """Raised when a construction call wires entities that cannot be linked."""


class FrozenModelError(BuildLayoutError):
    """Raised for any mutation attempted after a layout was finalized."""


class LayoutNotFinalizedError(BuildLayoutError):
    """Raised when a reader surface is built from an unfinalized layout."""


class LayoutFormatError(BuildLayoutError):
    """Raised when a persisted layout document cannot be parsed."""


class DanglingReferenceError(BuildLayoutError):
    """Raised by strict loads when reference keys do not resolve."""

    def __init__(self, message: str, references: tuple[DanglingReference, ...]) -> None:
        super().__init__(message)
        self.references = references
