"""Shared typed value models.

This module defines immutable value objects that hang off layout
entities or describe load outcomes, keeping interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EntityKind = Literal["group", "bundle", "file", "asset", "implicit_asset"]


@dataclass(frozen=True)
class SchemaData:
    """Configuration snapshot of one group schema.

    Attributes:
        guid: Schema identifier.
        type: Schema class name.
        kvp_details: Ordered key/value pairs; keys may repeat.
    """

    guid: str
    type: str
    kvp_details: tuple[tuple[str, str], ...] = ()

    def values_for(self, key: str) -> tuple[str, ...]:
        """Return every value recorded under ``key`` in stored order."""
        return tuple(value for detail_key, value in self.kvp_details if detail_key == key)


@dataclass(frozen=True)
class SubFile:
    """Physical resource fragment written alongside a file.

    Attributes:
        name: Fragment name.
        is_serialized_file: True when the fragment is a serialized file.
        size: Size in bytes.
    """

    name: str
    is_serialized_file: bool
    size: int


@dataclass(frozen=True)
class DanglingReference:
    """One reference key that did not resolve while loading a layout.

    Attributes:
        entity_kind: Kind of entity holding the reference.
        entity_key: Stable key of the entity holding the reference.
        field_name: Document field the key was read from.
        missing_key: The key that could not be resolved.
    """

    entity_kind: EntityKind
    entity_key: str
    field_name: str
    missing_key: str

    def describe(self) -> str:
        """Render a single-line human readable description."""
        return f"{self.entity_kind} '{self.entity_key}' {self.field_name} -> '{self.missing_key}'"
