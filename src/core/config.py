"""Runtime configuration model for build layout tooling.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_JSON_INDENT,
    DEFAULT_LOG_LEVEL,
    FALSE_FLAG_VALUES,
    JSON_INDENT_ENV,
    LOG_LEVEL_ENV,
    STRICT_REFERENCES_ENV,
    SUPPORTED_LOG_LEVELS,
    TRUE_FLAG_VALUES,
)
from core.errors import BuildLayoutConfigError


@dataclass(frozen=True)
class BuildLayoutConfig:
    """Validated runtime configuration.

    Attributes:
        strict_references: Fail layout loads that contain dangling keys.
        json_indent: Indentation used when writing JSON documents.
        log_level: Minimum level emitted by structured loggers.
    """

    strict_references: bool
    json_indent: int
    log_level: str

    @classmethod
    def from_env(cls) -> "BuildLayoutConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            BuildLayoutConfigError: If environment values are invalid.
        """
        strict_value = os.getenv(STRICT_REFERENCES_ENV, "0")
        indent_value = os.getenv(JSON_INDENT_ENV, str(DEFAULT_JSON_INDENT))
        level_value = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
        return cls(
            strict_references=_parse_flag(strict_value, STRICT_REFERENCES_ENV),
            json_indent=_parse_indent(indent_value),
            log_level=_parse_log_level(level_value),
        )


def _parse_flag(raw_value: str, variable: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        raw_value: Raw string from environment.
        variable: Variable name used in error messages.

    Returns:
        Parsed boolean value.

    Raises:
        BuildLayoutConfigError: If value is not a recognized flag.
    """
    normalized = raw_value.strip().lower()
    if normalized in TRUE_FLAG_VALUES:
        return True
    if normalized in FALSE_FLAG_VALUES:
        return False
    raise BuildLayoutConfigError(
        f"Invalid {variable} value: expected one of "
        f"{', '.join(TRUE_FLAG_VALUES + FALSE_FLAG_VALUES[:-1])}, got '{raw_value}'. "
        f"Set {variable} to 1 or 0."
    )


def _parse_indent(raw_value: str) -> int:
    """Parse the JSON indent environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed non-negative indent.

    Raises:
        BuildLayoutConfigError: If value is not a non-negative integer.
    """
    try:
        indent = int(raw_value)
    except ValueError as error:
        raise BuildLayoutConfigError(
            f"Invalid {JSON_INDENT_ENV} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {JSON_INDENT_ENV} to a numeric value."
        ) from error
    if indent < 0:
        raise BuildLayoutConfigError(
            f"Invalid {JSON_INDENT_ENV} value: expected non-negative integer, got {indent}."
        )
    return indent


def _parse_log_level(raw_value: str) -> str:
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise BuildLayoutConfigError(
            f"Invalid {LOG_LEVEL_ENV} value '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return level
