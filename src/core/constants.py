"""Core constants used across build layout modules.

This module centralizes document field names and default values.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

LAYOUT_FORMAT_VERSION = 1
JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")
DEFAULT_JSON_INDENT = 2
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
TRUE_FLAG_VALUES = ("1", "true", "yes", "on")
FALSE_FLAG_VALUES = ("0", "false", "no", "off", "")
STRICT_REFERENCES_ENV = "BUILDLAYOUT_STRICT_REFERENCES"
JSON_INDENT_ENV = "BUILDLAYOUT_JSON_INDENT"
LOG_LEVEL_ENV = "BUILDLAYOUT_LOG_LEVEL"
