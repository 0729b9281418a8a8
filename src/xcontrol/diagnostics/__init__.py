"""Diagnostic rules and their configuration."""

from xcontrol.diagnostics.config import (
    DEFAULT_DIAGNOSTIC_CONFIG,
    get_effective_config,
    parse_level,
    parse_user_config,
)
from xcontrol.diagnostics.rules import DiagnosticEngine, validate

__all__ = [
    "DEFAULT_DIAGNOSTIC_CONFIG",
    "DiagnosticEngine",
    "get_effective_config",
    "parse_level",
    "parse_user_config",
    "validate",
]
