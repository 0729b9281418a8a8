"""Resolve user-facing severity strings into a ``DiagnosticConfig``."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from xcontrol.models.diagnostics import DiagnosticConfig, RuleCode, RuleLevel

logger = logging.getLogger("xcontrol.config")

SETTINGS_SECTION = "xtbXcontrol.diagnostics"

DEFAULT_DIAGNOSTIC_CONFIG = DiagnosticConfig(
    unknown_instruction=RuleLevel.ERROR,
    unknown_option=RuleLevel.WARNING,
    suspicious_operator=RuleLevel.WARNING,
    duplicate_option=RuleLevel.WARNING,
    orphan_option=RuleLevel.ERROR,
    missing_end=RuleLevel.HINT,
)

# rule name (as used in editor settings) -> DiagnosticConfig field
_RULE_FIELDS: dict[str, str] = {
    RuleCode.UNKNOWN_INSTRUCTION.rule_name: "unknown_instruction",
    RuleCode.UNKNOWN_OPTION.rule_name: "unknown_option",
    RuleCode.SUSPICIOUS_OPERATOR.rule_name: "suspicious_operator",
    RuleCode.DUPLICATE_OPTION.rule_name: "duplicate_option",
    RuleCode.ORPHAN_OPTION.rule_name: "orphan_option",
    RuleCode.MISSING_END.rule_name: "missing_end",
}

_LEVEL_ALIASES: dict[str, RuleLevel] = {
    "error": RuleLevel.ERROR,
    "warning": RuleLevel.WARNING,
    "info": RuleLevel.INFO,
    "information": RuleLevel.INFO,
    "hint": RuleLevel.HINT,
    "off": RuleLevel.OFF,
}


def rule_names() -> list[str]:
    """Editor-facing rule names, e.g. ``unknownOption``."""
    return list(_RULE_FIELDS)


def parse_level(value: str | None, default: RuleLevel) -> RuleLevel:
    """Parse a case-insensitive severity string; absent or unrecognised gives *default*."""
    if not value:
        return default
    level = _LEVEL_ALIASES.get(value.strip().lower())
    if level is None:
        logger.warning("Unrecognised diagnostic level %r, using %s", value, default.value)
        return default
    return level


def parse_user_config(user_config: Mapping[str, str | None]) -> DiagnosticConfig:
    """Build a config from editor settings.

    Keys may be fully qualified (``xtbXcontrol.diagnostics.unknownOption``) or
    bare rule names (``unknownOption``).  Unrelated keys are ignored.
    """
    prefix = SETTINGS_SECTION + "."
    raw: dict[str, str | None] = {}
    for key, value in user_config.items():
        rule = key.removeprefix(prefix)
        if rule in _RULE_FIELDS:
            raw[rule] = value

    levels = {
        field: parse_level(raw.get(rule), getattr(DEFAULT_DIAGNOSTIC_CONFIG, field))
        for rule, field in _RULE_FIELDS.items()
    }
    return DiagnosticConfig(**levels)


def get_effective_config(user_config: Mapping[str, str | None] | None = None) -> DiagnosticConfig:
    if user_config is None:
        return DEFAULT_DIAGNOSTIC_CONFIG
    return parse_user_config(user_config)
