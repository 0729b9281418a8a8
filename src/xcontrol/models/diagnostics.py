"""Diagnostic results and the per-rule severity configuration."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from xcontrol.models.document import Range, Severity

DIAGNOSTIC_SOURCE = "xtb-xcontrol"


class RuleLevel(StrEnum):
    """Configured level of a diagnostic rule; ``off`` disables the rule."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"
    OFF = "off"

    @property
    def enabled(self) -> bool:
        return self is not RuleLevel.OFF

    @property
    def severity(self) -> Severity:
        if self is RuleLevel.OFF:
            raise ValueError("Rule is disabled and has no severity")
        return Severity(self.value)


class RuleCode(StrEnum):
    UNKNOWN_INSTRUCTION = "xtb.unknownInstruction"
    UNKNOWN_OPTION = "xtb.unknownOption"
    SUSPICIOUS_OPERATOR = "xtb.suspiciousOperator"
    DUPLICATE_OPTION = "xtb.duplicateOption"
    ORPHAN_OPTION = "xtb.orphanOption"
    MISSING_END = "xtb.missingEnd"

    @property
    def rule_name(self) -> str:
        """Rule name without the ``xtb.`` prefix, e.g. ``unknownOption``."""
        return self.value.removeprefix("xtb.")


class DiagnosticConfig(BaseModel):
    """Fully resolved level for each of the six rules."""

    model_config = ConfigDict(frozen=True)

    unknown_instruction: RuleLevel
    unknown_option: RuleLevel
    suspicious_operator: RuleLevel
    duplicate_option: RuleLevel
    orphan_option: RuleLevel
    missing_end: RuleLevel


class Diagnostic(BaseModel):
    """A schema or style violation reported to the editing host."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    range: Range
    message: str
    code: RuleCode
    source: str = DIAGNOSTIC_SOURCE
