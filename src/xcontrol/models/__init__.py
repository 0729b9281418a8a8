"""Pydantic domain models for xcontrol-lint."""

from xcontrol.models.diagnostics import (
    DIAGNOSTIC_SOURCE,
    Diagnostic,
    DiagnosticConfig,
    RuleCode,
    RuleLevel,
)
from xcontrol.models.document import (
    InstructionKind,
    InstructionNode,
    OptionKind,
    OptionNode,
    OptionOperator,
    ParsedDocument,
    ParseError,
    Position,
    Range,
    Severity,
)

__all__ = [
    "DIAGNOSTIC_SOURCE",
    "Diagnostic",
    "DiagnosticConfig",
    "InstructionKind",
    "InstructionNode",
    "OptionKind",
    "OptionNode",
    "OptionOperator",
    "ParseError",
    "ParsedDocument",
    "Position",
    "Range",
    "RuleCode",
    "RuleLevel",
    "Severity",
]
