"""Structural document model: positions, options, instructions, parse errors."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"

    @property
    def lsp_value(self) -> int:
        """Numeric ``DiagnosticSeverity`` used by the Language Server Protocol."""
        return _LSP_SEVERITY[self]


_LSP_SEVERITY = {
    Severity.ERROR: 1,
    Severity.WARNING: 2,
    Severity.INFO: 3,
    Severity.HINT: 4,
}


class InstructionKind(StrEnum):
    LOGICAL = "logical"
    GROUP = "group"
    END = "end"


class OptionKind(StrEnum):
    SINGLE = "single"
    LIST = "list"


class OptionOperator(StrEnum):
    EQUALS = "="
    COLON = ":"


class Position(BaseModel):
    """Zero-based line/character offset in a document."""

    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class Range(BaseModel):
    """Single-line span; ``end`` is exclusive."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> Range:
        return cls(
            start=Position(line=line, character=start),
            end=Position(line=line, character=end),
        )


class OptionNode(BaseModel):
    """A ``key operator value`` assignment."""

    model_config = ConfigDict(frozen=True)

    key: str
    operator: OptionOperator
    value: str
    range: Range


class InstructionNode(BaseModel):
    """A closed ``$name`` instruction together with the options in its body."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_name: str
    kind: InstructionKind
    range: Range
    options: tuple[OptionNode, ...] = ()
    body_start_line: int
    body_end_line: int
    has_explicit_end: bool = False

    def options_with_key(self, key: str) -> list[OptionNode]:
        return [opt for opt in self.options if opt.key == key]


class ParseError(BaseModel):
    """Structural problem found while parsing (never raised)."""

    model_config = ConfigDict(frozen=True)

    message: str
    range: Range
    severity: Severity


class ParsedDocument(BaseModel):
    """Result of parsing one xcontrol document."""

    model_config = ConfigDict(frozen=True)

    instructions: tuple[InstructionNode, ...] = ()
    orphan_options: tuple[OptionNode, ...] = ()
    errors: tuple[ParseError, ...] = ()

    def instructions_of_kind(self, kind: InstructionKind) -> list[InstructionNode]:
        return [inst for inst in self.instructions if inst.kind == kind]

    def find_instruction(self, base_name: str) -> InstructionNode | None:
        """Return the first instruction named *base_name*, if any."""
        for inst in self.instructions:
            if inst.base_name == base_name:
                return inst
        return None
