"""Structural parser: turns the line token stream into instructions and options."""

from __future__ import annotations

from dataclasses import dataclass, field

from xcontrol.models.document import (
    InstructionKind,
    InstructionNode,
    OptionNode,
    ParsedDocument,
    ParseError,
    Range,
    Severity,
)
from xcontrol.parser.lexer import InstructionLine, LexResult, OptionLine, lex
from xcontrol.schema import XtbSchema

_END = "end"


@dataclass
class _OpenInstruction:
    """Instruction still accepting options; frozen into an InstructionNode on close."""

    name: str
    base_name: str
    kind: InstructionKind
    range: Range
    body_start_line: int
    options: list[OptionNode] = field(default_factory=list)

    def close(self, end_line: int, has_explicit_end: bool) -> InstructionNode:
        return InstructionNode(
            name=self.name,
            base_name=self.base_name,
            kind=self.kind,
            range=self.range,
            options=tuple(self.options),
            body_start_line=self.body_start_line,
            body_end_line=end_line,
            has_explicit_end=has_explicit_end,
        )


class Parser:
    """Single forward pass over the lexed lines of one document.

    State is one nullable ``current`` slot plus append-only output lists, so
    a ``Parser`` instance is used for exactly one document.
    """

    def __init__(self, schema: XtbSchema) -> None:
        self._schema = schema
        self._current: _OpenInstruction | None = None
        self._instructions: list[InstructionNode] = []
        self._orphans: list[OptionNode] = []
        self._errors: list[ParseError] = []

    def parse_tokens(self, lex_result: LexResult) -> ParsedDocument:
        for token in lex_result.tokens:
            if isinstance(token, InstructionLine):
                self._on_instruction(token)
            elif isinstance(token, OptionLine):
                self._on_option(token)
            # Blank, comment and unknown lines carry no structure.

        if self._current is not None:
            self._close_current(len(lex_result.tokens) - 1, has_explicit_end=False)

        return ParsedDocument(
            instructions=tuple(self._instructions),
            orphan_options=tuple(self._orphans),
            errors=tuple(self._errors),
        )

    # -- token handlers -------------------------------------------------------

    def _close_current(self, end_line: int, *, has_explicit_end: bool) -> None:
        if self._current is not None:
            self._instructions.append(self._current.close(end_line, has_explicit_end))
            self._current = None

    def _resolve_kind(self, base_name: str) -> InstructionKind:
        spec = self._schema.get(base_name)
        if spec is not None:
            return spec.kind
        # Unknown instructions keep a body so their options can still be attributed.
        return InstructionKind.GROUP

    def _on_instruction(self, token: InstructionLine) -> None:
        line = token.line_number

        if token.base_name == _END:
            if self._current is not None:
                self._close_current(line - 1, has_explicit_end=True)
            else:
                self._errors.append(
                    ParseError(
                        message="$end without matching group instruction",
                        range=token.range,
                        severity=Severity.WARNING,
                    )
                )
            return

        self._close_current(line - 1, has_explicit_end=False)

        opened = _OpenInstruction(
            name=token.full_name,
            base_name=token.base_name,
            kind=self._resolve_kind(token.base_name),
            range=token.range,
            body_start_line=line,
        )
        if opened.kind == InstructionKind.LOGICAL:
            self._instructions.append(opened.close(line, has_explicit_end=False))
        else:
            self._current = opened

    def _on_option(self, token: OptionLine) -> None:
        option = OptionNode(
            key=token.key,
            operator=token.operator,
            value=token.value,
            range=token.range,
        )
        if self._current is not None:
            self._current.options.append(option)
            return

        self._orphans.append(option)
        self._errors.append(
            ParseError(
                message=f"Option '{token.key}' appears outside of any instruction block",
                range=token.key_range,
                severity=Severity.ERROR,
            )
        )


def parse(text: str, schema: XtbSchema) -> ParsedDocument:
    """Lex and parse *text* against *schema*.  Never raises for malformed input."""
    return Parser(schema).parse_tokens(lex(text))
