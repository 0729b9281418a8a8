"""Line lexer for xcontrol documents.

Every physical line is classified on its own, without context, into exactly
one of five token kinds.  The parser consumes the resulting sequence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

from xcontrol.models.document import OptionOperator, Range

_LINE_SPLIT_RE = re.compile(r"\r?\n")

_BLANK_RE = re.compile(r"^\s*$")
_COMMENT_RE = re.compile(r"^\s*#(.*)$")
_INSTRUCTION_RE = re.compile(r"^\s*\$([a-zA-Z][a-zA-Z0-9_-]*)(?a:\b)")
_OPTION_RES = (
    (OptionOperator.COLON, re.compile(r"^\s*([a-zA-Z][a-zA-Z0-9_-]*)\s*(:)\s*(.*)$")),
    (OptionOperator.EQUALS, re.compile(r"^\s*([a-zA-Z][a-zA-Z0-9_-]*)\s*(=)\s*(.*)$")),
)


class LineTokenKind(StrEnum):
    BLANK = "blank"
    COMMENT = "comment"
    INSTRUCTION = "instruction"
    OPTION = "option"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BlankLine:
    line_number: int
    range: Range
    raw_text: str
    kind: LineTokenKind = field(default=LineTokenKind.BLANK, init=False)


@dataclass(frozen=True)
class CommentLine:
    line_number: int
    range: Range
    raw_text: str
    comment_text: str
    kind: LineTokenKind = field(default=LineTokenKind.COMMENT, init=False)


@dataclass(frozen=True)
class InstructionLine:
    line_number: int
    range: Range
    raw_text: str
    full_name: str
    base_name: str
    kind: LineTokenKind = field(default=LineTokenKind.INSTRUCTION, init=False)


@dataclass(frozen=True)
class OptionLine:
    """``key operator value`` line; ``value`` has inline comments stripped."""

    line_number: int
    range: Range
    raw_text: str
    key: str
    operator: OptionOperator
    value: str
    key_range: Range
    operator_range: Range
    value_range: Range
    kind: LineTokenKind = field(default=LineTokenKind.OPTION, init=False)


@dataclass(frozen=True)
class UnknownLine:
    line_number: int
    range: Range
    raw_text: str
    kind: LineTokenKind = field(default=LineTokenKind.UNKNOWN, init=False)


LineToken = BlankLine | CommentLine | InstructionLine | OptionLine | UnknownLine


@dataclass(frozen=True)
class LexResult:
    tokens: list[LineToken]
    text: str


def strip_inline_comment(value: str) -> str:
    """Cut *value* at the first ``#`` and trim surrounding whitespace."""
    return value.split("#", 1)[0].strip()


def _lex_option(text: str, line_number: int, line_range: Range) -> OptionLine | None:
    for operator, pattern in _OPTION_RES:
        match = pattern.match(text)
        if match is None:
            continue
        key = match.group(1)
        key_start = match.start(1)
        op_pos = match.start(2)
        value_start = match.start(3)
        return OptionLine(
            line_number=line_number,
            range=line_range,
            raw_text=text,
            key=key,
            operator=operator,
            value=strip_inline_comment(match.group(3)),
            key_range=Range.on_line(line_number, key_start, key_start + len(key)),
            operator_range=Range.on_line(line_number, op_pos, op_pos + 1),
            value_range=Range.on_line(line_number, value_start, len(text)),
        )
    return None


def lex_line(text: str, line_number: int) -> LineToken:
    """Classify a single physical line."""
    line_range = Range.on_line(line_number, 0, len(text))

    if _BLANK_RE.match(text):
        return BlankLine(line_number=line_number, range=line_range, raw_text=text)

    comment = _COMMENT_RE.match(text)
    if comment:
        return CommentLine(
            line_number=line_number,
            range=line_range,
            raw_text=text,
            comment_text=comment.group(1),
        )

    instruction = _INSTRUCTION_RE.match(text)
    if instruction:
        base_name = instruction.group(1)
        return InstructionLine(
            line_number=line_number,
            range=line_range,
            raw_text=text,
            full_name=f"${base_name}",
            base_name=base_name,
        )

    option = _lex_option(text, line_number, line_range)
    if option is not None:
        return option

    return UnknownLine(line_number=line_number, range=line_range, raw_text=text)


def lex(text: str) -> LexResult:
    """Split *text* into lines (``\\n`` or ``\\r\\n``) and classify each one."""
    lines = _LINE_SPLIT_RE.split(text)
    return LexResult(
        tokens=[lex_line(line, i) for i, line in enumerate(lines)],
        text=text,
    )
