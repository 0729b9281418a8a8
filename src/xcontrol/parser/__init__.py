"""Lexing, parsing and schema loading for xcontrol documents."""

from xcontrol.parser.lexer import LexResult, LineTokenKind, lex
from xcontrol.parser.parser import Parser, parse
from xcontrol.parser.schema_loader import SchemaLoader, SchemaLoadError, SchemaSafetyError

__all__ = [
    "LexResult",
    "LineTokenKind",
    "Parser",
    "SchemaLoadError",
    "SchemaLoader",
    "SchemaSafetyError",
    "lex",
    "parse",
]
