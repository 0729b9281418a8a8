"""Shared test fixtures for xcontrol-lint."""

from __future__ import annotations

from pathlib import Path

import pytest

from xcontrol.diagnostics.config import DEFAULT_DIAGNOSTIC_CONFIG
from xcontrol.diagnostics.rules import validate
from xcontrol.models.diagnostics import DiagnosticConfig, RuleCode
from xcontrol.parser.parser import parse
from xcontrol.schema import DEFAULT_SCHEMA, XtbSchema
from xcontrol.service.document_store import DocumentStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def schema() -> XtbSchema:
    return DEFAULT_SCHEMA


@pytest.fixture
def config() -> DiagnosticConfig:
    return DEFAULT_DIAGNOSTIC_CONFIG


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


def codes_for(text: str, config: DiagnosticConfig = DEFAULT_DIAGNOSTIC_CONFIG) -> list[RuleCode]:
    """Parse + validate *text* against the built-in schema and return the rule codes."""
    return [d.code for d in validate(parse(text, DEFAULT_SCHEMA), DEFAULT_SCHEMA, config)]


VALID_DOCUMENT = """\
# Valid xcontrol file
$chrg 0
$spin 0

$fix
   atoms: 1-5
   elements: C,H
$end

$constrain
   distance: 1,2,2.5
$end
"""

PARSER_DOCUMENT = """\
# Test xcontrol file
$chrg 0
$spin 0

$fix
   atoms: 1-5
   elements: C,H
$end

$constrain
   distance: 1,2,2.5
$end

orphan_option: should be flagged

$wall
   potential=logfermi
   temp=300
$end
"""

MULTIPLE_ISSUES_DOCUMENT = """\
orphan_before: value

$unknown
   orphan_inside: value

$fix
   atoms: 1-5
   unknown_opt: test

$wall
   potential: wrong_operator
   temp=300
   temp=350"""
