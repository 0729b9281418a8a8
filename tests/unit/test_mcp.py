"""Unit tests for MCP server tools, called directly without a transport.

FastMCP's ``@mcp.tool`` wraps functions in ``FunctionTool`` objects.  We call
the underlying function via ``.fn`` to test the business logic directly.
"""

from __future__ import annotations

import logging

import pytest
from fastmcp.exceptions import ToolError

import xcontrol.mcp.server as mcp_mod
from xcontrol.mcp.server import (
    XCONTROL_REFERENCE,
    describe_instruction,
    list_instructions,
    validate_xcontrol,
    xcontrol_reference,
)
from xcontrol.parser.schema_loader import SchemaLoader
from xcontrol.service.document_store import DocumentStore
from tests.conftest import MULTIPLE_ISSUES_DOCUMENT, VALID_DOCUMENT

_validate = validate_xcontrol.fn
_list_instructions = list_instructions.fn
_describe = describe_instruction.fn


@pytest.fixture(autouse=True)
def _fresh_store() -> None:
    """Give each test a fresh DocumentStore with the built-in schema."""
    mcp_mod._store = DocumentStore()


# ---------------------------------------------------------------------------
# validate_xcontrol
# ---------------------------------------------------------------------------


class TestValidate:
    def test_valid_document(self) -> None:
        assert _validate(VALID_DOCUMENT) == "Document is valid (4 instructions)."

    def test_reports_diagnostics(self) -> None:
        result = _validate(MULTIPLE_ISSUES_DOCUMENT)
        assert result.startswith("Found 8 diagnostic(s):")
        assert "line 1: [error] xtb.orphanOption:" in result
        assert "line 3: [error] xtb.unknownInstruction:" in result
        assert "line 11: [warning] xtb.suspiciousOperator:" in result
        assert "Parse errors:" in result

    def test_settings_override(self) -> None:
        result = _validate("$fix\n", settings_json='{"missingEnd": "error"}')
        assert "[error] xtb.missingEnd" in result

    def test_settings_turn_rule_off(self) -> None:
        result = _validate("$fix\n", settings_json='{"missingEnd": "off"}')
        assert result == "Document is valid (1 instructions)."

    def test_null_setting_uses_rule_default(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="xcontrol.config"):
            result = _validate("$fix\n", settings_json='{"missingEnd": null}')
        assert "[hint] xtb.missingEnd" in result
        assert "Unrecognised" not in caplog.text

    def test_bad_settings_json(self) -> None:
        with pytest.raises(ToolError, match="Invalid settings JSON"):
            _validate("$fix", settings_json="{bad")

    def test_settings_must_be_object(self) -> None:
        with pytest.raises(ToolError, match="must be a JSON object"):
            _validate("$fix", settings_json='["off"]')

    def test_no_store(self) -> None:
        mcp_mod._store = None
        with pytest.raises(ToolError, match="not initialised"):
            _validate(VALID_DOCUMENT)


# ---------------------------------------------------------------------------
# Schema tools
# ---------------------------------------------------------------------------


class TestListInstructions:
    def test_lists_builtin_instructions(self) -> None:
        result = _list_instructions()
        assert result.startswith("Instructions:")
        assert "  $fix (group)" in result
        assert "  $chrg (logical)" in result
        assert "  $end (end)" in result

    def test_includes_loaded_extensions(self) -> None:
        schema = SchemaLoader().load_string("instructions:\n  - name: md\n    kind: group\n")
        mcp_mod._store = DocumentStore(schema=schema)
        assert "  $md (group)" in _list_instructions()


class TestDescribeInstruction:
    def test_group_with_options(self) -> None:
        result = _describe("wall")
        lines = result.splitlines()
        assert lines[0] == "$wall (group)"
        assert "  - potential = [single] Potential type" in lines
        assert "  - sphere : [single] Spherical wall parameters" in lines

    def test_accepts_dollar_prefix(self) -> None:
        assert _describe("$fix").startswith("$fix (group)")

    def test_logical_has_no_options(self) -> None:
        assert "  No options." in _describe("chrg")

    def test_unknown(self) -> None:
        with pytest.raises(ToolError, match="Unknown instruction 'nope'"):
            _describe("nope")


# ---------------------------------------------------------------------------
# Resource: xcontrol reference
# ---------------------------------------------------------------------------


class TestReferenceResource:
    def test_reference_lists_every_code(self) -> None:
        for code in (
            "xtb.unknownInstruction",
            "xtb.unknownOption",
            "xtb.suspiciousOperator",
            "xtb.duplicateOption",
            "xtb.orphanOption",
            "xtb.missingEnd",
        ):
            assert code in XCONTROL_REFERENCE

    def test_resource_function_returns_reference(self) -> None:
        assert xcontrol_reference.fn() == XCONTROL_REFERENCE
