"""Tests for the built-in schema, its lookups and the YAML schema loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from xcontrol.diagnostics.config import DEFAULT_DIAGNOSTIC_CONFIG
from xcontrol.diagnostics.rules import validate
from xcontrol.models.diagnostics import RuleCode
from xcontrol.models.document import InstructionKind, OptionKind, OptionOperator
from xcontrol.parser.parser import parse
from xcontrol.parser.schema_loader import SchemaLoader, SchemaLoadError, SchemaSafetyError
from xcontrol.schema import (
    DEFAULT_SCHEMA,
    InstructionSpec,
    OptionSpec,
    find_instruction_spec,
    find_option_spec,
)
from tests.conftest import FIXTURES_DIR

MD_SCHEMA_YAML = """\
instructions:
  - name: md
    kind: group
    description: Molecular dynamics settings
    options:
      - key: temp
        kind: single
        preferredOperator: "="
      - key: shake
        kind: single
  - name: fix
    kind: group
    options:
      - key: atoms
        kind: list
        preferredOperator: ":"
"""


class TestDefaultSchema:
    def test_instruction_kinds(self) -> None:
        assert DEFAULT_SCHEMA.get("fix").kind == InstructionKind.GROUP
        assert DEFAULT_SCHEMA.get("chrg").kind == InstructionKind.LOGICAL
        assert DEFAULT_SCHEMA.get("end").kind == InstructionKind.END

    def test_names_are_unique(self) -> None:
        names = DEFAULT_SCHEMA.names
        assert len(names) == len(set(names)) == 15

    def test_option_lookup(self) -> None:
        wall = find_instruction_spec(DEFAULT_SCHEMA, "wall")
        assert wall is not None
        potential = find_option_spec(wall, "potential")
        assert potential is not None
        assert potential.kind == OptionKind.SINGLE
        assert potential.preferred_operator == OptionOperator.EQUALS
        assert find_option_spec(wall, "atoms") is None

    def test_unknown_instruction(self) -> None:
        assert find_instruction_spec(DEFAULT_SCHEMA, "nope") is None

    def test_lookup_is_case_sensitive(self) -> None:
        assert DEFAULT_SCHEMA.get("FIX") is None

    def test_schema_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            DEFAULT_SCHEMA.instructions = ()  # type: ignore[misc]


class TestMergedWith:
    def test_replaces_and_appends(self) -> None:
        md = InstructionSpec(name="md", options=(OptionSpec(key="temp"),))
        fix = InstructionSpec(name="fix", kind=InstructionKind.GROUP)
        merged = DEFAULT_SCHEMA.merged_with([md, fix])
        assert merged.names[-1] == "md"
        assert merged.names.index("fix") == DEFAULT_SCHEMA.names.index("fix")
        assert merged.get("fix").options == ()
        # DEFAULT_SCHEMA itself is untouched.
        assert DEFAULT_SCHEMA.get("md") is None
        assert DEFAULT_SCHEMA.get("fix").get_option("atoms") is not None


class TestSchemaLoader:
    def test_load_string_merges_over_default(self) -> None:
        schema = SchemaLoader().load_string(MD_SCHEMA_YAML)
        md = schema.get("md")
        assert md is not None
        assert md.description == "Molecular dynamics settings"
        assert md.get_option("temp").preferred_operator == OptionOperator.EQUALS
        assert md.get_option("shake").preferred_operator is None
        assert schema.get("fix").get_option("elements") is None
        assert schema.get("wall") is not None

    def test_loaded_schema_drives_validation(self) -> None:
        schema = SchemaLoader().load_string(MD_SCHEMA_YAML)
        text = "$md\n   temp: 300\n   shake = 2\n$end"
        codes = [d.code for d in validate(parse(text, schema), schema, DEFAULT_DIAGNOSTIC_CONFIG)]
        assert codes == [RuleCode.SUSPICIOUS_OPERATOR]

    def test_load_file(self) -> None:
        schema = SchemaLoader().load(FIXTURES_DIR / "schema_extension.yaml")
        assert schema.get("md") is not None
        assert schema.get("md").get_option("dump").kind == OptionKind.LIST

    def test_empty_document_keeps_base(self) -> None:
        assert SchemaLoader().load_string("") == DEFAULT_SCHEMA

    def test_invalid_yaml(self) -> None:
        with pytest.raises(SchemaLoadError, match="Invalid YAML"):
            SchemaLoader().load_string("instructions: [unclosed")

    def test_missing_instructions_key(self) -> None:
        with pytest.raises(SchemaLoadError, match="'instructions'"):
            SchemaLoader().load_string("other: 1\n")

    def test_invalid_spec_reports_line(self) -> None:
        content = "instructions:\n  - name: ok\n  - name: bad\n    kind: sometimes\n"
        with pytest.raises(SchemaLoadError) as exc_info:
            SchemaLoader().load_string(content, filename="custom.yaml")
        assert exc_info.value.line == 3
        assert "custom.yaml:3" in str(exc_info.value)

    def test_duplicate_instruction(self) -> None:
        content = "instructions:\n  - name: md\n  - name: md\n"
        with pytest.raises(SchemaLoadError, match="duplicate instruction 'md'"):
            SchemaLoader().load_string(content)

    def test_anchors_rejected(self) -> None:
        content = "instructions:\n  - &base\n    name: md\n  - *base\n"
        with pytest.raises(SchemaSafetyError):
            SchemaLoader().load_string(content)

    def test_oversized_document_rejected(self) -> None:
        with pytest.raises(SchemaSafetyError, match="maximum size"):
            SchemaLoader().load_string("#" * 1_000_001)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load(tmp_path / "absent.yaml")
