"""YAML loader for user-supplied instruction catalogs.

A schema file lists extra (or replacement) instruction specs::

    instructions:
      - name: md
        kind: group
        description: Molecular dynamics settings
        options:
          - key: temp
            kind: single
            preferredOperator: "="

The loaded specs are merged over a base schema (the built-in catalog by
default) and the result is a new immutable ``XtbSchema``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from xcontrol.schema import DEFAULT_SCHEMA, InstructionSpec, XtbSchema

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 1_000_000  # 1M characters
_MAX_DEPTH = 10

_ANCHOR_RE = re.compile(r"(?:^|[\s\-:])&(\w+)", re.MULTILINE)


class SchemaSafetyError(Exception):
    """Raised when a schema file is oversized or uses YAML anchors."""


class SchemaLoadError(Exception):
    """Raised when a schema file is not valid YAML or holds invalid specs."""

    def __init__(self, message: str, filename: str = "<string>", line: int | None = None) -> None:
        self.filename = filename
        self.line = line
        location = f"{filename}:{line}" if line is not None else filename
        super().__init__(f"{location}: {message}")


class SchemaLoader:
    """Loads instruction specs from YAML using ruamel.yaml (keeps line info)."""

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.max_depth = _MAX_DEPTH

    @staticmethod
    def _check_yaml_safety(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise SchemaSafetyError(
                f"Schema document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        if _ANCHOR_RE.search(content):
            raise SchemaSafetyError("YAML anchors/aliases are not supported in schema files")

    # -- public loading API --------------------------------------------------

    def load(self, path: Path, base: XtbSchema = DEFAULT_SCHEMA) -> XtbSchema:
        """Load a schema file and merge it over *base*."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, filename=str(path), base=base)

    def load_string(
        self,
        content: str,
        filename: str = "<string>",
        base: XtbSchema = DEFAULT_SCHEMA,
    ) -> XtbSchema:
        """Load schema YAML from a string and merge it over *base*."""
        return base.merged_with(self.load_specs(content, filename))

    def load_specs(self, content: str, filename: str = "<string>") -> list[InstructionSpec]:
        self._check_yaml_safety(content)
        try:
            data = self._yaml.load(content)
        except YAMLError as exc:
            raise SchemaLoadError(f"Invalid YAML: {exc}", filename) from exc
        if data is None:
            return []
        if not isinstance(data, CommentedMap) or "instructions" not in data:
            raise SchemaLoadError("expected a mapping with an 'instructions' list", filename)

        entries = data["instructions"]
        if not isinstance(entries, CommentedSeq):
            raise SchemaLoadError("'instructions' must be a list", filename, _key_line(data))

        specs: list[InstructionSpec] = []
        seen: set[str] = set()
        for i, entry in enumerate(entries):
            line = _item_line(entries, i)
            try:
                spec = InstructionSpec.model_validate(_to_plain(entry))
            except ValidationError as exc:
                raise SchemaLoadError(
                    f"invalid instruction spec at instructions[{i}]: {exc}", filename, line
                ) from exc
            if spec.name in seen:
                raise SchemaLoadError(f"duplicate instruction '{spec.name}'", filename, line)
            seen.add(spec.name)
            specs.append(spec)
        return specs


def _key_line(data: CommentedMap) -> int | None:
    try:
        line, _col = data.lc.key("instructions")
    except (AttributeError, KeyError, TypeError):
        return None
    return line + 1


def _item_line(seq: CommentedSeq, index: int) -> int | None:
    try:
        line, _col = seq.lc.item(index)
    except (AttributeError, KeyError, TypeError):
        return None
    return line + 1


def _to_plain(data: Any) -> Any:
    """Convert ruamel.yaml CommentedMap/Seq trees to plain dicts and lists."""
    if isinstance(data, dict):
        return {str(k): _to_plain(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_to_plain(item) for item in data]
    return data
