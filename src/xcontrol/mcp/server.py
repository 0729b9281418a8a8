"""FastMCP server exposing xcontrol validation as MCP tools.

Run via::

    xcontrol-mcp                       # reads .env (default: stdio)
    MCP_TRANSPORT=http xcontrol-mcp    # streamable HTTP on port 9000

Settings are loaded from environment variables and ``.env`` file.
"""

from __future__ import annotations

import json
import logging

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from xcontrol import __version__
from xcontrol.diagnostics.config import parse_user_config, rule_names
from xcontrol.service.document_store import DocumentStore
from xcontrol.settings import Settings

# ---------------------------------------------------------------------------
# Server + shared state
# ---------------------------------------------------------------------------

logger = logging.getLogger("xcontrol.mcp")

mcp = FastMCP("xcontrol-lint")
_store: DocumentStore | None = None


def _resolve_store() -> DocumentStore:
    if _store is None:
        raise ToolError("Document store not initialised")
    return _store


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

XCONTROL_REFERENCE = """\
# xTB xcontrol Reference

An xcontrol file is line oriented.  Each line is one of:

- blank
- `# comment`
- `$instruction` — starts an instruction; anything after the name is ignored
- `key: value` or `key = value` — an option of the open instruction
  (`# ...` after the value is an inline comment)

Logical instructions (`$chrg 0`, `$spin 0`, `$cmd`, `$date`) are one line.
Group instructions (`$fix`, `$constrain`, `$wall`, `$opt`, ...) own the
option lines that follow and should be closed with `$end`:

```
$chrg 0
$fix
   atoms: 1-5
   elements: C,H
$end
$wall
   potential=logfermi
   sphere: auto,all
$end
```

## Diagnostic codes

- `xtb.unknownInstruction`: instruction not in the schema (default error).
- `xtb.unknownOption`: option not valid for its instruction (default warning).
- `xtb.suspiciousOperator`: `=` used where `:` is preferred, or vice versa (warning).
- `xtb.duplicateOption`: single-valued option given more than once (warning).
- `xtb.orphanOption`: option outside any instruction block (default error).
- `xtb.missingEnd`: group instruction not closed by `$end` (default hint).
"""


@mcp.resource("xcontrol://reference")
def xcontrol_reference() -> str:
    """xcontrol format reference and diagnostic codes."""
    return XCONTROL_REFERENCE


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool
def validate_xcontrol(text: str, settings_json: str | None = None) -> str:
    """Validate an xTB xcontrol document and list its diagnostics.

    Args:
        text: Complete xcontrol file content.
        settings_json: Optional JSON object mapping rule names to levels,
            e.g. ``{"missingEnd": "off", "unknownOption": "error"}``.
    """
    logger.info("validate_xcontrol called (text length=%d)", len(text))
    logger.debug("validate_xcontrol text:\n%s", text)
    store = _resolve_store()

    config = None
    if settings_json:
        try:
            settings = json.loads(settings_json)
        except json.JSONDecodeError as exc:
            raise ToolError(f"Invalid settings JSON: {exc}") from exc
        if not isinstance(settings, dict):
            raise ToolError(
                f"settings_json must be a JSON object with keys from: {', '.join(rule_names())}"
            )
        config = parse_user_config(
            {str(k): v if v is None else str(v) for k, v in settings.items()}
        )

    summary = store.validate_text(text, config)
    if not summary.diagnostics and not summary.parse_errors:
        return f"Document is valid ({summary.instruction_count} instructions)."

    lines = [f"Found {len(summary.diagnostics)} diagnostic(s):"]
    for d in summary.diagnostics:
        lines.append(
            f"  line {d.range.start.line + 1}: [{d.severity.value}] {d.code.value}: {d.message}"
        )
    if summary.parse_errors:
        lines.append("Parse errors:")
        for e in summary.parse_errors:
            lines.append(f"  line {e.range.start.line + 1}: [{e.severity.value}] {e.message}")
    return "\n".join(lines)


@mcp.tool
def list_instructions() -> str:
    """List all instructions known to the schema with their kind."""
    store = _resolve_store()
    lines = ["Instructions:"]
    for spec in store.schema.instructions:
        line = f"  ${spec.name} ({spec.kind.value})"
        if spec.description:
            line += f" — {spec.description}"
        lines.append(line)
    return "\n".join(lines)


@mcp.tool
def describe_instruction(name: str) -> str:
    """Describe one instruction and its valid options.

    Args:
        name: Instruction name, with or without the leading ``$``.
    """
    store = _resolve_store()
    spec = store.schema.get(name.removeprefix("$"))
    if spec is None:
        raise ToolError(
            f"Unknown instruction '{name}'. Known: {', '.join(store.schema.names)}"
        )

    lines = [f"${spec.name} ({spec.kind.value})"]
    if spec.description:
        lines.append(f"  {spec.description}")
    if not spec.options:
        lines.append("  No options.")
    for opt in spec.options:
        op = f" {opt.preferred_operator.value}" if opt.preferred_operator else ""
        lines.append(f"  - {opt.key}{op} [{opt.kind.value}] {opt.description}".rstrip())
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the MCP server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "xcontrol-lint MCP Server v%s starting (transport=%s)",
        __version__,
        settings.mcp_transport,
    )

    global _store  # noqa: PLW0603
    _store = DocumentStore.from_settings(settings)

    if settings.mcp_transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(
            transport=settings.mcp_transport,
            host=settings.mcp_server_host,
            port=settings.mcp_server_port,
            log_level=settings.log_level.lower(),
        )


if __name__ == "__main__":
    main()
