"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from xcontrol.diagnostics.config import SETTINGS_SECTION


class Settings(BaseSettings):
    """Configuration for the xcontrol-lint REST API and MCP servers.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.  Diagnostic levels use the same strings as
    the editor settings (``error``, ``warning``, ``info``, ``hint``,
    ``off``); unset values fall back to each rule's default.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"
    schema_file: Path | None = None  # optional YAML catalog merged over the built-in schema

    # REST API
    api_server_host: str = "localhost"
    api_server_port: int = 8000
    port: int | None = None  # Cloud Run injects PORT; takes precedence over api_server_port
    max_document_size: int = 1024 * 1024  # request body limit in bytes

    @property
    def effective_port(self) -> int:
        """Return the port to listen on (Cloud Run PORT takes precedence)."""
        return self.port if self.port is not None else self.api_server_port

    # MCP
    mcp_transport: Literal["stdio", "http", "sse"] = "stdio"
    mcp_server_host: str = "localhost"
    mcp_server_port: int = 9000

    # Diagnostics
    diagnostics_unknown_instruction: str | None = None
    diagnostics_unknown_option: str | None = None
    diagnostics_suspicious_operator: str | None = None
    diagnostics_duplicate_option: str | None = None
    diagnostics_orphan_option: str | None = None
    diagnostics_missing_end: str | None = None

    def user_diagnostic_settings(self) -> dict[str, str | None]:
        """Diagnostic levels keyed the way editor settings name them."""
        return {
            f"{SETTINGS_SECTION}.unknownInstruction": self.diagnostics_unknown_instruction,
            f"{SETTINGS_SECTION}.unknownOption": self.diagnostics_unknown_option,
            f"{SETTINGS_SECTION}.suspiciousOperator": self.diagnostics_suspicious_operator,
            f"{SETTINGS_SECTION}.duplicateOption": self.diagnostics_duplicate_option,
            f"{SETTINGS_SECTION}.orphanOption": self.diagnostics_orphan_option,
            f"{SETTINGS_SECTION}.missingEnd": self.diagnostics_missing_end,
        }
