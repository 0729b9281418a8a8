"""API request/response Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from xcontrol.models.diagnostics import Diagnostic
from xcontrol.models.document import ParseError, Range


class DiagnosticDetail(BaseModel):
    """A diagnostic as published to editor clients."""

    severity: str
    lsp_severity: int = Field(description="LSP DiagnosticSeverity (1=error … 4=hint)")
    range: Range
    message: str
    code: str
    source: str

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> DiagnosticDetail:
        return cls(
            severity=diagnostic.severity.value,
            lsp_severity=diagnostic.severity.lsp_value,
            range=diagnostic.range,
            message=diagnostic.message,
            code=diagnostic.code.value,
            source=diagnostic.source,
        )


class ParseErrorDetail(BaseModel):
    """A structural error recorded by the parser."""

    severity: str
    range: Range
    message: str

    @classmethod
    def from_parse_error(cls, error: ParseError) -> ParseErrorDetail:
        return cls(severity=error.severity.value, range=error.range, message=error.message)


class ValidateRequest(BaseModel):
    """Request body for POST /validate."""

    text: str = Field(description="xcontrol document content to validate")
    settings: dict[str, str] | None = Field(
        None,
        description="Diagnostic levels keyed by rule name, e.g. {'unknownOption': 'off'}",
    )


class ValidateResponse(BaseModel):
    """Response body for POST /validate."""

    valid: bool
    instructions: int
    orphan_options: int
    diagnostics: list[DiagnosticDetail] = []
    parse_errors: list[ParseErrorDetail] = []


class OptionSpecResponse(BaseModel):
    key: str
    kind: str
    preferred_operator: str | None = None
    description: str = ""


class InstructionSummaryResponse(BaseModel):
    """One entry of GET /schema."""

    name: str
    kind: str
    description: str = ""
    option_count: int = 0


class InstructionDetailResponse(BaseModel):
    """Response for GET /schema/{name}."""

    name: str
    kind: str
    description: str = ""
    options: list[OptionSpecResponse] = []


class SchemaResponse(BaseModel):
    """Response for GET /schema."""

    instructions: list[InstructionSummaryResponse] = []


class DocumentOpenRequest(BaseModel):
    """Request body for POST /documents and PUT /documents."""

    uri: str
    text: str
    version: int = 0


class DocumentDiagnosticsResponse(BaseModel):
    """Diagnostics currently published for one document."""

    uri: str
    diagnostics: list[DiagnosticDetail] = []


class DocumentInfoResponse(BaseModel):
    uri: str
    version: int
    line_count: int
    diagnostic_count: int


class DocumentListResponse(BaseModel):
    """Response for GET /documents."""

    documents: list[DocumentInfoResponse] = []


class ConfigUpdateRequest(BaseModel):
    """Request body for PUT /documents/config."""

    settings: dict[str, str] = Field(default_factory=dict)


class ConfigUpdateResponse(BaseModel):
    """Levels in effect plus the revalidated diagnostics of every open document."""

    levels: dict[str, str]
    documents: list[DocumentDiagnosticsResponse] = []


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""
