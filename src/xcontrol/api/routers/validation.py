"""Stateless endpoints: one-shot validation and schema introspection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from xcontrol.api.deps import get_document_store
from xcontrol.api.schemas import (
    DiagnosticDetail,
    InstructionDetailResponse,
    InstructionSummaryResponse,
    OptionSpecResponse,
    ParseErrorDetail,
    SchemaResponse,
    ValidateRequest,
    ValidateResponse,
)
from xcontrol.diagnostics.config import parse_user_config
from xcontrol.models.document import Severity
from xcontrol.service.document_store import DocumentStore

router = APIRouter()


@router.post("/validate", response_model=ValidateResponse)
async def validate_document(
    body: ValidateRequest,
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> ValidateResponse:
    """Validate an xcontrol document without opening it."""
    config = parse_user_config(body.settings) if body.settings is not None else None
    summary = store.validate_text(body.text, config)
    has_errors = any(d.severity == Severity.ERROR for d in summary.diagnostics) or any(
        e.severity == Severity.ERROR for e in summary.parse_errors
    )
    return ValidateResponse(
        valid=not has_errors,
        instructions=summary.instruction_count,
        orphan_options=summary.orphan_count,
        diagnostics=[DiagnosticDetail.from_diagnostic(d) for d in summary.diagnostics],
        parse_errors=[ParseErrorDetail.from_parse_error(e) for e in summary.parse_errors],
    )


@router.get("/schema", response_model=SchemaResponse)
async def list_instructions(
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> SchemaResponse:
    """List every instruction known to the active schema."""
    return SchemaResponse(
        instructions=[
            InstructionSummaryResponse(
                name=spec.name,
                kind=spec.kind.value,
                description=spec.description,
                option_count=len(spec.options),
            )
            for spec in store.schema.instructions
        ]
    )


@router.get("/schema/{name}", response_model=InstructionDetailResponse)
async def describe_instruction(
    name: str,
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> InstructionDetailResponse:
    """Describe one instruction and its options."""
    spec = store.schema.get(name.removeprefix("$"))
    if spec is None:
        raise HTTPException(status_code=404, detail=f"Instruction '{name}' not found")
    return InstructionDetailResponse(
        name=spec.name,
        kind=spec.kind.value,
        description=spec.description,
        options=[
            OptionSpecResponse(
                key=opt.key,
                kind=opt.kind.value,
                preferred_operator=opt.preferred_operator.value if opt.preferred_operator else None,
                description=opt.description,
            )
            for opt in spec.options
        ],
    )
