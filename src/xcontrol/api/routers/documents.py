"""Open-document endpoints: the editor-host lifecycle (open, change, close)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from xcontrol.api.deps import get_document_store
from xcontrol.api.schemas import (
    ConfigUpdateRequest,
    ConfigUpdateResponse,
    DiagnosticDetail,
    DocumentDiagnosticsResponse,
    DocumentInfoResponse,
    DocumentListResponse,
    DocumentOpenRequest,
)
from xcontrol.diagnostics.config import parse_user_config
from xcontrol.models.diagnostics import Diagnostic
from xcontrol.service.document_store import DocumentNotFoundError, DocumentStore

router = APIRouter()


def _response(uri: str, diagnostics: list[Diagnostic]) -> DocumentDiagnosticsResponse:
    return DocumentDiagnosticsResponse(
        uri=uri,
        diagnostics=[DiagnosticDetail.from_diagnostic(d) for d in diagnostics],
    )


@router.post("", response_model=DocumentDiagnosticsResponse, status_code=201)
async def open_document(
    body: DocumentOpenRequest,
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> DocumentDiagnosticsResponse:
    """Open a document and publish its diagnostics."""
    return _response(body.uri, store.open(body.uri, body.text, body.version))


@router.put("", response_model=DocumentDiagnosticsResponse)
async def change_document(
    body: DocumentOpenRequest,
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> DocumentDiagnosticsResponse:
    """Replace the text of an open document and revalidate it."""
    try:
        diagnostics = store.change(body.uri, body.text, body.version)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail=f"Document '{body.uri}' not open") from None
    return _response(body.uri, diagnostics)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> DocumentListResponse:
    """List open documents."""
    return DocumentListResponse(
        documents=[
            DocumentInfoResponse(
                uri=info.uri,
                version=info.version,
                line_count=info.line_count,
                diagnostic_count=info.diagnostic_count,
            )
            for info in store.list_documents()
        ]
    )


@router.get("/diagnostics", response_model=DocumentDiagnosticsResponse)
async def get_diagnostics(
    uri: str = Query(...),
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> DocumentDiagnosticsResponse:
    """Return the diagnostics last published for a document."""
    try:
        diagnostics = store.diagnostics(uri)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail=f"Document '{uri}' not open") from None
    return _response(uri, diagnostics)


@router.delete("", status_code=204)
async def close_document(
    uri: str = Query(...),
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> None:
    """Close a document."""
    try:
        store.close(uri)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail=f"Document '{uri}' not open") from None


@router.put("/config", response_model=ConfigUpdateResponse)
async def update_config(
    body: ConfigUpdateRequest,
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
) -> ConfigUpdateResponse:
    """Apply new diagnostic settings and revalidate every open document."""
    config = parse_user_config(body.settings)
    results = store.update_config(config)
    return ConfigUpdateResponse(
        levels={name: level.value for name, level in config.model_dump().items()},
        documents=[_response(uri, diagnostics) for uri, diagnostics in results.items()],
    )
