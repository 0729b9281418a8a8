"""In-memory registry of open documents, shared by the MCP server and REST API."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from xcontrol.diagnostics.config import DEFAULT_DIAGNOSTIC_CONFIG, get_effective_config
from xcontrol.diagnostics.rules import validate
from xcontrol.models.diagnostics import Diagnostic, DiagnosticConfig
from xcontrol.models.document import ParseError
from xcontrol.parser.parser import parse
from xcontrol.parser.schema_loader import SchemaLoader
from xcontrol.schema import DEFAULT_SCHEMA, XtbSchema
from xcontrol.settings import Settings

logger = logging.getLogger("xcontrol.service")

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


class DocumentNotFoundError(KeyError):
    """Raised when a document URI is not open in the store."""


@dataclass
class ValidationSummary:
    """Result of validating a document."""

    diagnostics: list[Diagnostic]
    parse_errors: list[ParseError]
    instruction_count: int
    orphan_count: int


@dataclass
class DocumentInfo:
    """Short summary of an open document."""

    uri: str
    version: int
    line_count: int
    diagnostic_count: int


@dataclass
class _OpenDocument:
    uri: str
    text: str
    version: int
    diagnostics: list[Diagnostic] = field(default_factory=list)


# ---------------------------------------------------------------------------
# DocumentStore
# ---------------------------------------------------------------------------


class DocumentStore:
    """Open documents keyed by URI with their last published diagnostics.

    Thread-safe via ``threading.Lock``.  Parsing and validation run outside
    the lock; a result computed for a version that has since been replaced
    is discarded.
    """

    def __init__(
        self,
        schema: XtbSchema = DEFAULT_SCHEMA,
        config: DiagnosticConfig = DEFAULT_DIAGNOSTIC_CONFIG,
    ) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, _OpenDocument] = {}
        self._schema = schema
        self._config = config

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentStore:
        """Build a store from the schema file and diagnostic levels in *settings*."""
        schema = DEFAULT_SCHEMA
        if settings.schema_file is not None:
            schema = SchemaLoader().load(settings.schema_file)
            logger.info(
                "Loaded schema extension %s (%d instructions)",
                settings.schema_file, len(schema.instructions),
            )
        config = get_effective_config(settings.user_diagnostic_settings())
        return cls(schema=schema, config=config)

    @property
    def schema(self) -> XtbSchema:
        return self._schema

    @property
    def config(self) -> DiagnosticConfig:
        with self._lock:
            return self._config

    # -- helpers -------------------------------------------------------------

    def _diagnose(self, uri: str, text: str, config: DiagnosticConfig) -> list[Diagnostic]:
        """Parse and validate; any unexpected failure yields no diagnostics."""
        try:
            return validate(parse(text, self._schema), self._schema, config)
        except Exception:
            logger.exception("Error validating document %s", uri)
            return []

    def _publish(
        self, uri: str, version: int, config: DiagnosticConfig, diagnostics: list[Diagnostic]
    ) -> list[Diagnostic]:
        with self._lock:
            doc = self._documents.get(uri)
            if doc is None:
                return diagnostics
            if doc.version != version or self._config is not config:
                logger.debug("Discarding stale diagnostics for %s (version %d)", uri, version)
                return list(doc.diagnostics)
            doc.diagnostics = diagnostics
            return list(diagnostics)

    def _get(self, uri: str) -> _OpenDocument:
        try:
            return self._documents[uri]
        except KeyError:
            raise DocumentNotFoundError(f"Document '{uri}' is not open") from None

    # -- public API ----------------------------------------------------------

    def validate_text(self, text: str, config: DiagnosticConfig | None = None) -> ValidationSummary:
        """Validate a document without storing it."""
        document = parse(text, self._schema)
        diagnostics = validate(document, self._schema, config or self.config)
        return ValidationSummary(
            diagnostics=diagnostics,
            parse_errors=list(document.errors),
            instruction_count=len(document.instructions),
            orphan_count=len(document.orphan_options),
        )

    def open(self, uri: str, text: str, version: int = 0) -> list[Diagnostic]:
        """Open (or reopen) a document and return its diagnostics."""
        with self._lock:
            self._documents[uri] = _OpenDocument(uri=uri, text=text, version=version)
            config = self._config
        logger.info("Opened %s (version %d, %d chars)", uri, version, len(text))
        return self._publish(uri, version, config, self._diagnose(uri, text, config))

    def change(self, uri: str, text: str, version: int) -> list[Diagnostic]:
        """Replace the full text of an open document.

        Changes carrying an older version than the stored one are ignored
        and the current diagnostics are returned.
        """
        with self._lock:
            doc = self._get(uri)
            if version < doc.version:
                logger.warning(
                    "Ignoring out-of-order change for %s (version %d < %d)",
                    uri, version, doc.version,
                )
                return list(doc.diagnostics)
            doc.text = text
            doc.version = version
            config = self._config
        return self._publish(uri, version, config, self._diagnose(uri, text, config))

    def close(self, uri: str) -> None:
        """Forget a document.  Raises ``DocumentNotFoundError`` if not open."""
        with self._lock:
            self._get(uri)
            del self._documents[uri]
        logger.info("Closed %s", uri)

    def diagnostics(self, uri: str) -> list[Diagnostic]:
        with self._lock:
            return list(self._get(uri).diagnostics)

    def list_documents(self) -> list[DocumentInfo]:
        with self._lock:
            docs = list(self._documents.values())
        return [
            DocumentInfo(
                uri=doc.uri,
                version=doc.version,
                line_count=doc.text.count("\n") + 1,
                diagnostic_count=len(doc.diagnostics),
            )
            for doc in docs
        ]

    def update_config(self, config: DiagnosticConfig) -> dict[str, list[Diagnostic]]:
        """Swap the diagnostic config and revalidate every open document."""
        with self._lock:
            self._config = config
            snapshot = [(doc.uri, doc.text, doc.version) for doc in self._documents.values()]
        logger.info("Diagnostic configuration changed, revalidating %d documents", len(snapshot))
        return {
            uri: self._publish(uri, version, config, self._diagnose(uri, text, config))
            for uri, text, version in snapshot
        }
