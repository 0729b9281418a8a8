"""Regression tests for RequestBodyLimitMiddleware."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from xcontrol.api.app import create_app
from xcontrol.api.deps import init_document_store, reset_document_store
from xcontrol.service.document_store import DocumentStore
from xcontrol.settings import Settings

_LIMIT = 1024


@pytest.fixture
def app():
    application = create_app(settings=Settings(_env_file=None, max_document_size=_LIMIT))
    init_document_store(DocumentStore())
    yield application
    reset_document_store()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestInvalidContentLength:
    """Non-integer Content-Length must not cause a 500."""

    async def test_non_integer_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            "/health",
            content=b"small body",
            headers={"content-length": "not-a-number"},
        )
        assert response.status_code != 500

    async def test_negative_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            "/health",
            content=b"small body",
            headers={"content-length": "-1"},
        )
        assert response.status_code != 500


class TestOverLimit:
    async def test_declared_length_over_limit(self, client: AsyncClient) -> None:
        text = "# padding\n" * 200
        response = await client.post("/validate", json={"text": text})
        assert response.status_code == 413
        assert "too large" in response.json()["detail"]

    async def test_chunked_body_over_limit(self, client: AsyncClient) -> None:
        """Body exceeding the limit without a Content-Length header."""
        response = await client.post(
            "/validate",
            content=b"x" * (_LIMIT + 1),
            headers={"transfer-encoding": "chunked"},
        )
        assert response.status_code == 413

    async def test_body_under_limit_reaches_handler(self, client: AsyncClient) -> None:
        response = await client.post("/validate", json={"text": "$chrg 0"})
        assert response.status_code == 200
        assert response.json()["valid"] is True
