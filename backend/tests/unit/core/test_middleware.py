"""
Unit Tests for HTTP middleware and log formatting
"""
import json
import logging
import sys

import pytest
from httpx import AsyncClient, ASGITransport
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from app.core.logging_config import JSONFormatter, logger, set_request_id
from app.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
    is_quiet_path,
)


async def echo(request):
    body = await request.body()
    return PlainTextResponse(body.decode() or "ok")


def build_app(max_size: int = 16) -> Starlette:
    return Starlette(
        routes=[
            Route("/echo", echo, methods=["GET", "POST"]),
            Route("/health", echo),
        ],
        middleware=[
            Middleware(RequestSizeLimitMiddleware, max_size=max_size),
            Middleware(SecurityHeadersMiddleware),
            Middleware(RequestLoggingMiddleware),
        ],
    )


@pytest.fixture
async def plain_client():
    async with AsyncClient(transport=ASGITransport(app=build_app()), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def logged_requests(monkeypatch):
    calls = []
    monkeypatch.setattr(logger, "log_request", lambda *args, **kwargs: calls.append(args))
    return calls


class TestRequestLogging:
    @pytest.mark.asyncio
    async def test_incoming_request_id_is_echoed(self, plain_client, logged_requests):
        response = await plain_client.get("/echo", headers={"X-Request-ID": "abc12345"})

        assert response.headers["x-request-id"] == "abc12345"
        assert response.headers["x-response-time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_request_id_generated(self, plain_client, logged_requests):
        response = await plain_client.get("/echo")

        assert len(response.headers["x-request-id"]) == 8

    @pytest.mark.asyncio
    async def test_logs_catalog_requests(self, plain_client, logged_requests):
        await plain_client.post("/echo", content=b"hi")

        assert len(logged_requests) == 1
        method, path, status_code, _ = logged_requests[0]
        assert (method, path, status_code) == ("POST", "/echo", 200)

    @pytest.mark.asyncio
    async def test_probe_paths_are_quiet(self, plain_client, logged_requests):
        response = await plain_client.get("/health")

        assert response.status_code == 200
        assert logged_requests == []

    def test_quiet_paths(self):
        assert is_quiet_path("/api/v1/health/ready")
        assert not is_quiet_path("/api/v1/problems")


class TestSecurityHeaders:
    @pytest.mark.asyncio
    async def test_headers_added(self, plain_client, logged_requests):
        response = await plain_client.get("/echo")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"


class TestRequestSizeLimit:
    @pytest.mark.asyncio
    async def test_small_body_passes(self, plain_client, logged_requests):
        response = await plain_client.post("/echo", content=b"tiny")

        assert response.text == "tiny"

    @pytest.mark.asyncio
    async def test_large_body_rejected(self, plain_client, logged_requests):
        response = await plain_client.post("/echo", content=b"x" * 64)

        assert response.status_code == 413
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UPLOAD_TOO_LARGE"
        assert body["error"]["details"] == {"size": 64, "max_size": 16}


class TestJSONFormatter:
    def test_includes_context_and_extra_fields(self):
        record = logging.LogRecord("trizen_cms", logging.INFO, __file__, 10, "imported %d", (3,), None)
        record.event_type = "bulk_import"
        set_request_id("req00001")
        try:
            entry = json.loads(JSONFormatter().format(record))
        finally:
            set_request_id("")

        assert entry["message"] == "imported 3"
        assert entry["request_id"] == "req00001"
        assert entry["event_type"] == "bulk_import"
        assert "args" not in entry

    def test_exception_details(self):
        try:
            raise ValueError("bad row")
        except ValueError:
            record = logging.LogRecord("trizen_cms", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "bad row"
