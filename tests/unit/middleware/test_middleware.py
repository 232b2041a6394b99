"""Unit tests for middleware."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware


def _create_app(hsts: bool = False) -> FastAPI:
    """Minimal app with security-header and request-id middleware."""
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, hsts=hsts)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def _():
        return {"ok": True}

    return app


async def _get(app: FastAPI, **kwargs):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get("/test", **kwargs)


class TestSecurityHeadersMiddleware:
    @pytest.mark.asyncio
    async def test_adds_hardening_headers(self):
        response = await _get(_create_app())

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"
        assert "permissions-policy" in response.headers

    @pytest.mark.asyncio
    async def test_hsts_only_when_enabled(self):
        without = await _get(_create_app())
        with_hsts = await _get(_create_app(hsts=True))

        assert "strict-transport-security" not in without.headers
        assert with_hsts.headers["strict-transport-security"].startswith("max-age=")


class TestRequestIDMiddleware:
    @pytest.mark.asyncio
    async def test_generates_request_id_when_not_provided(self):
        app = _create_app()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            r1 = await c.get("/test")
            r2 = await c.get("/test")

        assert r1.headers["x-request-id"]
        assert r1.headers["x-request-id"] != r2.headers["x-request-id"]

    @pytest.mark.asyncio
    async def test_propagates_well_formed_request_id(self):
        response = await _get(_create_app(), headers={"X-Request-ID": "custom-req-123"})

        assert response.headers["x-request-id"] == "custom-req-123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["has spaces", "x" * 65, "line\\nbreak"])
    async def test_replaces_malformed_request_id(self, bad_id: str):
        response = await _get(_create_app(), headers={"X-Request-ID": bad_id})

        assert response.headers["x-request-id"] != bad_id
        assert len(response.headers["x-request-id"]) == 36
