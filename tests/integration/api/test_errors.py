"""Integration tests for RFC 7807 error rendering."""

import pytest
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient

from clinicdesk.core.errors import ConflictError


pytestmark = pytest.mark.integration


failing_router = APIRouter()


@failing_router.get("/conflict")
async def conflict():
    raise ConflictError(
        "Username already taken",
        error_code="username_exists",
        details={"username": "nurse", "status": 200},
    )


@failing_router.get("/boom")
async def boom():
    raise RuntimeError("kaboom")


class TestProblemDetails:
    """Tests for the registered exception handlers."""

    @pytest.fixture
    async def error_client(self, app: FastAPI):
        app.include_router(failing_router, prefix="/fail")
        async with AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        ) as client:
            yield client

    async def test_app_exception(self, error_client: AsyncClient):
        response = await error_client.get("/fail/conflict")

        assert response.status_code == 409
        assert response.headers["content-type"].startswith("application/json")
        data = response.json()
        assert data["type"] == "https://api.example.com/errors/username_exists"
        assert data["title"] == "Username Exists"
        assert data["detail"] == "Username already taken"
        assert data["instance"] == "/fail/conflict"
        assert data["username"] == "nurse"

    async def test_details_do_not_shadow_standard_members(self, error_client: AsyncClient):
        response = await error_client.get("/fail/conflict")
        assert response.json()["status"] == 409

    async def test_trace_id_matches_request_id(self, error_client: AsyncClient):
        response = await error_client.get(
            "/fail/conflict", headers={"X-Request-ID": "req-123"}
        )

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["trace_id"] == "req-123"

    async def test_unhandled_exception(self, error_client: AsyncClient):
        response = await error_client.get("/fail/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["type"].endswith("/errors/internal_error")
        assert "kaboom" not in data["detail"]

    async def test_unknown_route(self, error_client: AsyncClient):
        response = await error_client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert response.json()["type"].endswith("/errors/not_found")

    async def test_wrong_method(self, error_client: AsyncClient):
        response = await error_client.delete("/api/v1/auth/login")

        assert response.status_code == 405
        assert response.json()["type"].endswith("/errors/method_not_allowed")
