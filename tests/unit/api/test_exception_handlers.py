"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import (
    ProfileNotFoundError,
    ServerFailureError,
    UsernameTakenError,
    ValidationFailedError,
)
from domain.services.profile_validation import Violation


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _get(app: FastAPI, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_not_found_returns_404(self) -> None:
        app = _create_test_app()

        @app.get("/raise-not-found")
        async def _() -> None:
            raise ProfileNotFoundError("ghost")

        response = await _get(app, "/raise-not-found")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "USER_NOT_FOUND"
        assert body["message"] == "User not found"
        assert body["details"]["username"] == "ghost"

    @pytest.mark.asyncio
    async def test_validation_failure_lists_fields(self) -> None:
        app = _create_test_app()

        @app.get("/raise-validation")
        async def _() -> None:
            raise ValidationFailedError(
                [
                    Violation("username", "Username cannot contain spaces"),
                    Violation("city", "City is required"),
                ]
            )

        response = await _get(app, "/raise-validation")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"] == [
            {"field": "username", "message": "Username cannot contain spaces"},
            {"field": "city", "message": "City is required"},
        ]

    @pytest.mark.asyncio
    async def test_username_taken_is_400(self) -> None:
        app = _create_test_app()

        @app.get("/raise-taken")
        async def _() -> None:
            raise UsernameTakenError("jdoe")

        response = await _get(app, "/raise-taken")

        assert response.status_code == 400
        assert response.json()["error_code"] == "USERNAME_TAKEN"

    @pytest.mark.asyncio
    async def test_server_failure_carries_message_only(self) -> None:
        app = _create_test_app()

        @app.get("/raise-server")
        async def _() -> None:
            raise ServerFailureError("Server error during registration")

        response = await _get(app, "/raise-server")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Server error during registration"
        assert body["details"] is None

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=405, detail="Method Not Allowed")

        response = await _get(app, "/raise-http")

        assert response.status_code == 405
        body = response.json()
        assert body["error_code"] == "HTTP_ERROR"
        assert body["message"] == "Method Not Allowed"

    @pytest.mark.asyncio
    async def test_unhandled_exception_hides_internals(self) -> None:
        app = _create_test_app()

        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        response = await handler(mock_request, RuntimeError("password=hunter2"))  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert "hunter2" not in body["message"]
        assert body["details"]["request_id"] == "test-req-id"
