"""Tests for domain errors and the ApiError response body."""

import json

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field

from core.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    api_error,
    register_error_handlers,
)


class _Body(BaseModel):
    name: str = Field(min_length=2)


def _build_app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Event with id=7 was not found")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("busy")

    @app.post("/body")
    async def body(data: _Body):
        return data

    @app.get("/http")
    async def http():
        raise HTTPException(status_code=405, detail="nope")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaput")

    return app


@pytest.fixture
async def error_client():
    transport = ASGITransport(app=_build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.unit
class TestApiError:
    def test_body_shape(self):
        response = api_error(409, "reason", "message", ["a"])
        body = json.loads(response.body)
        assert response.status_code == 409
        assert body["status"] == "CONFLICT"
        assert body["reason"] == "reason"
        assert body["message"] == "message"
        assert body["errors"] == ["a"]
        assert len(body["timestamp"]) == len("2024-01-01 00:00:00")

    def test_domain_errors_carry_status(self):
        assert NotFoundError("x").status_code == 404
        assert ConflictError("x").status_code == 409
        assert BadRequestError("x").status_code == 400


class TestErrorHandlers:
    async def test_not_found(self, error_client: AsyncClient):
        response = await error_client.get("/missing")
        assert response.status_code == 404
        body = response.json()
        assert body["status"] == "NOT_FOUND"
        assert body["reason"] == "The required object was not found."
        assert body["message"] == "Event with id=7 was not found"

    async def test_conflict(self, error_client: AsyncClient):
        response = await error_client.get("/conflict")
        assert response.status_code == 409
        assert response.json()["status"] == "CONFLICT"

    async def test_validation_errors_are_400(self, error_client: AsyncClient):
        response = await error_client.post("/body", json={"name": "x"})
        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "BAD_REQUEST"
        assert body["errors"]
        assert body["errors"][0].startswith("name:")

    async def test_http_exception(self, error_client: AsyncClient):
        response = await error_client.get("/http")
        assert response.status_code == 405
        assert response.json()["message"] == "nope"

    async def test_unexpected_error_is_500(self, error_client: AsyncClient):
        response = await error_client.get("/boom")
        assert response.status_code == 500
        assert response.json()["status"] == "INTERNAL_SERVER_ERROR"
