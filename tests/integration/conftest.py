"""Shared fixtures for integration tests.

The application is built with ``create_app`` and extended with endpoints
that raise on purpose, so every failure category can be produced through
the full request stack.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi import FastAPI, HTTPException, status
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, model_validator

from request_envelope.api.main import create_app
from request_envelope.core.config import Settings, get_settings


class Period(BaseModel):
    start: int
    end: int

    @model_validator(mode="after")
    def check_order(self) -> "Period":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self


class Line(BaseModel):
    sku: str
    quantity: int


class Order(BaseModel):
    lines: list[Line]


def _add_test_endpoints(app: FastAPI) -> None:
    """Add endpoints that fail on purpose."""

    @app.get("/test/generic-exception")
    async def raise_generic_exception() -> None:
        raise RuntimeError("connection string: postgres://admin:secret@db")

    @app.get("/test/http-403")
    async def raise_http_403() -> None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    @app.post("/test/periods")
    async def create_period(body: Period) -> Period:
        return body

    @app.post("/test/orders")
    async def create_order(body: Order) -> Order:
        return body


@pytest.fixture
def clean_settings() -> Generator[Settings]:
    """Provide fresh settings and clear the cache afterwards."""
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def app(clean_settings: Settings) -> FastAPI:
    """Create the application with the test endpoints."""
    application = create_app(clean_settings)
    _add_test_endpoints(application)
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient]:
    """Synchronous client that returns 500 responses instead of raising."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Asynchronous client over the ASGI transport."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
