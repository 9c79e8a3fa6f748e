from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from httpx import ASGITransport

from corsgate.evaluator import CORSFeatures
from corsgate.middleware.cors import install_cors

ALLOWED_ORIGIN = "http://allowed.example"
OTHER_ORIGIN = "http://evil.example"

DEFAULT_POLICY: dict[str, Any] = {
    ALLOWED_ORIGIN: ["GET", "POST"],
}


def build_app(
    policy: Mapping[str, Any],
    *,
    features: CORSFeatures | None = None,
) -> FastAPI:
    """Return an app with one resource that counts how often it was reached."""

    app = FastAPI()
    app.state.hits = 0
    install_cors(app, policy, features=features)

    @app.api_route("/resource", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def resource(request: Request):  # pragma: no cover - exercised via clients
        request.app.state.hits += 1
        return {"method": request.method}

    return app


@pytest.fixture
def app_factory():
    return build_app


@pytest.fixture
def cors_app():
    return build_app(DEFAULT_POLICY)


@pytest_asyncio.fixture
async def client(cors_app):
    transport = ASGITransport(app=cors_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
