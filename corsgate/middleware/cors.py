"""Middleware that enforces a per-origin CORS policy."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..config import VARY_HEADER
from ..evaluator import CORSFeatures, RequestEvaluator
from ..policy import PolicyStore
from ..utils.http import append_vary


class PolicyCORSMiddleware(BaseHTTPMiddleware):
    """Evaluate every request against a :class:`PolicyStore`.

    Denied requests and preflights are answered here and never reach the
    wrapped application. Allowed actual requests are forwarded once and the
    CORS headers are added to the downstream response.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy: PolicyStore | Mapping[str, Any],
        *,
        features: CORSFeatures | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(app)
        if not isinstance(policy, PolicyStore):
            policy = PolicyStore.from_mapping(policy)
        self.evaluator = RequestEvaluator(policy, features=features, logger=logger)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        evaluation = self.evaluator.evaluate(request.method, request.headers)
        request.state.cors_decision = evaluation.decision.value

        if not evaluation.forward:
            return Response(
                status_code=evaluation.status_code,
                headers=dict(evaluation.headers),
            )

        response = await call_next(request)
        for header, value in evaluation.headers:
            if header == VARY_HEADER:
                append_vary(response.headers, value)
            else:
                response.headers[header] = value
        return response

    def __repr__(self) -> str:
        policy = self.evaluator.policy
        return (
            f"{self.__class__.__name__}(origins={policy.as_dict()!r}, "
            f"features={self.evaluator.features!r})"
        )


def install_cors(
    app: FastAPI,
    policy: PolicyStore | Mapping[str, Any],
    *,
    features: CORSFeatures | None = None,
    logger: logging.Logger | None = None,
) -> PolicyStore:
    """Validate ``policy`` and register :class:`PolicyCORSMiddleware` on ``app``.

    Validation happens here rather than when Starlette first builds the
    middleware stack, so a broken policy fails at startup.
    """

    if not isinstance(policy, PolicyStore):
        policy = PolicyStore.from_mapping(policy)
    app.add_middleware(PolicyCORSMiddleware, policy=policy, features=features, logger=logger)
    return policy
