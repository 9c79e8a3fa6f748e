"""FastAPI application factory wiring the CORS gateway."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI

from . import config
from .evaluator import CORSFeatures
from .loader import load_policy
from .logging import configure_logging
from .middleware.cors import install_cors
from .middleware.logging import LoggingMiddleware
from .policy import PolicyConfigurationError, PolicyStore

logger = logging.getLogger("corsgate.main")


def features_from_env() -> CORSFeatures:
    return CORSFeatures(
        check_headers=config.check_headers_enabled(),
        deny_keeps_origin=config.deny_keeps_origin(),
    )


def create_app(
    policy: PolicyStore | Mapping[str, Any] | None = None,
    *,
    features: CORSFeatures | None = None,
) -> FastAPI:
    """Build an application protected by the CORS policy.

    Without an explicit ``policy`` the file named by ``CORS_POLICY_FILE`` is
    loaded. Logging is configured from the environment. Configuration errors
    are raised here, before any request is served.
    """

    configure_logging()

    if policy is None:
        path = config.policy_file()
        if not path:
            raise PolicyConfigurationError(
                "CORS_POLICY_FILE must name a policy file when no policy is given"
            )
        policy = load_policy(path)

    app = FastAPI(title="corsgate")

    # Starlette runs the last added middleware first, so access logs wrap CORS.
    store = install_cors(app, policy, features=features or features_from_env())
    app.add_middleware(LoggingMiddleware)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    logger.info(
        "CORS gateway configured",
        extra={"event_action": "app_configured", "policy_origins": len(store)},
    )
    return app
