"""Request/response logging middleware that emits structured access logs."""

from __future__ import annotations

import logging
import os
import random
import time
import traceback
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..logging import bind_request_context, reset_request_context
from ..logging.formatter import SERVICE_NAME


def _load_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = float(value)
        if parsed < 0:
            return default
        return parsed
    except ValueError:
        return default


class LoggingMiddleware(BaseHTTPMiddleware):
    """Emit one access log record per request, including the CORS decision."""

    noise_paths = {"/health", "/healthz"}

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.logger = logging.getLogger("corsgate.access")
        self.sample_rate = max(0.0, min(1.0, _load_float_env("ACCESS_LOG_SAMPLE", 1.0)))
        slow_ms = _load_float_env("SLOW_REQUEST_MS", 500.0)
        self.slow_request_ns = int(slow_ms * 1_000_000)
        self.random = random.SystemRandom()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_ns = time.perf_counter_ns()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = bind_request_context(request_id)

        status_code = 500
        error_type: str | None = None
        error_message: str | None = None
        error_stack: str | None = None

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception as exc:  # noqa: BLE001 - log unexpected errors
            error_type = type(exc).__name__
            error_message = str(exc)
            error_stack = "".join(
                traceback.format_exception(exc.__class__, exc, exc.__traceback__)
            )
            raise
        finally:
            duration_ns = time.perf_counter_ns() - start_ns
            if self._should_log(request, status_code, duration_ns):
                log_level = logging.INFO
                if status_code >= 500:
                    log_level = logging.ERROR
                elif status_code >= 400:
                    log_level = logging.WARNING

                extra = {
                    "request_id": request_id,
                    "http_request_method": request.method,
                    "url_path": request.url.path,
                    "http_status_code": status_code,
                    "event_duration": duration_ns,
                    "event_dataset": f"{SERVICE_NAME}.access",
                    "cors_decision": getattr(request.state, "cors_decision", None),
                }
                if duration_ns >= self.slow_request_ns:
                    extra["event_action"] = "slow_request"
                if error_type:
                    extra["error_type"] = error_type
                if error_message:
                    extra["error_message"] = error_message
                if error_stack:
                    extra["error_stack"] = error_stack

                self.logger.log(
                    log_level,
                    f"{request.method} {request.url.path} -> {status_code}",
                    extra=extra,
                )

            reset_request_context(token)

    def _should_log(self, request: Request, status_code: int, duration_ns: int) -> bool:
        if request.url.path in self.noise_paths and status_code < 400:
            return False
        if status_code >= 400:
            return True
        if duration_ns >= self.slow_request_ns:
            return True
        if self.sample_rate >= 1.0:
            return True
        return self.random.random() < self.sample_rate


__all__ = ["LoggingMiddleware"]
