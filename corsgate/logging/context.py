"""Request scoped context helpers for logging."""

from __future__ import annotations

from contextvars import ContextVar, Token

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def bind_request_context(request_id: str) -> Token[str | None]:
    """Bind the request id for the current task and return the reset token."""

    return request_id_ctx_var.set(request_id)


def reset_request_context(token: Token[str | None]) -> None:
    request_id_ctx_var.reset(token)
