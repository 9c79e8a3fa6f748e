"""Logging filters that enrich records."""

from __future__ import annotations

import logging

from .context import request_id_ctx_var


class RequestContextFilter(logging.Filter):
    """Attach the request id of the current task to log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        request_id = request_id_ctx_var.get(None)
        if request_id and not getattr(record, "request_id", None):
            record.request_id = request_id
        return True
