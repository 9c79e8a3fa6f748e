"""JSON formatter emitting ECS style field names."""

from __future__ import annotations

import logging
import os
import traceback
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = os.getenv("SERVICE_NAME", "corsgate")

FIELD_MAP = {
    "request_id": "http.request.id",
    "http_request_method": "http.request.method",
    "url_path": "url.path",
    "http_status_code": "http.response.status_code",
    "event_duration": "event.duration",
    "event_dataset": "event.dataset",
    "event_action": "event.action",
    "error_stack": "error.stack",
    "error_type": "error.type",
    "error_message": "error.message",
    "cors_reason": "cors.reason",
    "cors_origin": "cors.origin",
    "cors_method": "cors.method",
    "cors_request_headers": "cors.request.headers",
    "cors_preflight": "cors.preflight",
    "cors_decision": "cors.decision",
}


class ECSJsonFormatter(JsonFormatter):
    """JSON formatter that renames known record attributes to ECS fields."""

    def __init__(self, *args: Any, service_name: str = SERVICE_NAME, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(
        self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if "@timestamp" not in log_record:
            log_record["@timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        log_record.setdefault("log.level", record.levelname)
        log_record.setdefault("log.logger", record.name)
        log_record.setdefault("message", record.getMessage())

        dataset = getattr(record, "event_dataset", None) or f"{self.service_name}.app"
        log_record["event.dataset"] = dataset
        log_record["service.name"] = self.service_name

        for attr, ecs_name in FIELD_MAP.items():
            value = log_record.pop(attr, getattr(record, attr, None))
            if value is not None:
                log_record[ecs_name] = value

        if record.exc_info and "error.stack" not in log_record:
            log_record["error.stack"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).strip()

        for key in [key for key, value in log_record.items() if value is None]:
            log_record.pop(key, None)
