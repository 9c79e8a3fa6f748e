"""CORS request evaluation.

``RequestEvaluator`` takes one request's method and headers, checks them
against a :class:`~corsgate.policy.PolicyStore` and returns an
:class:`Evaluation` describing the headers to write, the status to answer with
and whether the request may continue to the protected application. It never
touches a response object itself, which keeps it usable from any host.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from .config import (
    ALLOW_HEADERS_HEADER,
    ALLOW_METHODS_HEADER,
    ALLOW_ORIGIN_HEADER,
    DENIED_ORIGIN_VALUE,
    ORIGIN_HEADER,
    PREFLIGHT_METHOD,
    REQUEST_HEADERS_HEADER,
    REQUEST_METHOD_HEADER,
    VARY_HEADER,
)
from .policy import PolicyStore

HTTP_200_OK = 200
HTTP_403_FORBIDDEN = 403


class Decision(enum.Enum):
    ALLOWED = "allowed"
    DENIED_BAD_ORIGIN = "bad_origin"
    DENIED_BAD_METHOD = "bad_method"
    DENIED_BAD_HEADERS = "bad_headers"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOWED

    @property
    def reason(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class CORSFeatures:
    """Capability set of the evaluator.

    ``check_headers`` enables the requested-header check and switches
    ``Access-Control-Allow-Methods`` from the full method list to the single
    method under evaluation. ``deny_keeps_origin`` keeps
    ``Access-Control-Allow-Origin`` set to the requesting origin when a method
    or header is refused; when false the header is left out.
    """

    check_headers: bool = False
    deny_keeps_origin: bool = True


@dataclass(frozen=True)
class EvaluationContext:
    origin: str
    method: str
    headers: tuple[str, ...] = ()
    preflight: bool = False


@dataclass
class Evaluation:
    context: EvaluationContext
    decision: Decision
    headers: list[tuple[str, str]] = field(default_factory=list)
    status_code: int | None = None
    forward: bool = False

    @property
    def allowed(self) -> bool:
        return self.decision.allowed

    @property
    def denied(self) -> bool:
        return not self.decision.allowed


def split_header_list(value: str | None) -> tuple[str, ...]:
    """Split a comma separated header value into trimmed, non-empty names."""

    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None and name not in headers:
        # Plain dicts are case sensitive; Starlette's Headers are not.
        value = headers.get(name.lower())
    return value


class RequestEvaluator:
    """Run the CORS protocol for one request at a time.

    The evaluator holds no per-request state; a single instance serves all
    requests of a host concurrently.
    """

    def __init__(
        self,
        policy: PolicyStore,
        features: CORSFeatures | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.policy = policy
        self.features = features or CORSFeatures()
        self.logger = logger or logging.getLogger("corsgate.cors")

    def build_context(self, method: str, headers: Mapping[str, str]) -> EvaluationContext:
        origin = _get_header(headers, ORIGIN_HEADER) or ""
        requested_headers = split_header_list(_get_header(headers, REQUEST_HEADERS_HEADER))
        if method == PREFLIGHT_METHOD:
            # Some clients omit the probe header; fall back to the request's own method.
            probed = (_get_header(headers, REQUEST_METHOD_HEADER) or "").strip()
            return EvaluationContext(
                origin=origin,
                method=probed or method,
                headers=requested_headers,
                preflight=True,
            )
        return EvaluationContext(origin=origin, method=method, headers=requested_headers)

    def evaluate(self, method: str, headers: Mapping[str, str]) -> Evaluation:
        context = self.build_context(method, headers)
        evaluation = Evaluation(context=context, decision=self._check(context))
        evaluation.headers.append((VARY_HEADER, ORIGIN_HEADER))

        if evaluation.denied:
            self._deny(evaluation)
            return evaluation

        self._write_allow_headers(evaluation)
        if context.preflight:
            evaluation.status_code = HTTP_200_OK
        else:
            evaluation.forward = True
        return evaluation

    def _check(self, context: EvaluationContext) -> Decision:
        if not self.policy.is_origin_allowed(context.origin):
            return Decision.DENIED_BAD_ORIGIN
        if not self.policy.is_method_allowed(context.method, context.origin):
            return Decision.DENIED_BAD_METHOD
        if self.features.check_headers and not self.policy.are_headers_allowed(
            context.headers, context.origin
        ):
            return Decision.DENIED_BAD_HEADERS
        return Decision.ALLOWED

    def _deny(self, evaluation: Evaluation) -> None:
        context = evaluation.context
        if evaluation.decision is Decision.DENIED_BAD_ORIGIN:
            evaluation.headers.append((ALLOW_ORIGIN_HEADER, DENIED_ORIGIN_VALUE))
        elif self.features.deny_keeps_origin and context.origin:
            evaluation.headers.append((ALLOW_ORIGIN_HEADER, context.origin))
        evaluation.status_code = HTTP_403_FORBIDDEN
        evaluation.forward = False

        self.logger.warning(
            "Request blocked by CORS: %s",
            evaluation.decision.reason,
            extra={
                "event_action": "cors_denied",
                "cors_reason": evaluation.decision.value,
                "cors_origin": context.origin or None,
                "cors_method": context.method,
                "cors_request_headers": ",".join(context.headers) or None,
                "cors_preflight": context.preflight,
            },
        )

    def _write_allow_headers(self, evaluation: Evaluation) -> None:
        context = evaluation.context
        if context.origin:
            evaluation.headers.append((ALLOW_ORIGIN_HEADER, context.origin))
        if self.features.check_headers:
            evaluation.headers.append((ALLOW_METHODS_HEADER, context.method))
            if context.headers:
                evaluation.headers.append((ALLOW_HEADERS_HEADER, ",".join(context.headers)))
        else:
            methods = self.policy.allowed_methods(context.origin)
            evaluation.headers.append((ALLOW_METHODS_HEADER, ",".join(methods)))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(policy={self.policy!r}, features={self.features!r})"
