"""Per-origin CORS policy enforcement for ASGI applications."""

from .evaluator import (
    CORSFeatures,
    Decision,
    Evaluation,
    EvaluationContext,
    RequestEvaluator,
)
from .policy import OriginRule, PolicyConfigurationError, PolicyStore

__all__ = [
    "CORSFeatures",
    "Decision",
    "Evaluation",
    "EvaluationContext",
    "OriginRule",
    "PolicyConfigurationError",
    "PolicyStore",
    "RequestEvaluator",
]
