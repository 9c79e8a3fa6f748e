"""ASGI middleware shipped with the gateway."""

from .cors import PolicyCORSMiddleware, install_cors
from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "PolicyCORSMiddleware", "install_cors"]
