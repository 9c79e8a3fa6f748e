"""Read CORS policies from YAML files."""

from __future__ import annotations

import logging
import os
from typing import Any

import yaml

from .policy import PolicyConfigurationError, PolicyStore

logger = logging.getLogger("corsgate.loader")


def load_policy_mapping(path: str | os.PathLike[str]) -> Any:
    """Return the parsed YAML document stored at ``path``.

    Example document::

        "https://app.example.com": [GET, POST]
        "*":
          methods: [GET]
          headers: [Content-Type]
    """

    try:
        with open(path, encoding="utf-8") as handle:
            document = yaml.safe_load(handle)
    except OSError as exc:
        raise PolicyConfigurationError(f"Cannot read CORS policy file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise PolicyConfigurationError(f"Invalid YAML in CORS policy file {path}: {exc}") from exc
    return document


def load_policy(path: str | os.PathLike[str]) -> PolicyStore:
    """Load and validate the policy stored at ``path``."""

    policy = PolicyStore.from_mapping(load_policy_mapping(path))
    logger.info(
        "Loaded CORS policy",
        extra={"event_action": "policy_loaded", "policy_origins": len(policy)},
    )
    return policy
