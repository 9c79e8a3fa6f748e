"""Immutable CORS policy: which origins may use which methods and headers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .config import WILDCARD


class PolicyConfigurationError(RuntimeError):
    """Raised when a CORS policy cannot be built from its configuration."""


@dataclass(frozen=True)
class OriginRule:
    """Methods and headers allowed for a single origin entry.

    ``methods`` keeps the configured order so responses list methods the way
    the policy author wrote them.
    """

    methods: tuple[str, ...] = ()
    headers: frozenset[str] = field(default_factory=frozenset)
    header_keys: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # lower-cased once; header names compare case-insensitively
        object.__setattr__(self, "header_keys", frozenset(name.lower() for name in self.headers))

    def allows_method(self, method: str) -> bool:
        return method in self.methods or WILDCARD in self.methods

    def allows_headers(self, headers: Iterable[str]) -> bool:
        if WILDCARD in self.headers:
            return True
        return all(name.lower() in self.header_keys for name in headers)


_EMPTY_RULE = OriginRule()


def _tokens(origin: str, key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item) for item in value]
    raise PolicyConfigurationError(
        f"{key} for origin {origin!r} must be a list of strings, got {type(value).__name__}"
    )


def _parse_rule(origin: str, value: Any) -> OriginRule:
    if isinstance(value, OriginRule):
        return value
    if isinstance(value, Mapping):
        unknown = set(value) - {"methods", "headers"}
        if unknown:
            names = ", ".join(sorted(map(str, unknown)))
            raise PolicyConfigurationError(
                f"Unknown keys for origin {origin!r}: {names}"
            )
        methods = _tokens(origin, "methods", value.get("methods") or [])
        headers = _tokens(origin, "headers", value.get("headers") or [])
    else:
        methods = _tokens(origin, "methods", value)
        headers = []
    # dict.fromkeys drops duplicates while keeping the configured order
    return OriginRule(
        methods=tuple(dict.fromkeys(methods)),
        headers=frozenset(headers),
    )


def validate(origins: Any) -> None:
    """Reject policies without origins or with an empty origin key."""

    if not isinstance(origins, Mapping):
        raise PolicyConfigurationError(
            f"CORS policy must be a mapping of origins, got {type(origins).__name__}"
        )
    if not origins:
        raise PolicyConfigurationError("must supply at least one origin or '*'")
    for origin in origins:
        if not isinstance(origin, str):
            raise PolicyConfigurationError(f"Origin keys must be strings, got {origin!r}")
        if origin == "":
            raise PolicyConfigurationError("must supply at least one origin or '*'")


class PolicyStore:
    """Answer origin, method and header admissibility queries.

    Lookups for origin scoped data always use the same rule: the exact origin
    entry if present, otherwise the wildcard entry, otherwise nothing. The
    wildcard entry is a fallback and is never merged with an exact entry.

    The store is never mutated after construction, so one instance can be
    shared by any number of concurrent requests.
    """

    def __init__(self, rules: Mapping[str, Any]) -> None:
        validate(rules)
        self._rules: Mapping[str, OriginRule] = MappingProxyType(
            {origin: _parse_rule(origin, value) for origin, value in rules.items()}
        )

    @classmethod
    def from_mapping(cls, origins: Any) -> "PolicyStore":
        """Build a store from a parsed policy document.

        Each origin maps either to a list of methods or to a mapping with
        ``methods`` and ``headers`` lists.
        """

        return cls(origins)

    @property
    def origins(self) -> tuple[str, ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, origin: object) -> bool:
        return origin in self._rules

    def rule_for(self, origin: str) -> OriginRule:
        rule = self._rules.get(origin)
        if rule is not None:
            return rule
        return self._rules.get(WILDCARD, _EMPTY_RULE)

    def is_origin_allowed(self, origin: str) -> bool:
        return origin in self._rules or WILDCARD in self._rules

    def allowed_methods(self, origin: str) -> tuple[str, ...]:
        return self.rule_for(origin).methods

    def allowed_headers(self, origin: str) -> frozenset[str]:
        return self.rule_for(origin).headers

    def is_method_allowed(self, method: str, origin: str) -> bool:
        return self.rule_for(origin).allows_method(method)

    def are_headers_allowed(self, headers: Iterable[str], origin: str) -> bool:
        return self.rule_for(origin).allows_headers(headers)

    def as_dict(self) -> dict[str, dict[str, list[str]]]:
        """Return a plain, sorted representation suitable for display."""

        return {
            origin: {
                "methods": list(rule.methods),
                "headers": sorted(rule.headers),
            }
            for origin, rule in sorted(self._rules.items())
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(origins={list(self._rules)!r})"
