"""Policy rules — the atomic unit of CORS configuration.

A rule binds one compiled route pattern to the methods, origins, and
request headers it allows. Rules are frozen and shared read-only across
every request.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Literal, TypeAlias, TypeVar

from corsfair.errors import ConfigurationError
from corsfair.http.request import is_token
from corsfair.routing.pattern import RoutePattern


class Wildcard(Enum):
    """Marker for "allow anything" in a rule's origin or header policy."""

    ANY = "*"

    def __repr__(self) -> str:
        return "ANY"


ANY = Wildcard.ANY

T = TypeVar("T")
AnyOr: TypeAlias = frozenset[T] | Literal[Wildcard.ANY]

# Request headers the original fairing always accepted
DEFAULT_ALLOW_HEADERS: frozenset[str] = frozenset(
    {"accept", "accept-language", "authorization", "content-type"}
)


def _normalize_methods(methods: Iterable[str] | str) -> tuple[str, ...]:
    if isinstance(methods, str):
        methods = (methods,)
    elif isinstance(methods, (set, frozenset)):
        methods = sorted(methods, key=str)
    ordered: dict[str, None] = {}
    for method in methods:
        if not isinstance(method, str) or not is_token(method):
            msg = f"Invalid HTTP method {method!r}"
            raise ConfigurationError(msg)
        ordered.setdefault(method.upper(), None)
    if not ordered:
        msg = "A policy rule must allow at least one HTTP method."
        raise ConfigurationError(msg)
    return tuple(ordered)


def _normalize_set(
    values: Iterable[str] | str | Wildcard,
    *,
    lower: bool,
    label: str,
) -> AnyOr[str]:
    if values is ANY or values == "*":
        return ANY
    if isinstance(values, str):
        values = (values,)
    result: set[str] = set()
    for value in values:
        if not isinstance(value, str) or not value.strip():
            msg = f"Invalid {label} {value!r}"
            raise ConfigurationError(msg)
        value = value.strip()
        if value == "*":
            return ANY
        result.add(value.lower() if lower else value)
    return frozenset(result)


@dataclass(frozen=True, slots=True)
class PolicyRule:
    """A frozen CORS rule for one route pattern.

    Inputs are normalized on construction: methods are upper-cased and
    deduplicated in declaration order, header names are lower-cased, and
    ``"*"`` anywhere in origins or headers collapses to ``ANY``.
    An empty method set raises ``ConfigurationError``.
    """

    pattern: RoutePattern
    methods: tuple[str, ...]
    origins: AnyOr[str] = ANY
    headers: AnyOr[str] = DEFAULT_ALLOW_HEADERS
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, RoutePattern):
            msg = f"pattern must be a compiled RoutePattern, got {type(self.pattern).__name__}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "methods", _normalize_methods(self.methods))
        object.__setattr__(
            self, "origins", _normalize_set(self.origins, lower=False, label="origin")
        )
        object.__setattr__(
            self, "headers", _normalize_set(self.headers, lower=True, label="header name")
        )
        if isinstance(self.expose_headers, str):
            object.__setattr__(self, "expose_headers", (self.expose_headers,))
        else:
            object.__setattr__(self, "expose_headers", tuple(self.expose_headers))
        if self.max_age is not None and self.max_age < 0:
            msg = f"max_age must be >= 0, got {self.max_age}"
            raise ConfigurationError(msg)

    @classmethod
    def create(
        cls,
        template: str,
        methods: Iterable[str] | str,
        *,
        origins: Iterable[str] | str | Wildcard = ANY,
        headers: Iterable[str] | str | Wildcard = DEFAULT_ALLOW_HEADERS,
        expose_headers: Iterable[str] | str = (),
        allow_credentials: bool = False,
        max_age: int | None = None,
    ) -> PolicyRule:
        """Compile *template* and build a rule. Raises ``PatternError`` on bad templates."""
        return cls(
            pattern=RoutePattern.compile(template),
            methods=methods,  # type: ignore[arg-type]
            origins=origins,  # type: ignore[arg-type]
            headers=headers,  # type: ignore[arg-type]
            expose_headers=expose_headers,  # type: ignore[arg-type]
            allow_credentials=allow_credentials,
            max_age=max_age,
        )

    # -- Checks --

    def allows_method(self, method: str) -> bool:
        return method.upper() in self.methods

    def allows_origin(self, origin: str) -> bool:
        return self.origins is ANY or origin in self.origins

    def allows_headers(self, names: Iterable[str]) -> bool:
        """True if every requested header name is allowed (case-insensitive)."""
        if self.headers is ANY:
            return True
        return all(name.lower() in self.headers for name in names)

    def applies_to(self, path: str, method: str) -> bool:
        """True if this rule covers *method* on *path*."""
        return self.allows_method(method) and self.pattern.matches(path)

    @property
    def template(self) -> str:
        return self.pattern.template
