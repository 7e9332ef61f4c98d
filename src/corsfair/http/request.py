"""Immutable HTTP request.

Frozen metadata only. The fairing never reads the body, so the request
carries nothing that would have to be awaited.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from corsfair.http.headers import Headers

# RFC 9110 token: the grammar for method names
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def is_token(value: str) -> bool:
    """True if *value* is a valid HTTP token (e.g. a method name)."""
    return bool(_TOKEN_RE.match(value))


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers) is frozen at creation. The CORS
    properties below never raise: anything unparseable reads as absent.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # -- CORS properties --

    @property
    def origin(self) -> str | None:
        """The ``Origin`` header, or None when missing or blank."""
        value = self.headers.get("origin")
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def requested_method(self) -> str | None:
        """The ``Access-Control-Request-Method`` header, if it is a valid token."""
        value = self.headers.get("access-control-request-method")
        if value is None:
            return None
        value = value.strip()
        if not is_token(value):
            return None
        return value.upper()

    @property
    def requested_headers(self) -> tuple[str, ...]:
        """Lower-cased names from ``Access-Control-Request-Headers``, deduplicated."""
        seen: dict[str, None] = {}
        for name in self.headers.get_tokens("access-control-request-headers"):
            seen.setdefault(name.lower(), None)
        return tuple(seen)

    @property
    def is_preflight(self) -> bool:
        """True for ``OPTIONS`` carrying ``Access-Control-Request-Method``."""
        return (
            self.method == "OPTIONS"
            and "access-control-request-method" in self.headers
        )

    @property
    def is_credentialed(self) -> bool:
        """True when the browser attached cookies or an Authorization header."""
        return "cookie" in self.headers or "authorization" in self.headers

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )

    @classmethod
    def create(
        cls,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
    ) -> Request:
        """Build a Request from plain strings (tests and the CLI)."""
        return cls(
            method=method.upper(),
            path=path,
            headers=Headers.from_pairs(headers or {}),
        )
