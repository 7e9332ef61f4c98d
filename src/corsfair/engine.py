"""CORS decision engine.

Turns a request plus a resolved policy into an immutable ``CorsDecision``.
Two branches, following the CORS protocol:

- preflight (``OPTIONS`` + ``Access-Control-Request-Method``): resolve with
  the *requested* method and check the requested headers
- simple/actual: resolve with the request's own method

Requests without an ``Origin`` are not CORS requests; ``decide`` returns
None for them and the caller must leave the exchange untouched. Nothing
here raises on bad request input, and nothing here blocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from corsfair.config import CORSConfig
from corsfair.http.request import Request
from corsfair.policy.rule import ANY, PolicyRule

logger = logging.getLogger("corsfair.engine")

_DEFAULT_CONFIG = CORSConfig()


class Resolver(Protocol):
    """Anything that resolves (path, method) to a rule: a table or a fairing."""

    def resolve(self, path: str, method: str) -> PolicyRule | None: ...


@dataclass(frozen=True, slots=True)
class CorsDecision:
    """The outcome for one cross-origin request.

    Built fresh per request and never mutated. ``headers()`` renders the
    wire headers in a fixed order, so equal decisions render byte-identical
    headers. A denied decision renders no CORS headers; it only carries
    ``Vary: Origin`` when the answer depended on the origin.
    """

    allowed: bool
    preflight: bool = False
    allow_origin: str | None = None
    allow_methods: tuple[str, ...] | None = None
    allow_headers: tuple[str, ...] | None = None
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int | None = None
    vary_origin: bool = False
    reason: str = ""
    rule: PolicyRule | None = field(default=None, compare=False)

    def headers(self) -> tuple[tuple[str, str], ...]:
        """Response headers carrying this decision."""
        if not self.allowed or self.allow_origin is None:
            return (("Vary", "Origin"),) if self.vary_origin else ()
        headers: list[tuple[str, str]] = [("Access-Control-Allow-Origin", self.allow_origin)]
        if self.vary_origin:
            headers.append(("Vary", "Origin"))
        if self.allow_credentials:
            headers.append(("Access-Control-Allow-Credentials", "true"))
        if self.allow_methods:
            headers.append(("Access-Control-Allow-Methods", ", ".join(self.allow_methods)))
        if self.allow_headers:
            headers.append(("Access-Control-Allow-Headers", ", ".join(self.allow_headers)))
        if self.max_age is not None:
            headers.append(("Access-Control-Max-Age", str(self.max_age)))
        if self.expose_headers:
            headers.append(("Access-Control-Expose-Headers", ", ".join(self.expose_headers)))
        return tuple(headers)


def _denied(
    request: Request,
    reason: str,
    *,
    preflight: bool,
    vary_origin: bool = False,
) -> CorsDecision:
    logger.debug(
        "CORS %s denied: %s %s from %s (%s)",
        "preflight" if preflight else "request",
        request.method,
        request.path,
        request.origin,
        reason,
    )
    return CorsDecision(
        allowed=False, preflight=preflight, reason=reason, vary_origin=vary_origin
    )


def _origin_value(
    rule: PolicyRule,
    origin: str,
    config: CORSConfig,
    *,
    credentialed: bool,
) -> tuple[str, bool]:
    """Return (Access-Control-Allow-Origin value, whether it varies by origin).

    ``*`` is only sent when configured, for "any origin" rules, and never
    for credentialed requests, which require the exact origin.
    """
    if config.send_wildcard and rule.origins is ANY and not credentialed:
        return "*", False
    return origin, True


def _decide_preflight(
    resolver: Resolver,
    request: Request,
    origin: str,
    requested_method: str,
    config: CORSConfig,
) -> CorsDecision:
    rule = resolver.resolve(request.path, requested_method)
    if rule is None:
        return _denied(request, f"no rule allows {requested_method}", preflight=True)
    if not rule.allows_origin(origin):
        return _denied(
            request, "origin not allowed", preflight=True, vary_origin=True
        )
    requested_headers = request.requested_headers
    if not rule.allows_headers(requested_headers):
        return _denied(request, "requested headers not allowed", preflight=True)

    credentialed = rule.allow_credentials or request.is_credentialed
    allow_origin, vary = _origin_value(rule, origin, config, credentialed=credentialed)
    return CorsDecision(
        allowed=True,
        preflight=True,
        allow_origin=allow_origin,
        allow_methods=rule.methods,
        allow_headers=requested_headers or None,
        allow_credentials=rule.allow_credentials,
        max_age=rule.max_age if rule.max_age is not None else config.max_age,
        vary_origin=vary,
        rule=rule,
    )


def _decide_actual(
    resolver: Resolver,
    request: Request,
    origin: str,
    config: CORSConfig,
) -> CorsDecision:
    rule = resolver.resolve(request.path, request.method)
    if rule is None:
        return _denied(request, f"no rule allows {request.method}", preflight=False)
    if not rule.allows_origin(origin):
        return _denied(
            request, "origin not allowed", preflight=False, vary_origin=True
        )

    credentialed = rule.allow_credentials or request.is_credentialed
    allow_origin, vary = _origin_value(rule, origin, config, credentialed=credentialed)
    return CorsDecision(
        allowed=True,
        allow_origin=allow_origin,
        expose_headers=rule.expose_headers,
        allow_credentials=rule.allow_credentials,
        vary_origin=vary,
        rule=rule,
    )


def decide(
    resolver: Resolver,
    request: Request,
    *,
    config: CORSConfig | None = None,
) -> CorsDecision | None:
    """Decide whether *request* is an allowed cross-origin request.

    Returns None when the request is not a CORS request at all: no (or a
    blank) ``Origin``, or a preflight whose ``Access-Control-Request-Method``
    is not a valid method token.
    """
    origin = request.origin
    if origin is None:
        return None

    config = config or _DEFAULT_CONFIG
    if request.is_preflight:
        requested_method = request.requested_method
        if requested_method is None:
            return None
        return _decide_preflight(resolver, request, origin, requested_method, config)

    return _decide_actual(resolver, request, origin, config)
