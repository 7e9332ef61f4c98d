"""The CORS fairing: request interceptor hooks around the host's routing.

Owns no policy logic. It resolves against its attached tables, asks the
engine for a decision, and then either short-circuits a preflight or tags
the handler's response with the decision headers.
"""

import logging
from collections.abc import Iterable

from corsfair.config import CORSConfig
from corsfair.engine import CorsDecision, decide
from corsfair.errors import ConfigurationError, PolicyMismatch
from corsfair.http.request import Request
from corsfair.http.response import Response
from corsfair.middleware.protocol import Next
from corsfair.policy.rule import PolicyRule
from corsfair.policy.table import PolicyTable

logger = logging.getLogger("corsfair.policy")


def _merge_vary(response: Response, value: str) -> Response:
    existing = [
        token.strip()
        for header in response.header_list("vary")
        for token in header.split(",")
        if token.strip()
    ]
    lowered = {token.lower() for token in existing}
    if "*" in lowered or value.lower() in lowered:
        return response
    merged = ", ".join([*existing, value])
    return response.without_header("vary").with_header("Vary", merged)


def merge_cors_headers(response: Response, headers: Iterable[tuple[str, str]]) -> Response:
    """Merge decision *headers* into *response*, leaving body and status alone.

    ``Vary`` is folded into any existing value; every other header
    replaces a same-named header the handler may have set.
    """
    for name, value in headers:
        if name.lower() == "vary":
            response = _merge_vary(response, value)
        else:
            response = response.without_header(name).with_header(name, value)
    return response


def _freeze_tables(tables: Iterable[PolicyTable]) -> tuple[PolicyTable, ...]:
    frozen: list[PolicyTable] = []
    for table in tables:
        if not isinstance(table, PolicyTable):
            msg = f"Expected a PolicyTable, got {type(table).__name__}"
            raise ConfigurationError(msg)
        frozen.append(table.freeze())
    return tuple(frozen)


class CORSFairing:
    """Request interceptor applying one or more policy tables.

    Tables are tried in the order they were attached; the first rule
    matching (path, method) wins across all of them, exactly as if the
    tables had been flattened into one.

    Hook usage (any host)::

        fairing = CORSFairing(cors(("/api/:user/action", ["GET", "PUT"])))

        early = fairing.before_route(request)
        if early is not None:
            return early
        response = handler(request)
        return fairing.after_response(request, response)

    Middleware usage (request/next hosts)::

        app.add_middleware(fairing)
    """

    __slots__ = ("_tables", "config")

    def __init__(self, *tables: PolicyTable, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()
        self._tables = _freeze_tables(tables)

    # -- Configuration --

    @property
    def tables(self) -> tuple[PolicyTable, ...]:
        return self._tables

    def attach(self, table: PolicyTable) -> "CORSFairing":
        """Attach another table after the existing ones."""
        self._tables = (*self._tables, *_freeze_tables((table,)))
        return self

    def reload(self, *tables: PolicyTable) -> None:
        """Replace every attached table at once.

        The new tuple is fully built and frozen before it is published,
        so a request in flight sees either the old tables or the new ones.
        """
        new_tables = _freeze_tables(tables)
        self._tables = new_tables
        logger.info(
            "CORS policy reloaded: %d tables, %d rules",
            len(new_tables),
            sum(len(t) for t in new_tables),
        )

    # -- Resolution --

    def resolve(self, path: str, method: str) -> PolicyRule | None:
        """First rule covering *method* on *path* across all attached tables."""
        for table in self._tables:
            rule = table.resolve(path, method)
            if rule is not None:
                return rule
        return None

    def decide(self, request: Request) -> CorsDecision | None:
        """Engine decision for *request*, or None if it isn't a CORS request."""
        return decide(self, request, config=self.config)

    def admit(self, request: Request) -> CorsDecision | None:
        """Decide a non-preflight request, rejecting it if configured to.

        Raises ``PolicyMismatch`` for a denied cross-origin request when
        ``config.reject_denied`` is set.
        """
        decision = self.decide(request)
        if decision is not None and not decision.allowed and self.config.reject_denied:
            raise PolicyMismatch(request.method, request.path, request.origin or "")
        return decision

    # -- Hooks --

    def before_route(self, request: Request) -> Response | None:
        """Answer preflights before routing; None lets routing continue."""
        if not request.is_preflight:
            return None
        decision = self.decide(request)
        if decision is None:
            return None
        if decision.allowed:
            return Response(body="", status=204, content_type=None, headers=decision.headers())
        status = self.config.preflight_deny_status
        if status is None:
            return None
        return Response(body="", status=status, content_type=None, headers=decision.headers())

    def apply(self, response: Response, decision: CorsDecision | None) -> Response:
        """Tag *response* with *decision*'s headers (only ``Vary`` when denied)."""
        if decision is None:
            return response
        headers = decision.headers()
        if not headers:
            return response
        return merge_cors_headers(response, headers)

    def after_response(self, request: Request, response: Response) -> Response:
        """Attach simple-request headers to the handler's response."""
        if request.is_preflight:
            return response
        return self.apply(response, self.decide(request))

    async def __call__(self, request: Request, next: Next) -> Response:
        """Run both hooks around *next* (request/next middleware shape)."""
        early = self.before_route(request)
        if early is not None:
            return early
        if request.is_preflight:
            return await next(request)
        decision = self.admit(request)
        response = await next(request)
        return self.apply(response, decision)
