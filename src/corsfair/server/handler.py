"""ASGI adapter — runs a CORSFairing in front of any ASGI application.

The only component that touches raw ASGI directly. Preflights are
answered here without calling the wrapped app; for everything else the
``http.response.start`` message is intercepted and tagged with the
decision headers, so the body streams through untouched.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

from corsfair._internal.asgi import ASGIApp, Receive, Scope, Send
from corsfair.engine import CorsDecision
from corsfair.errors import HTTPError
from corsfair.http.request import Request
from corsfair.http.response import Response
from corsfair.middleware.fairing import CORSFairing
from corsfair.server.errors import http_error_response
from corsfair.server.sender import decode_headers, encode_headers, send_response

logger = logging.getLogger("corsfair.server")


class FairingMiddleware:
    """ASGI middleware applying *fairing* to every HTTP request of *app*.

    Usage::

        app = FairingMiddleware(app, CORSFairing(table))

    Non-HTTP scopes (lifespan, websocket) are passed through as-is.
    """

    __slots__ = ("app", "fairing")

    def __init__(self, app: ASGIApp, fairing: CORSFairing) -> None:
        self.app = app
        self.fairing = fairing

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request.from_asgi(scope)
        try:
            early = self.fairing.before_route(request)
            if early is not None:
                logger.debug(
                    "Answered CORS preflight %s %s with %d", request.method, request.path, early.status
                )
                await send_response(early, send)
                return
            decision = None if request.is_preflight else self.fairing.admit(request)
        except HTTPError as exc:
            await send_response(http_error_response(exc, request), send)
            return

        if decision is None or not decision.headers():
            await self.app(scope, receive, send)
            return

        await self.app(scope, receive, self._tagging_send(send, decision))

    def _tagging_send(self, send: Send, decision: CorsDecision) -> Send:
        fairing = self.fairing

        async def tagged(message: MutableMapping[str, Any]) -> None:
            if message["type"] == "http.response.start":
                original = Response(
                    status=message["status"],
                    content_type=None,
                    headers=decode_headers(message.get("headers", ())),
                )
                tagged_response = fairing.apply(original, decision)
                message = {**message, "headers": encode_headers(tagged_response.headers)}
            await send(message)

        return tagged
