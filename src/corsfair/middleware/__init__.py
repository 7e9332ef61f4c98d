"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    CORSFairing -- per-route CORS policy (preflight + response headers)
"""

from corsfair.middleware.fairing import CORSFairing, merge_cors_headers
from corsfair.middleware.protocol import Middleware, Next

__all__ = ["CORSFairing", "Middleware", "Next", "merge_cors_headers"]
