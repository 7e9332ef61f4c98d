"""corsfair — per-route CORS policies for ASGI applications.

Answers one question for every request: is this cross-origin request
allowed, and which headers say so?

Basic usage::

    from corsfair import CORSFairing, FairingMiddleware, cors

    table = cors(
        ("/api/:user/action", ["GET", "PUT"]),
        ("/api/:user/delete", ["DELETE"]),
    )
    app = FairingMiddleware(app, CORSFairing(table))

Hook usage for other hosts::

    early = fairing.before_route(request)   # preflight short-circuit
    response = fairing.after_response(request, response)
"""

__version__ = "0.1.0"
__all__ = [
    "ANY",
    "CORSConfig",
    "CORSFairing",
    "ConfigurationError",
    "CorsDecision",
    "CorsError",
    "FairingMiddleware",
    "HTTPError",
    "PatternError",
    "PolicyMismatch",
    "PolicyRule",
    "PolicyTable",
    "Request",
    "Response",
    "RoutePattern",
    "compile_pattern",
    "cors",
    "decide",
]

# Public name -> defining module. Resolved on first attribute access.
_LAZY_IMPORTS: dict[str, str] = {
    "ANY": "corsfair.policy.rule",
    "CORSConfig": "corsfair.config",
    "CORSFairing": "corsfair.middleware.fairing",
    "ConfigurationError": "corsfair.errors",
    "CorsDecision": "corsfair.engine",
    "CorsError": "corsfair.errors",
    "FairingMiddleware": "corsfair.server.handler",
    "HTTPError": "corsfair.errors",
    "PatternError": "corsfair.errors",
    "PolicyMismatch": "corsfair.errors",
    "PolicyRule": "corsfair.policy.rule",
    "PolicyTable": "corsfair.policy.table",
    "Request": "corsfair.http.request",
    "Response": "corsfair.http.response",
    "RoutePattern": "corsfair.routing.pattern",
    "compile_pattern": "corsfair.routing.pattern",
    "cors": "corsfair.policy.table",
    "decide": "corsfair.engine",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import corsfair`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
