"""corsfair exception hierarchy.

Shared across patterns, tables, the engine, and the fairing so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class CorsError(Exception):
    """Base for all corsfair-specific errors."""


class ConfigurationError(CorsError):
    """Raised when a rule, table, or fairing configuration is invalid.

    Always raised while the policy is being built, never at request time.
    """


class PatternError(ConfigurationError):
    """A route template could not be compiled.

    Carries the offending template so startup failures point at the
    exact registration that broke.
    """

    def __init__(self, template: object, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid route pattern {template!r}: {reason}")


@dataclass(frozen=True, slots=True)
class HTTPError(CorsError):
    """An error that maps directly to an HTTP status code.

    The ASGI adapter catches these and renders a plain response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class PolicyMismatch(HTTPError):  # noqa: N818 — reads as a decision, not a failure
    """403 — a cross-origin request matched no policy rule.

    Only raised when the fairing is configured to reject denied requests.
    Otherwise a mismatch is just a denied decision and the browser does
    the blocking.
    """

    def __init__(self, method: str, path: str, origin: str) -> None:
        super().__init__(
            status=403,
            detail=f"Cross-origin {method} {path!r} from {origin!r} is not allowed",
        )
