"""Fairing configuration.

CORSConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass

from corsfair.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """Fairing configuration. Immutable after creation.

    Per-rule settings on ``PolicyRule`` win over these; the values here
    fill in whatever a rule leaves unset::

        CORSConfig(max_age=3600, preflight_deny_status=None)
    """

    # Answer "any origin" rules with "*" instead of echoing the Origin.
    # Never applies to credentialed requests.
    send_wildcard: bool = False

    # Preflight cache lifetime in seconds; None omits Access-Control-Max-Age
    max_age: int | None = 600  # 10 minutes

    # Status for denied preflights; None passes the request through untouched
    preflight_deny_status: int | None = 403

    # Reject denied cross-origin requests with 403 instead of serving them
    reject_denied: bool = False

    def __post_init__(self) -> None:
        if self.max_age is not None and self.max_age < 0:
            msg = f"max_age must be >= 0, got {self.max_age}"
            raise ConfigurationError(msg)
        if self.preflight_deny_status is not None and not (
            400 <= self.preflight_deny_status < 500
        ):
            msg = (
                "preflight_deny_status must be a 4xx status or None, "
                f"got {self.preflight_deny_status}"
            )
            raise ConfigurationError(msg)
