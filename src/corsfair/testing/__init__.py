"""Test utilities for CORS policies.

Provides an in-process ASGI test client and CORS header assertions::

    from corsfair.testing import TestClient, assert_cors_allowed
"""

from corsfair.testing.assertions import assert_cors_allowed, assert_no_cors_headers, cors_headers
from corsfair.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_cors_allowed",
    "assert_no_cors_headers",
    "cors_headers",
]
