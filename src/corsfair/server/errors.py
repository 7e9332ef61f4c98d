"""Maps HTTPError exceptions raised by the fairing to plain responses."""

import logging

from corsfair.errors import HTTPError
from corsfair.http.request import Request
from corsfair.http.response import Response

logger = logging.getLogger("corsfair.server")


def http_error_response(exc: HTTPError, request: Request) -> Response:
    """Plain-text response for *exc*, carrying any headers it declares."""
    logger.debug("%s %s -> %s", request.method, request.path, exc)
    response = Response(body=exc.detail or str(exc.status), status=exc.status)
    if exc.headers:
        response = response.with_headers(exc.headers)
    return response
