"""Tests for corsfair.server.handler — the fairing in front of an ASGI app."""

from typing import Any

import pytest

from corsfair.config import CORSConfig
from corsfair.middleware.fairing import CORSFairing
from corsfair.policy.table import PolicyTable, cors
from corsfair.server.handler import FairingMiddleware
from corsfair.testing import TestClient, assert_cors_allowed, assert_no_cors_headers

ORIGIN = "https://x.test"


async def endpoint(scope: dict[str, Any], receive: Any, send: Any) -> None:
    """Plain ASGI app answering every request with ``Hello World!``."""
    body = b"Hello World!"
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", b"text/plain; charset=utf-8"),
                (b"content-length", str(len(body)).encode("latin-1")),
                (b"vary", b"Accept-Encoding"),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


def _client(*tables: PolicyTable, config: CORSConfig | None = None) -> TestClient:
    return TestClient(FairingMiddleware(endpoint, CORSFairing(*tables, config=config)))


class TestNoCors:
    async def test_no_fairing_rules(self) -> None:
        async with _client() as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert response.status == 200
            assert response.text == "Hello World!"
            assert_no_cors_headers(response)

    async def test_no_origin_passes_through(self) -> None:
        async with _client(cors(("/endpoint", ["GET"]))) as client:
            response = await client.get("/endpoint")
            assert response.text == "Hello World!"
            assert_no_cors_headers(response)

    async def test_bad_method(self) -> None:
        async with _client(cors(("/endpoint", ["PUT"]))) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert response.status == 200
            assert response.text == "Hello World!"
            assert_no_cors_headers(response)

    async def test_wrong_path_length(self) -> None:
        async with _client(cors(("/some/endpoint", ["GET"]))) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert_no_cors_headers(response)

    async def test_wrong_path_segments(self) -> None:
        async with _client(cors(("/some/endpoint", ["GET"]))) as client:
            response = await client.get("/another/endpoint", headers={"Origin": ORIGIN})
            assert_no_cors_headers(response)


class TestSimpleRequests:
    async def test_simple(self) -> None:
        async with _client(cors(("/endpoint", ["GET", "PUT"]))) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert response.status == 200
            assert response.text == "Hello World!"
            assert_cors_allowed(response, origin=ORIGIN)

    async def test_template_without_leading_slash(self) -> None:
        async with _client(cors(("endpoint", ["GET"]))) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert_cors_allowed(response, origin=ORIGIN)

    async def test_variable_path(self) -> None:
        async with _client(cors(("/cors/:something", ["GET"]))) as client:
            response = await client.get("/cors/endpoint", headers={"Origin": ORIGIN})
            assert response.text == "Hello World!"
            assert_cors_allowed(response, origin=ORIGIN)

    async def test_echoed_origin_merges_vary(self) -> None:
        table = cors(("/endpoint", ["GET"]), origins=[ORIGIN])
        async with _client(table) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert response.header("access-control-allow-origin") == ORIGIN
            assert response.header_list("vary") == ["Accept-Encoding, Origin"]

    async def test_body_and_length_untouched(self) -> None:
        async with _client(cors(("/endpoint", ["GET"]))) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert response.body == b"Hello World!"
            assert response.content_type == "text/plain; charset=utf-8"


class TestWildcard:
    async def test_wildcard_for_any_origin_rule(self) -> None:
        config = CORSConfig(send_wildcard=True)
        async with _client(cors(("/endpoint", ["GET"])), config=config) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert_cors_allowed(response, origin="*")
            assert response.header_list("vary") == ["Accept-Encoding"]

    async def test_wildcard_never_for_credentialed_request(self) -> None:
        config = CORSConfig(send_wildcard=True)
        async with _client(cors(("/endpoint", ["GET"])), config=config) as client:
            response = await client.get(
                "/endpoint", headers={"Origin": ORIGIN, "Authorization": "Bearer t"}
            )
            assert_cors_allowed(response, origin=ORIGIN)

    async def test_wildcard_never_for_credentialed_preflight(self) -> None:
        config = CORSConfig(send_wildcard=True)
        async with _client(cors(("/endpoint", ["GET"])), config=config) as client:
            response = await client.preflight(
                "/endpoint", origin=ORIGIN, method="GET", headers={"Cookie": "s=1"}
            )
            assert response.status == 204
            assert_cors_allowed(response, origin=ORIGIN, methods="GET")

    async def test_listed_origins_always_echoed(self) -> None:
        config = CORSConfig(send_wildcard=True)
        table = cors(("/endpoint", ["GET"]), origins=[ORIGIN])
        async with _client(table, config=config) as client:
            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert_cors_allowed(response, origin=ORIGIN)


class TestPreflight:
    async def test_preflight(self) -> None:
        async with _client(cors(("/endpoint", ["GET"]))) as client:
            response = await client.preflight("/endpoint", origin=ORIGIN, method="GET")
            assert response.status == 204
            assert response.body == b""
            assert_cors_allowed(response, origin=ORIGIN, methods="GET")

    async def test_denied_preflight(self) -> None:
        async with _client(cors(("/endpoint", ["GET"]))) as client:
            response = await client.preflight("/endpoint", origin=ORIGIN, method="DELETE")
            assert response.status == 403
            assert_no_cors_headers(response)

    async def test_unlisted_origin_varies_on_origin(self) -> None:
        table = cors(("/endpoint", ["GET"]), origins=["https://a.test"])
        async with _client(table) as client:
            preflight = await client.preflight("/endpoint", origin=ORIGIN, method="GET")
            assert preflight.status == 403
            assert_no_cors_headers(preflight)
            assert preflight.header_list("vary") == ["Origin"]

            response = await client.get("/endpoint", headers={"Origin": ORIGIN})
            assert response.text == "Hello World!"
            assert_no_cors_headers(response)
            assert response.header_list("vary") == ["Accept-Encoding, Origin"]

    async def test_denied_preflight_pass_through(self) -> None:
        config = CORSConfig(preflight_deny_status=None)
        async with _client(cors(("/endpoint", ["GET"])), config=config) as client:
            response = await client.preflight("/endpoint", origin=ORIGIN, method="DELETE")
            assert response.status == 200
            assert response.text == "Hello World!"
            assert_no_cors_headers(response)

    async def test_plain_options_reaches_app(self) -> None:
        async with _client(cors(("/endpoint", ["GET"]))) as client:
            response = await client.options("/endpoint", headers={"Origin": ORIGIN})
            assert response.text == "Hello World!"
            assert_no_cors_headers(response)

    async def test_idempotent(self) -> None:
        async with _client(cors(("/api/:user/action", ["GET", "PUT"]))) as client:
            first = await client.preflight(
                "/api/42/action", origin=ORIGIN, method="PUT", request_headers=("content-type",)
            )
            second = await client.preflight(
                "/api/42/action", origin=ORIGIN, method="PUT", request_headers=("content-type",)
            )
            assert first.headers == second.headers
            assert first.status == second.status == 204


class TestMotivatingExample:
    """Two tables attached to one app, as in the original fairing docs."""

    @pytest.fixture
    def client(self) -> TestClient:
        first = cors(
            ("/api/:user/action", ["GET", "PUT"]),
            ("/api/:user/delete", ["DELETE"]),
        )
        second = cors(("/api/:user/add", ["POST"]))
        return _client(first, second)

    async def test_preflight_get_on_action(self, client: TestClient) -> None:
        response = await client.preflight("/api/42/action", origin=ORIGIN, method="GET")
        assert response.status == 204
        assert response.header("access-control-allow-methods") == "GET, PUT"
        assert response.header("access-control-allow-origin") == ORIGIN

    async def test_delete_on_action_denied(self, client: TestClient) -> None:
        response = await client.delete("/api/42/action", headers={"Origin": ORIGIN})
        assert response.text == "Hello World!"
        assert_no_cors_headers(response)

    async def test_delete_on_delete_allowed(self, client: TestClient) -> None:
        response = await client.delete("/api/42/delete", headers={"Origin": ORIGIN})
        assert_cors_allowed(response, origin=ORIGIN)

    async def test_post_on_second_table(self, client: TestClient) -> None:
        response = await client.post("/api/42/add", headers={"Origin": ORIGIN})
        assert_cors_allowed(response, origin=ORIGIN)


class TestCredentialedScenario:
    async def test_scenario_echoes_exact_origin(self) -> None:
        table = cors(("/api/:user/action", ["GET", "PUT"]), allow_credentials=True)
        async with _client(table) as client:
            response = await client.preflight("/api/42/action", origin=ORIGIN, method="GET")
            assert response.status == 204
            assert_cors_allowed(response, origin=ORIGIN, methods="GET, PUT")
            assert response.header("access-control-allow-credentials") == "true"

    async def test_cookie_request_echoes_origin(self) -> None:
        async with _client(cors(("/endpoint", ["GET"]))) as client:
            response = await client.get(
                "/endpoint", headers={"Origin": ORIGIN, "Cookie": "session=1"}
            )
            assert_cors_allowed(response, origin=ORIGIN)


class TestRejectDenied:
    async def test_denied_request_rejected(self) -> None:
        config = CORSConfig(reject_denied=True)
        async with _client(cors(("/endpoint", ["GET"])), config=config) as client:
            response = await client.delete("/endpoint", headers={"Origin": ORIGIN})
            assert response.status == 403
            assert "not allowed" in response.text
            assert_no_cors_headers(response)

    async def test_non_browser_request_still_served(self) -> None:
        config = CORSConfig(reject_denied=True)
        async with _client(cors(("/endpoint", ["GET"])), config=config) as client:
            response = await client.delete("/endpoint")
            assert response.text == "Hello World!"


class TestNonHTTPScopes:
    async def test_lifespan_passes_through(self) -> None:
        seen: list[str] = []

        async def app(scope: dict[str, Any], receive: Any, send: Any) -> None:
            seen.append(scope["type"])

        async def receive() -> dict[str, Any]:
            return {"type": "lifespan.startup"}

        async def send(message: dict[str, Any]) -> None:
            return None

        middleware = FairingMiddleware(app, CORSFairing(cors(("/a", ["GET"]))))
        await middleware({"type": "lifespan"}, receive, send)
        assert seen == ["lifespan"]
