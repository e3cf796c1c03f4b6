"""Tests for GitHubClient error surfacing and rate limit bookkeeping."""

import httpx
import pytest

from roadmap_report.errors import GraphQLError, TransportError
from roadmap_report.github import GitHubClient


def _client(handler):
    return GitHubClient(
        token="t",
        graphql_url="https://api.github.test/graphql",
        api_base_url="https://api.github.test",
        transport=httpx.MockTransport(handler),
    )


class TestExecuteQuery:
    async def test_returns_data(self):
        client = _client(lambda r: httpx.Response(200, json={"data": {"viewer": {"login": "me"}}}))
        assert await client.execute_query("query { viewer { login } }") == {"viewer": {"login": "me"}}

    async def test_sends_token_and_variables(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = request.content
            return httpx.Response(200, json={"data": {}})

        await _client(handler).execute_query("query Q { x }", {"a": 1})
        assert seen["auth"] == "token t"
        assert b'"variables":{"a":1}' in seen["body"].replace(b" ", b"")

    async def test_errors_without_data_raise_graphql_error(self):
        errors = [{"message": "Could not resolve to a node"}]
        client = _client(lambda r: httpx.Response(200, json={"data": None, "errors": errors}))
        with pytest.raises(GraphQLError) as exc_info:
            await client.execute_query("query { x }")
        assert exc_info.value.errors == errors
        assert "Could not resolve to a node" in str(exc_info.value)

    async def test_errors_with_partial_data_are_returned(self):
        body = {"data": {"node": {"id": "1"}}, "errors": [{"message": "field hidden"}]}
        client = _client(lambda r: httpx.Response(200, json=body))
        assert await client.execute_query("query { x }") == {"node": {"id": "1"}}

    async def test_errors_with_partial_data_raise_when_strict(self):
        body = {"data": {"node": None}, "errors": [{"message": "denied"}]}
        client = _client(lambda r: httpx.Response(200, json=body))
        with pytest.raises(GraphQLError):
            await client.execute_query("mutation { x }", allow_partial=False)

    async def test_http_error_status_is_transport_error(self):
        client = _client(lambda r: httpx.Response(502, json={"message": "Bad Gateway"}))
        with pytest.raises(TransportError) as exc_info:
            await client.execute_query("query { x }")
        assert exc_info.value.status_code == 502
        assert "Bad Gateway" in str(exc_info.value)
        assert not isinstance(exc_info.value, GraphQLError)

    async def test_network_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="Network error"):
            await _client(handler).execute_query("query { x }")

    async def test_timeout_is_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(TransportError, match="timeout"):
            await _client(handler).execute_query("query { x }")


class TestRest:
    async def test_get_issue(self):
        def handler(request):
            assert request.url.path == "/repos/giantswarm/roadmap/issues/7"
            return httpx.Response(200, json={"number": 7})

        assert await _client(handler).get_issue("giantswarm", "roadmap", 7) == {"number": 7}

    async def test_not_found(self):
        client = _client(lambda r: httpx.Response(404, json={"message": "Not Found"}))
        with pytest.raises(TransportError, match="404 - Not Found"):
            await client.get_repository("giantswarm", "nope")


class TestRateLimit:
    async def test_tracks_headers(self):
        headers = {"X-RateLimit-Remaining": "42", "X-RateLimit-Reset": "1700000000"}
        client = _client(lambda r: httpx.Response(200, json={"data": {}}, headers=headers))
        assert client.rate_limit_info() == {"remaining": None, "reset_at": None}
        await client.execute_query("query { x }")
        assert client.rate_limit_info() == {"remaining": 42, "reset_at": 1700000000.0}
        assert not client.is_rate_limited()

    async def test_exhausted_until_reset(self):
        headers = {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "99999999999"}
        client = _client(lambda r: httpx.Response(200, json={"data": {}}, headers=headers))
        await client.execute_query("query { x }")
        assert client.is_rate_limited()
        assert client.seconds_until_reset() > 0
