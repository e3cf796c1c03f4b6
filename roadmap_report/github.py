"""GitHub API access: GraphQL query execution plus the few REST lookups we need."""

import json
import logging
import time
from typing import Any

import httpx

from . import config
from .errors import GraphQLError, TransportError

logger = logging.getLogger(__name__)


def _error_detail(r: httpx.Response) -> str:
    """Extract a human-readable error from an HTTP response."""
    try:
        data = r.json()
        return data.get("message", data.get("error", str(data)))
    except Exception:
        return r.text[:200] if r.text else f"HTTP {r.status_code}"


class GitHubClient:
    """Thin async client for the GitHub GraphQL and REST APIs.

    A fresh ``httpx.AsyncClient`` is opened per request; pass ``transport`` to
    route requests somewhere other than the network (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        token: str | None = None,
        graphql_url: str | None = None,
        api_base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = config.GITHUB_TOKEN if token is None else token
        self.graphql_url = graphql_url or config.GITHUB_GRAPHQL_URL
        self.api_base_url = (api_base_url or config.GITHUB_API_BASE_URL).rstrip("/")
        self.timeout = config.REQUEST_TIMEOUT if timeout is None else timeout
        self._transport = transport
        self._remaining: int | None = None
        self._reset_at: float | None = None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "roadmap-report-mcp",
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    def _track_rate_limit(self, r: httpx.Response) -> None:
        remaining = r.headers.get("x-ratelimit-remaining")
        reset = r.headers.get("x-ratelimit-reset")
        if remaining is not None and remaining.isdigit():
            self._remaining = int(remaining)
        if reset is not None and reset.isdigit():
            self._reset_at = float(reset)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as c:
                r = await c.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timeout for url '{url}'") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Network error: {exc}") from exc

        self._track_rate_limit(r)
        if not r.is_success:
            raise TransportError(
                f"GitHub API error: {r.status_code} - {_error_detail(r)}",
                status_code=r.status_code,
                response=r.text,
            )
        return r

    # ── GraphQL ──────────────────────────────────────────────

    async def execute_query(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        *,
        allow_partial: bool = True,
    ) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        A response carrying an ``errors`` array raises GraphQLError when there
        is no data, or when ``allow_partial`` is false. Otherwise the errors
        are logged and the partial data is returned.
        """
        r = await self._send("POST", self.graphql_url, json={"query": query, "variables": variables or {}})
        try:
            body = r.json()
        except ValueError as exc:
            raise TransportError("GraphQL response was not valid JSON", r.status_code, r.text) from exc

        errors = body.get("errors")
        data = body.get("data")
        if errors:
            if data is None or not allow_partial:
                raise GraphQLError(errors, data)
            logger.warning("GraphQL errors with partial data: %s", json.dumps(errors))
        if data is None:
            raise GraphQLError([{"message": "response missing data"}])
        return data

    # ── REST ─────────────────────────────────────────────────

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        r = await self._send("GET", f"{self.api_base_url}{path}", params=params)
        return r.json()

    async def get_issue(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        return await self.get(f"/repos/{owner}/{repo}/issues/{number}")

    async def get_issue_comments(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        return await self.get(f"/repos/{owner}/{repo}/issues/{number}/comments")

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self.get(f"/repos/{owner}/{repo}")

    # ── Rate limit ───────────────────────────────────────────

    def rate_limit_info(self) -> dict[str, Any]:
        """Last seen rate limit headers (None until the first response)."""
        return {"remaining": self._remaining, "reset_at": self._reset_at}

    def seconds_until_reset(self) -> float:
        if self._reset_at is None:
            return 0.0
        return max(0.0, self._reset_at - time.time())

    def is_rate_limited(self) -> bool:
        return self._remaining is not None and self._remaining <= 0 and self.seconds_until_reset() > 0
