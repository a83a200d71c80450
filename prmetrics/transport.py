"""
Async HTTP transport for the GitHub REST and GraphQL APIs.

Handles authentication headers, Link-header pagination, GraphQL envelopes and
mapping of error responses into typed exceptions. Requests are never retried;
rate-limit errors carry the reset time so the caller can decide.
"""

import time
from datetime import datetime, timezone
from typing import Any

import httpx

from prmetrics.exceptions import (
    AuthenticationError,
    PRMetricsError,
    RateLimitError,
    UpstreamError,
    UpstreamRejectedQueryError,
)
from prmetrics.logging import get_logger, log_http_request, log_http_response

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "prmetrics/0.1.0"
API_VERSION = "2022-11-28"

# Keys under which list endpoints wrap their items
_LIST_ENVELOPE_KEYS = ("items", "workflow_runs", "check_runs", "repositories")

logger = get_logger("http")


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for GitHub.

    Handles:
    - Bearer-token authentication and API version headers
    - Following ``Link: rel="next"`` headers for paginated lists
    - GraphQL request envelopes and partial-error responses
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            token: GitHub token used as the Bearer credential
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            timeout: Request timeout in seconds; None waits indefinitely
            user_agent: User-Agent header value
            transport: Optional httpx transport (used by tests to fake GitHub)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": user_agent,
                "X-GitHub-Api-Version": API_VERSION,
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: API path (e.g., "/search/issues") or absolute URL
            params: Query parameters
            body: JSON request body (for POST)

        Returns:
            Parsed JSON response, or None for an empty 202/204 response

        Raises:
            PRMetricsError: On API or connection errors
        """
        response = await self._send(method, path, params=params, body=body)
        return _decode(response)

    async def paginate(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """
        Fetch every page of a list endpoint.

        Follows ``Link: rel="next"`` headers until exhausted. Accepts both bare
        JSON arrays and envelopes such as ``{"items": [...]}``.

        Args:
            path: API path of the first page
            params: Query parameters for the first page

        Returns:
            All items across all pages, in order
        """
        results: list[Any] = []
        next_url: str | None = path
        next_params = params

        while next_url:
            response = await self._send("GET", next_url, params=next_params)
            results.extend(_list_items(_decode(response)))
            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            next_params = None

        return results

    async def graphql(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Execute a GraphQL document.

        Partial results are returned when the response carries both ``data``
        and ``errors`` (e.g. one aliased repository no longer exists).

        Args:
            document: GraphQL query document
            variables: Query variables

        Returns:
            The response's ``data`` object

        Raises:
            RateLimitError: If GitHub reports the GraphQL rate limit
            UpstreamError: If the response carries errors and no data
        """
        payload: dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables

        response = await self._send("POST", "/graphql", body=payload)
        result = _decode(response) or {}
        errors = result.get("errors") or []
        data = result.get("data")

        if errors:
            if any(error.get("type") == "RATE_LIMITED" for error in errors):
                reset_at = _rate_limit_reset(response.headers)
                raise RateLimitError(
                    f"Rate limit exceeded. Reset at {reset_at.isoformat()}",
                    reset_at,
                    response.status_code,
                    response.headers.get("X-GitHub-Request-Id"),
                )
            if not data:
                raise UpstreamError(
                    errors[0].get("message", "GraphQL request failed"),
                    response.status_code,
                    response.headers.get("X-GitHub-Request-Id"),
                )
            logger.warning(
                f"GraphQL returned {len(errors)} partial error(s): {errors[0].get('message')}"
            )

        return data or {}

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        log_http_request(method, path, params=params)
        started = time.perf_counter()

        try:
            response = await self._client.request(method, path, params=params, json=body)
        except httpx.RequestError as e:
            raise UpstreamError(f"Connection error: {e}") from e

        log_http_response(
            response.status_code,
            str(response.request.url),
            elapsed_ms=(time.perf_counter() - started) * 1000,
            rate_limit_remaining=response.headers.get("X-RateLimit-Remaining"),
        )

        if response.status_code >= 400:
            raise map_error_response(response)

        return response


def map_error_response(response: httpx.Response) -> PRMetricsError:
    """
    Map an error response into a typed exception.

    Args:
        response: HTTP response with an error status

    Returns:
        Appropriate PRMetricsError subclass
    """
    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    status_code = response.status_code
    message = data.get("message") or f"HTTP {status_code}"
    request_id = response.headers.get("X-GitHub-Request-Id")

    if status_code == 401:
        return AuthenticationError("Authentication failed", status_code, request_id)
    elif status_code == 429 or (status_code == 403 and _is_rate_limited(response, message)):
        reset_at = _rate_limit_reset(response.headers)
        return RateLimitError(
            f"Rate limit exceeded. Reset at {reset_at.isoformat()}",
            reset_at,
            status_code,
            request_id,
        )
    elif status_code == 403:
        return UpstreamError("Access forbidden", status_code, request_id)
    elif status_code == 422:
        details = data.get("errors") or []
        first = details[0] if details else {}
        detail = first.get("message") if isinstance(first, dict) else str(first)
        return UpstreamRejectedQueryError(
            f"Invalid search query: {detail or message}",
            status_code,
            request_id,
        )
    else:
        return UpstreamError(message, status_code, request_id)


def _is_rate_limited(response: httpx.Response, message: str) -> bool:
    if response.headers.get("X-RateLimit-Remaining") == "0":
        return True
    return "rate limit" in message.lower()


def _rate_limit_reset(headers: httpx.Headers) -> datetime:
    reset_header = headers.get("X-RateLimit-Reset")
    if reset_header:
        try:
            return datetime.fromtimestamp(int(reset_header), tz=timezone.utc)
        except ValueError:
            pass  # Fall through to "now"
    return datetime.now(timezone.utc)


def _decode(response: httpx.Response) -> Any:
    # 202 (statistics still computing) and 204 may carry no body
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"Invalid JSON in response from {response.request.url.path}",
            response.status_code,
            response.headers.get("X-GitHub-Request-Id"),
        ) from e


def _list_items(body: Any) -> list[Any]:
    if body is None:
        return []
    if isinstance(body, list):
        return body
    for key in _LIST_ENVELOPE_KEYS:
        if key in body:
            return body[key]
    return []
