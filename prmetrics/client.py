"""
prmetrics async GitHub client.

Aggregates the resource clients over a single httpx-based transport.
"""

import os
from typing import Any

import httpx

from prmetrics.clients import (
    ActionsClient,
    GraphQLClient,
    PullsClient,
    ReposClient,
    SearchClient,
    UsersClient,
)
from prmetrics.exceptions import ConfigurationError
from prmetrics.transport import DEFAULT_BASE_URL, DEFAULT_USER_AGENT, AsyncHTTPTransport


class AsyncGitHubClient:
    """
    Async client for the GitHub REST and GraphQL APIs.

    Example:
        ```python
        import asyncio
        from prmetrics import AsyncGitHubClient

        async def main():
            async with AsyncGitHubClient(token="ghp_...") as client:
                user = await client.users.get_authenticated()
                page = await client.search.issues_and_pull_requests(
                    f"is:pr author:{user['login']}"
                )

        asyncio.run(main())
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_BASE_URL

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: GitHub personal access or OAuth token
            base_url: API root (default: https://api.github.com)
            timeout: Request timeout in seconds; None waits indefinitely
            transport: Optional httpx transport, e.g. a MockTransport in tests
            user_agent: User-Agent header value
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = AsyncHTTPTransport(
            token=token,
            base_url=base_url,
            timeout=timeout,
            user_agent=user_agent,
            transport=transport,
        )

        self.search = SearchClient(self._transport)
        self.users = UsersClient(self._transport)
        self.repos = ReposClient(self._transport)
        self.pulls = PullsClient(self._transport)
        self.actions = ActionsClient(self._transport)
        self.graphql = GraphQLClient(self._transport)

    @classmethod
    def from_env(cls, transport: httpx.AsyncBaseTransport | None = None) -> "AsyncGitHubClient":
        """
        Create a client from environment variables.

        Environment variables:
            GITHUB_TOKEN: Token used for authentication (required)
            GITHUB_API_URL: API root (optional, default: https://api.github.com)
            PRMETRICS_TIMEOUT: Request timeout in seconds (optional)

        Returns:
            Configured AsyncGitHubClient instance

        Raises:
            ConfigurationError: If GITHUB_TOKEN is missing or the timeout
                is not a number
        """
        token = os.environ.get("GITHUB_TOKEN")
        base_url = os.environ.get("GITHUB_API_URL", cls.DEFAULT_BASE_URL)
        raw_timeout = os.environ.get("PRMETRICS_TIMEOUT")

        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")

        timeout: float | None = None
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid PRMETRICS_TIMEOUT: {raw_timeout}. Must be a number of seconds"
                ) from None

        return cls(token=token, base_url=base_url, timeout=timeout, transport=transport)

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport (for advanced use cases)."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncGitHubClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
