"""Pull requests resource client."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prmetrics.transport import AsyncHTTPTransport


class PullsClient:
    """Async client for pull request operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the pulls client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    # Must precede ``list``; annotations after it resolve ``list`` to the method
    async def list_commits(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """List every commit on a pull request."""
        return await self.transport.paginate(
            f"/repos/{owner}/{repo}/pulls/{number}/commits",
            {"per_page": 100},
        )

    async def list(self, owner: str, repo: str, state: str = "open") -> list[dict[str, Any]]:
        """
        List all pull requests in a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            state: "open", "closed" or "all"
        """
        return await self.transport.paginate(
            f"/repos/{owner}/{repo}/pulls",
            {"state": state, "per_page": 100},
        )
