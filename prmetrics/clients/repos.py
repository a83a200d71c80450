"""Repositories resource client."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prmetrics.transport import AsyncHTTPTransport


class ReposClient:
    """Async client for repository operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def get(self, owner: str, repo: str) -> dict[str, Any]:
        """Get repository metadata (default branch, open issue counter, ...)."""
        return await self.transport.request("GET", f"/repos/{owner}/{repo}")

    async def list_for_authenticated_user(
        self,
        per_page: int = 20,
        sort: str = "updated",
        direction: str = "desc",
    ) -> list[dict[str, Any]]:
        """
        List repositories the authenticated user can access (first page only).

        Args:
            per_page: Maximum number of repositories
            sort: "created", "updated", "pushed" or "full_name"
            direction: "asc" or "desc"
        """
        return await self.transport.request(
            "GET",
            "/user/repos",
            params={"per_page": per_page, "sort": sort, "direction": direction},
        )

    async def list_commits(
        self,
        owner: str,
        repo: str,
        sha: str | None = None,
        since: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List all commits, optionally restricted to a branch and start time.

        Args:
            owner: Repository owner
            repo: Repository name
            sha: Branch name or commit SHA to start listing from
            since: ISO 8601 timestamp; only commits after it are returned
        """
        params: dict[str, Any] = {"per_page": 100}
        if sha:
            params["sha"] = sha
        if since:
            params["since"] = since
        return await self.transport.paginate(f"/repos/{owner}/{repo}/commits", params)

    async def list_contributors(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List all contributors."""
        return await self.transport.paginate(
            f"/repos/{owner}/{repo}/contributors", {"per_page": 100}
        )

    async def commit_activity(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """
        Get the last year of weekly commit activity.

        Returns:
            Weekly buckets with ``days`` (7 per-day counts), ``total`` and
            ``week``; empty while GitHub is still computing the statistics
        """
        response = await self.transport.request(
            "GET", f"/repos/{owner}/{repo}/stats/commit_activity"
        )
        return response if isinstance(response, list) else []

    async def community_profile(self, owner: str, repo: str) -> dict[str, Any]:
        """Get community profile metrics, including ``health_percentage``."""
        return await self.transport.request(
            "GET", f"/repos/{owner}/{repo}/community/profile"
        ) or {}
