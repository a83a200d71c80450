"""Actions resource client."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prmetrics.transport import AsyncHTTPTransport


class ActionsClient:
    """Async client for GitHub Actions workflow runs."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the actions client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        branch: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List all workflow runs for a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Only runs triggered on this branch
            status: Run status filter (e.g., "completed")
        """
        params: dict[str, Any] = {"per_page": 100}
        if branch:
            params["branch"] = branch
        if status:
            params["status"] = status
        return await self.transport.paginate(f"/repos/{owner}/{repo}/actions/runs", params)
