"""Search resource client."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prmetrics.transport import AsyncHTTPTransport


class SearchClient:
    """Async client for the search endpoints."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the search client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def issues_and_pull_requests(
        self,
        query: str,
        page: int = 1,
        per_page: int = 20,
        sort: str | None = None,
        order: str | None = None,
        advanced_search: bool = True,
    ) -> dict[str, Any]:
        """
        Search issues and pull requests.

        Args:
            query: Search query (e.g., "is:pr author:octocat")
            page: 1-based page number
            per_page: Results per page (max 100)
            sort: "updated", "created" or "comments"; None for best match
            order: "asc" or "desc"
            advanced_search: Opt in to the advanced issue search syntax

        Returns:
            Dict with ``total_count``, ``incomplete_results`` and ``items``
        """
        params: dict[str, Any] = {"q": query, "page": page, "per_page": per_page}
        if sort:
            params["sort"] = sort
        if order:
            params["order"] = order
        if advanced_search:
            params["advanced_search"] = "true"

        response = await self.transport.request("GET", "/search/issues", params=params) or {}
        return {
            "total_count": response.get("total_count", 0),
            "incomplete_results": response.get("incomplete_results", False),
            "items": response.get("items", []),
        }

    async def users(self, query: str, per_page: int = 5) -> list[dict[str, Any]]:
        """
        Search users.

        Args:
            query: User search query (e.g., "octo in:login")
            per_page: Maximum number of results

        Returns:
            List of user search items
        """
        response = await self.transport.request(
            "GET",
            "/search/users",
            params={"q": query, "per_page": per_page},
        ) or {}
        return response.get("items", [])
