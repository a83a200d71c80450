"""Users resource client."""

from typing import TYPE_CHECKING, Any

from prmetrics.types.metrics import DeveloperProfile

if TYPE_CHECKING:
    from prmetrics.transport import AsyncHTTPTransport


class UsersClient:
    """Async client for user operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the users client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def get_authenticated(self) -> dict[str, Any]:
        """Get the user that owns the client's token."""
        return await self.transport.request("GET", "/user")

    async def get_by_username(self, username: str) -> dict[str, Any]:
        """
        Get a user's public account data.

        Args:
            username: GitHub login

        Returns:
            Raw user object
        """
        return await self.transport.request("GET", f"/users/{username}")

    async def get_profile(self, username: str) -> DeveloperProfile:
        """Get a user's public profile."""
        return parse_profile(await self.get_by_username(username))


def parse_profile(data: dict[str, Any]) -> DeveloperProfile:
    """Parse a user object from the API into a DeveloperProfile."""
    return DeveloperProfile(
        login=data["login"],
        name=data.get("name"),
        avatar_url=data.get("avatar_url", ""),
        html_url=data.get("html_url", ""),
        bio=data.get("bio"),
        company=data.get("company"),
        location=data.get("location"),
        followers=data.get("followers", 0),
        following=data.get("following", 0),
        public_repos=data.get("public_repos", 0),
    )
