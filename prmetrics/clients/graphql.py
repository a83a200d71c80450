"""GraphQL resource client with aliased pull request batches."""

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prmetrics.transport import AsyncHTTPTransport


@dataclass(frozen=True)
class PullRequestRef:
    """Coordinates of one pull request."""

    owner: str
    repo: str
    number: int


class GraphQLClient:
    """Async client for GraphQL queries."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the GraphQL client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def query(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL document and return its ``data``."""
        return await self.transport.graphql(document, variables)

    async def pull_requests(
        self,
        refs: list[PullRequestRef],
        selection: str,
    ) -> list[dict[str, Any] | None]:
        """
        Fetch several pull requests in a single round trip.

        Each ref becomes an index-aliased sub-query (``pr0``, ``pr1``, ...).

        Args:
            refs: Pull requests to fetch
            selection: GraphQL selection set for the PullRequest type

        Returns:
            One entry per ref, in input order; None where the pull request
            could not be resolved
        """
        if not refs:
            return []

        data = await self.query(build_batch_document(refs, selection))
        results: list[dict[str, Any] | None] = []
        for idx in range(len(refs)):
            repository = data.get(f"pr{idx}") or {}
            results.append(repository.get("pullRequest"))
        return results


def build_batch_document(refs: list[PullRequestRef], selection: str) -> str:
    """Build an aliased GraphQL document for a batch of pull requests."""
    parts = [
        f"pr{idx}: repository(owner: {json.dumps(ref.owner)}, name: {json.dumps(ref.repo)}) "
        f"{{ pullRequest(number: {int(ref.number)}) {{ {selection} }} }}"
        for idx, ref in enumerate(refs)
    ]
    return f"query {{ {' '.join(parts)} }}"
