"""
Batched pull request detail lookups.

Search stubs are resolved into GraphQL details DETAIL_BATCH_SIZE at a time,
one aliased query per batch. Output order follows input order.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from prmetrics.clients.graphql import PullRequestRef
from prmetrics.logging import get_logger
from prmetrics.transformers import parse_repository_url

if TYPE_CHECKING:
    from prmetrics.clients.graphql import GraphQLClient

T = TypeVar("T")

DETAIL_BATCH_SIZE = 20

logger = get_logger("pipeline")


@dataclass(frozen=True)
class ResolvedPullRequest:
    """A search stub paired with its GraphQL detail."""

    stub: dict[str, Any]
    detail: dict[str, Any]
    owner: str
    repo: str


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


async def fetch_details(
    graphql: "GraphQLClient",
    stubs: Sequence[dict[str, Any]],
    selection: str,
    batch_size: int = DETAIL_BATCH_SIZE,
) -> list[ResolvedPullRequest]:
    """
    Resolve search stubs into pull request details.

    Batches run one after another. Stubs whose pull request resolves to
    null (deleted or inaccessible) are dropped.

    Args:
        graphql: GraphQL resource client
        stubs: Search items with ``repository_url`` and ``number``
        selection: GraphQL selection set for each pull request
        batch_size: Pull requests per GraphQL call

    Returns:
        Resolved pull requests in input order
    """
    resolved: list[ResolvedPullRequest] = []

    for index, batch in enumerate(chunked(stubs, batch_size)):
        refs = []
        for stub in batch:
            owner, repo = parse_repository_url(stub["repository_url"])
            refs.append(PullRequestRef(owner, repo, stub["number"]))

        logger.debug(f"Fetching detail batch {index + 1} ({len(refs)} pull requests)")
        details = await graphql.pull_requests(refs, selection)

        for stub, ref, detail in zip(batch, refs, details):
            if detail is None:
                logger.debug(f"Skipping unresolvable pull request {ref.owner}/{ref.repo}#{ref.number}")
                continue
            resolved.append(ResolvedPullRequest(stub, detail, ref.owner, ref.repo))

    return resolved
