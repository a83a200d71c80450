"""
Developer contribution metrics.

Raw values are derived from a developer's most recent authored pull requests
and mapped onto 0-10 scores with fixed linear transforms:

    merge_success    = merge_rate * 10
    cycle_efficiency = max(0, 10 - average_changes * 2)
    size_efficiency  = max(0, 10 - median_size / 100)
    lead_time_score  = max(0, 10 - median_lead_time / 12)
    review_activity  = min(10, reviews_count)
    feedback_score   = min(10, average_comments)
    issue_resolution = min(10, issues_closed)
"""

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from prmetrics.batching import fetch_details
from prmetrics.cache import MemoryCache
from prmetrics.clients.users import parse_profile
from prmetrics.metrics.summary import hours_between, mean, median, round_half_up
from prmetrics.transformers import parse_timestamp
from prmetrics.types.metrics import DeveloperMetrics, DeveloperProfile, DeveloperScores

if TYPE_CHECKING:
    from prmetrics.client import AsyncGitHubClient

STUB_LIMIT = 30
PROFILE_CACHE_TTL = 3600

DEVELOPER_FIELDS = (
    "mergedAt createdAt additions deletions comments { totalCount } "
    "reviews(first: 100) { nodes { state } } "
    "closingIssuesReferences(first: 1) { totalCount }"
)


def compute_developer_scores(
    authored_count: int,
    reviewed_count: int,
    details: Sequence[dict[str, Any]],
) -> DeveloperScores:
    """
    Derive raw values and scores from authored pull request details.

    Args:
        authored_count: Number of authored stubs searched (merge rate
            denominator; details that failed to resolve still count)
        reviewed_count: Number of pull requests the developer reviewed
        details: GraphQL details of the authored pull requests

    Returns:
        DeveloperScores with every float rounded to 2 decimals
    """
    merged = 0
    changes: list[float] = []
    sizes: list[float] = []
    lead_times: list[float] = []
    comments: list[float] = []
    issues_closed = 0

    for detail in details:
        merged_at = parse_timestamp(detail.get("mergedAt"))
        created_at = parse_timestamp(detail.get("createdAt"))
        if merged_at is not None:
            merged += 1
            if created_at is not None:
                lead_times.append(hours_between(created_at, merged_at))

        reviews = (detail.get("reviews") or {}).get("nodes") or []
        changes.append(sum(1 for review in reviews if review.get("state") == "CHANGES_REQUESTED"))
        sizes.append(detail.get("additions", 0) + detail.get("deletions", 0))
        comments.append((detail.get("comments") or {}).get("totalCount", 0))
        issues_closed += (detail.get("closingIssuesReferences") or {}).get("totalCount", 0)

    merge_rate = merged / authored_count if authored_count else 0.0
    average_changes = mean(changes) or 0.0
    median_size = median(sizes) or 0.0
    median_lead_time = median(lead_times) or 0.0
    average_comments = mean(comments) or 0.0

    return DeveloperScores(
        merge_success=round_half_up(merge_rate * 10, 2),
        merge_rate=round_half_up(merge_rate, 2),
        cycle_efficiency=round_half_up(max(0.0, 10 - average_changes * 2), 2),
        average_changes=round_half_up(average_changes, 2),
        size_efficiency=round_half_up(max(0.0, 10 - median_size / 100), 2),
        median_size=round_half_up(median_size, 2),
        lead_time_score=round_half_up(max(0.0, 10 - median_lead_time / 12), 2),
        median_lead_time=round_half_up(median_lead_time, 2),
        review_activity=round_half_up(float(min(10, reviewed_count)), 2),
        reviews_count=reviewed_count,
        feedback_score=round_half_up(min(10.0, average_comments), 2),
        average_comments=round_half_up(average_comments, 2),
        issue_resolution=round_half_up(float(min(10, issues_closed)), 2),
        issues_closed=issues_closed,
    )


async def fetch_developer_profile(
    client: "AsyncGitHubClient",
    login: str,
    user_cache: MemoryCache | None = None,
) -> DeveloperProfile:
    """
    Fetch a developer's public profile, consulting ``user_cache`` first.

    Raises:
        UpstreamError: With status 404 if the user does not exist
    """
    cache_key = f"user:{login}"
    if user_cache is not None:
        cached = user_cache.get(cache_key)
        if cached is not None:
            return cached

    profile = parse_profile(await client.users.get_by_username(login))
    if user_cache is not None:
        user_cache.set(cache_key, profile, PROFILE_CACHE_TTL)
    return profile


async def fetch_developer_metrics(
    client: "AsyncGitHubClient",
    login: str,
    user_cache: MemoryCache | None = None,
) -> DeveloperMetrics:
    """
    Profile and contribution scores for one developer.

    Looks at the developer's last STUB_LIMIT authored and reviewed pull
    requests; only authored ones are fetched in detail.
    """
    profile = await fetch_developer_profile(client, login, user_cache)

    authored, reviewed = await asyncio.gather(
        client.search.issues_and_pull_requests(
            f"is:pr author:{login}", per_page=STUB_LIMIT, sort=None, order=None, advanced_search=False
        ),
        client.search.issues_and_pull_requests(
            f"is:pr reviewed-by:{login}", per_page=STUB_LIMIT, sort=None, order=None, advanced_search=False
        ),
    )

    resolved = await fetch_details(client.graphql, authored["items"], DEVELOPER_FIELDS)
    scores = compute_developer_scores(
        authored_count=len(authored["items"]),
        reviewed_count=len(reviewed["items"]),
        details=[item.detail for item in resolved],
    )
    return DeveloperMetrics(profile=profile, scores=scores)
