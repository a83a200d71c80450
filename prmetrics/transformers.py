"""
Pure transforms from raw GitHub payloads into PullRequestRecord.

Nothing here performs I/O. Inputs are the decoded JSON of a search stub, a
GraphQL pull request detail and a REST commit list.
"""

from datetime import datetime
from typing import Any

from prmetrics.types.pulls import PullRequestRecord, RecordState, TimelineEntry

UNKNOWN_AUTHOR = "unknown"


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp from the API.

    Args:
        value: Timestamp such as "2024-01-15T10:30:00Z", or None

    Returns:
        Timezone-aware datetime, or None for a missing value
    """
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_repository_url(repository_url: str) -> tuple[str, str]:
    """
    Split a search item's ``repository_url`` into owner and repository name.

    Example:
        >>> parse_repository_url("https://api.github.com/repos/octocat/hello")
        ('octocat', 'hello')
    """
    parts = repository_url.rstrip("/").split("/")
    if len(parts) < 2 or not parts[-2] or not parts[-1]:
        raise ValueError(f"Not a repository URL: {repository_url!r}")
    return parts[-2], parts[-1]


def derive_state(detail: dict[str, Any]) -> RecordState:
    """Derive the record state; draft wins over merged, merged over closed."""
    if detail.get("isDraft"):
        return "draft"
    if detail.get("mergedAt"):
        return "merged"
    if detail.get("closedAt"):
        return "closed"
    return "open"


def review_stats(reviews: list[dict[str, Any]]) -> tuple[tuple[str, ...], datetime | None, int]:
    """
    Scan a review list once.

    Returns:
        Tuple of (unique reviewer logins in first-seen order, earliest
        submission time, number of CHANGES_REQUESTED reviews)
    """
    reviewers: dict[str, None] = {}
    first_review: datetime | None = None
    changes_requested = 0

    for review in reviews:
        author = review.get("author")
        if author:
            reviewers.setdefault(author["login"], None)
        if review.get("state") == "CHANGES_REQUESTED":
            changes_requested += 1
        submitted = parse_timestamp(review.get("submittedAt"))
        if submitted is not None and (first_review is None or submitted < first_review):
            first_review = submitted

    return tuple(reviewers), first_review, changes_requested


def earliest_commit_date(commits: list[dict[str, Any]]) -> datetime | None:
    """Earliest author date (or committer date) across a REST commit list."""
    earliest: datetime | None = None
    for item in commits:
        commit = item.get("commit") or {}
        author = commit.get("author") or {}
        committer = commit.get("committer") or {}
        moment = parse_timestamp(author.get("date") or committer.get("date"))
        if moment is not None and (earliest is None or moment < earliest):
            earliest = moment
    return earliest


def _graphql_first_commit(detail: dict[str, Any]) -> datetime | None:
    nodes = (detail.get("commits") or {}).get("nodes") or []
    if not nodes:
        return None
    commit = nodes[0].get("commit") or {}
    return parse_timestamp(commit.get("authoredDate") or commit.get("committedDate"))


def build_timeline(
    created_at: datetime | None,
    published_at: datetime | None,
    first_review_at: datetime | None,
    closed_at: datetime | None,
) -> tuple[TimelineEntry, ...]:
    """Timeline stages in fixed order, keeping only those with a date."""
    stages = [
        ("Created", created_at),
        ("Published", published_at),
        ("First review", first_review_at),
        ("Closed", closed_at),
    ]
    return tuple(TimelineEntry(label, moment) for label, moment in stages if moment is not None)


def to_pull_request_record(
    detail: dict[str, Any],
    stub: dict[str, Any],
    owner: str,
    repo: str,
    commits: list[dict[str, Any]] | None = None,
) -> PullRequestRecord:
    """
    Build a PullRequestRecord from its three raw sources.

    Args:
        detail: GraphQL PullRequest object
        stub: Search result item (supplies ``number`` and ``html_url``)
        owner: Repository owner
        repo: Repository name
        commits: REST commit list; when empty, the first commit of the
            GraphQL ``commits`` connection is used instead

    Returns:
        Immutable PullRequestRecord
    """
    reviews = (detail.get("reviews") or {}).get("nodes") or []
    reviewers, first_review_at, changes_requested = review_stats(reviews)

    first_commit_at = earliest_commit_date(commits or [])
    if first_commit_at is None:
        first_commit_at = _graphql_first_commit(detail)

    created_at = parse_timestamp(detail.get("createdAt"))
    published_at = parse_timestamp(detail.get("publishedAt"))
    closed_at = parse_timestamp(detail.get("mergedAt") or detail.get("closedAt"))
    author = detail.get("author")

    return PullRequestRecord(
        id=detail["id"],
        owner=owner,
        repo_name=repo,
        repo=f"{owner}/{repo}",
        number=stub["number"],
        title=detail.get("title", ""),
        url=stub.get("html_url", ""),
        author=author["login"] if author else UNKNOWN_AUTHOR,
        state=derive_state(detail),
        created_at=created_at,
        published_at=published_at,
        closed_at=closed_at,
        first_review_at=first_review_at,
        first_commit_at=first_commit_at,
        reviewers=reviewers,
        changes_requested=changes_requested,
        additions=detail.get("additions", 0),
        deletions=detail.get("deletions", 0),
        comment_count=(detail.get("comments") or {}).get("totalCount", 0),
        timeline=build_timeline(created_at, published_at, first_review_at, closed_at),
    )
