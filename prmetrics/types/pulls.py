"""Pull request data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

RecordState = Literal["open", "closed", "merged", "draft"]


@dataclass(frozen=True)
class TimelineEntry:
    """One dated stage in a pull request's life."""

    label: str  # "Created", "Published", "First review", "Closed"
    date: datetime


@dataclass(frozen=True)
class PullRequestRecord:
    """Canonical normalized representation of one pull request."""

    id: str
    owner: str
    repo_name: str
    repo: str  # "<owner>/<repo_name>"
    number: int
    title: str
    url: str
    author: str
    state: RecordState
    created_at: datetime | None
    published_at: datetime | None
    closed_at: datetime | None
    first_review_at: datetime | None
    first_commit_at: datetime | None
    reviewers: tuple[str, ...]
    changes_requested: int
    additions: int
    deletions: int
    comment_count: int
    timeline: tuple[TimelineEntry, ...]


@dataclass
class SearchOptions:
    """Pagination and ordering for a pull request search."""

    page: int = 1
    per_page: int = 20
    sort: str | None = "updated"  # "updated", "created", "comments"
    order: str | None = "desc"  # "asc", "desc"


@dataclass
class SearchResult:
    """One page of normalized search results."""

    total_count: int
    incomplete_results: bool
    items: list[PullRequestRecord] = field(default_factory=list)


@dataclass
class PullRequestDetails:
    """Timestamps and review submissions for a single pull request."""

    title: str
    created_at: datetime | None
    published_at: datetime | None
    closed_at: datetime | None
    merged_at: datetime | None
    review_submissions: list[datetime]
