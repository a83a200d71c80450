"""Aggregated metric value objects."""

from dataclasses import dataclass, field


@dataclass
class SummaryMetrics:
    """Roll-up statistics over a set of pull request records."""

    count: int
    merged: int
    open: int
    median_lead_time_h: float | None
    avg_lead_time_h: float | None
    median_review_h: float | None
    avg_review_h: float | None
    stale_open: int


@dataclass
class DeveloperProfile:
    """Public profile of a GitHub user."""

    login: str
    name: str | None
    avatar_url: str
    html_url: str
    bio: str | None
    company: str | None
    location: str | None
    followers: int
    following: int
    public_repos: int


@dataclass
class DeveloperScores:
    """Raw contribution values and their 0-10 scores."""

    merge_success: float
    merge_rate: float
    cycle_efficiency: float
    average_changes: float
    size_efficiency: float
    median_size: float
    lead_time_score: float
    median_lead_time: float
    review_activity: float
    reviews_count: int
    feedback_score: float
    average_comments: float
    issue_resolution: float
    issues_closed: int


@dataclass
class DeveloperMetrics:
    """A developer's profile together with their contribution scores."""

    profile: DeveloperProfile
    scores: DeveloperScores


@dataclass
class RepoInsights:
    """DevOps health metrics for one repository."""

    deployment_frequency: int
    lead_time: float
    change_failure_rate: float
    mean_time_to_restore: float
    open_issues: int
    open_pull_requests: int
    average_merge_time: float
    weekly_commits: list[int] = field(default_factory=list)
    contributor_count: int = 0
    community_health_score: int | None = None
