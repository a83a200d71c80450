"""DevOps metrics for a single repository."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from prmetrics.cache import MemoryCache
from prmetrics.metrics.summary import hours_between, mean
from prmetrics.transformers import parse_timestamp
from prmetrics.types.metrics import RepoInsights

if TYPE_CHECKING:
    from prmetrics.client import AsyncGitHubClient

WINDOW = timedelta(days=30)


def derive_repo_insights(
    repo_data: dict[str, Any],
    commits: list[dict[str, Any]],
    closed_pulls: list[dict[str, Any]],
    open_pulls: list[dict[str, Any]],
    workflow_runs: list[dict[str, Any]],
    commit_activity: list[dict[str, Any]],
    contributors: list[dict[str, Any]],
    community_profile: dict[str, Any],
    since: datetime,
) -> RepoInsights:
    """
    Compute repository insights from raw API data.

    Args:
        repo_data: Repository object (``open_issues_count``)
        commits: Default-branch commits since the window start
        closed_pulls: Closed pull requests
        open_pulls: Open pull requests
        workflow_runs: Completed workflow runs on the default branch
        commit_activity: Weekly commit activity buckets
        contributors: Contributors
        community_profile: Community profile metrics
        since: Start of the observation window

    Returns:
        RepoInsights
    """
    lead_times = []
    for pull in closed_pulls:
        merged_at = parse_timestamp(pull.get("merged_at"))
        created_at = parse_timestamp(pull.get("created_at"))
        if merged_at is not None and created_at is not None and merged_at >= since:
            lead_times.append(hours_between(created_at, merged_at))
    average_merge_time = mean(lead_times) or 0.0

    recent_runs = []
    for run in workflow_runs:
        created_at = parse_timestamp(run.get("created_at"))
        if created_at is not None and created_at >= since:
            recent_runs.append((created_at, run.get("conclusion")))

    failures = [created for created, conclusion in recent_runs if conclusion == "failure"]
    successes = [created for created, conclusion in recent_runs if conclusion == "success"]
    change_failure_rate = len(failures) / len(recent_runs) if recent_runs else 0.0

    restore_times = []
    for failed_at in failures:
        later = [succeeded_at for succeeded_at in successes if succeeded_at > failed_at]
        if later:
            restore_times.append(hours_between(failed_at, min(later)))
    mean_time_to_restore = mean(restore_times) or 0.0

    weekly_commits: list[int] = []
    if commit_activity:
        days = commit_activity[-1].get("days")
        if isinstance(days, list):
            weekly_commits = days

    return RepoInsights(
        deployment_frequency=len(commits),
        lead_time=average_merge_time,
        change_failure_rate=change_failure_rate,
        mean_time_to_restore=mean_time_to_restore,
        # open_issues_count includes pull requests
        open_issues=repo_data.get("open_issues_count", 0) - len(open_pulls),
        open_pull_requests=len(open_pulls),
        average_merge_time=average_merge_time,
        weekly_commits=weekly_commits,
        contributor_count=len(contributors),
        community_health_score=community_profile.get("health_percentage"),
    )


async def fetch_repo_insights(
    client: "AsyncGitHubClient",
    owner: str,
    repo: str,
    repo_cache: MemoryCache | None = None,
    now: datetime | None = None,
) -> RepoInsights:
    """
    Fetch everything needed for repository insights and derive them.

    Repository metadata is cached for the lifetime of ``repo_cache``; the
    remaining seven lookups run concurrently.

    Raises:
        UpstreamError: With status 404 if the repository does not exist
    """
    since = (now or datetime.now(timezone.utc)) - WINDOW

    cache_key = f"{owner}/{repo}"
    repo_data = repo_cache.get(cache_key) if repo_cache is not None else None
    if repo_data is None:
        repo_data = await client.repos.get(owner, repo)
        if repo_cache is not None:
            repo_cache.set(cache_key, repo_data, None)

    branch = repo_data.get("default_branch")
    (
        commits,
        closed_pulls,
        open_pulls,
        workflow_runs,
        commit_activity,
        contributors,
        community_profile,
    ) = await asyncio.gather(
        client.repos.list_commits(owner, repo, sha=branch, since=since.isoformat()),
        client.pulls.list(owner, repo, state="closed"),
        client.pulls.list(owner, repo, state="open"),
        client.actions.list_workflow_runs(owner, repo, branch=branch, status="completed"),
        client.repos.commit_activity(owner, repo),
        client.repos.list_contributors(owner, repo),
        client.repos.community_profile(owner, repo),
    )

    return derive_repo_insights(
        repo_data,
        commits=commits,
        closed_pulls=closed_pulls,
        open_pulls=open_pulls,
        workflow_runs=workflow_runs,
        commit_activity=commit_activity,
        contributors=contributors,
        community_profile=community_profile,
        since=since,
    )
