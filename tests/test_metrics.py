"""
Tests for the summary, developer and repository aggregators.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from prmetrics.cache import MemoryCache
from prmetrics.exceptions import UpstreamError
from prmetrics.metrics import (
    compute_developer_scores,
    derive_repo_insights,
    fetch_developer_metrics,
    fetch_repo_insights,
    median,
    summarize,
)
from prmetrics.metrics.summary import round_half_up
from prmetrics.pipeline import MetricsPipeline
from prmetrics.testing import (
    FakeGitHub,
    create_mock_pull_request_detail,
    create_mock_record,
    create_mock_search_item,
    create_mock_user,
)

T0 = datetime(2024, 1, 10, 0, 0, tzinfo=timezone.utc)


def hours(n: float) -> timedelta:
    return timedelta(hours=n)


# ============================================================================
# Summary
# ============================================================================


def test_summarize_empty_is_none() -> None:
    assert summarize([]) is None


def test_summarize_single_record() -> None:
    record = create_mock_record(
        state="merged",
        first_commit_at=T0,
        published_at=T0 + hours(2),
        first_review_at=T0 + hours(27.5),
        closed_at=T0 + hours(68),
    )

    summary = summarize([record], now=T0 + hours(100))

    assert summary.count == 1
    assert summary.merged == 1
    assert summary.open == 0
    assert summary.median_lead_time_h == summary.avg_lead_time_h == 68.0
    assert summary.median_review_h == summary.avg_review_h == 25.5


def test_summarize_medians_and_means() -> None:
    records = [
        create_mock_record(state="merged", first_commit_at=T0, closed_at=T0 + hours(h))
        for h in (12, 20, 30, 40)
    ]

    summary = summarize(records, now=T0)

    assert summary.median_lead_time_h == 25.0
    assert summary.avg_lead_time_h == 25.5


def test_summarize_counts_closed_unmerged_as_merged_and_skips_open_lead_time() -> None:
    records = [
        create_mock_record(state="closed", first_commit_at=T0, closed_at=T0 + hours(10)),
        create_mock_record(state="open", first_commit_at=T0, closed_at=None),
        create_mock_record(state="merged", first_commit_at=None, closed_at=T0 + hours(5)),
    ]

    summary = summarize(records, now=T0)

    assert summary.merged == 2
    assert summary.open == 1
    assert summary.median_lead_time_h == 10.0


def test_summarize_missing_statistics_are_none() -> None:
    summary = summarize([create_mock_record(first_review_at=None)], now=T0)

    assert summary.median_lead_time_h is None
    assert summary.avg_lead_time_h is None
    assert summary.median_review_h is None
    assert summary.avg_review_h is None


def test_summarize_stale_open() -> None:
    now = T0 + timedelta(days=10)
    records = [
        create_mock_record(state="open", created_at=T0),
        create_mock_record(state="open", created_at=now - timedelta(days=6)),
        create_mock_record(state="merged", created_at=T0, closed_at=T0 + hours(1)),
    ]

    assert summarize(records, now=now).stale_open == 1


def test_median_even_length_averages_middle_values() -> None:
    assert median([4, 1, 3, 2]) == 2.5
    assert median([3, 1, 2]) == 2
    assert median([]) is None


# ============================================================================
# Developer scores
# ============================================================================


def _developer_details() -> list[dict]:
    return [
        create_mock_pull_request_detail(
            1,
            createdAt="2024-01-01T00:00:00Z",
            mergedAt="2024-01-02T00:00:00Z",
            additions=100,
            deletions=50,
            comments={"totalCount": 4},
            reviews={"nodes": [{"state": "CHANGES_REQUESTED"}, {"state": "APPROVED"}]},
            closingIssuesReferences={"totalCount": 1},
        ),
        create_mock_pull_request_detail(
            2,
            additions=300,
            deletions=100,
            comments={"totalCount": 2},
        ),
        create_mock_pull_request_detail(
            3,
            createdAt="2024-01-01T00:00:00Z",
            mergedAt="2024-01-03T00:00:00Z",
            additions=10,
            deletions=0,
            comments={"totalCount": 0},
            reviews={"nodes": [{"state": "CHANGES_REQUESTED"}, {"state": "CHANGES_REQUESTED"}]},
            closingIssuesReferences={"totalCount": 2},
        ),
    ]


def test_compute_developer_scores() -> None:
    scores = compute_developer_scores(authored_count=4, reviewed_count=12, details=_developer_details())

    assert scores.merge_rate == 0.5
    assert scores.merge_success == 5.0
    assert scores.average_changes == 1.0
    assert scores.cycle_efficiency == 8.0
    assert scores.median_size == 150.0
    assert scores.size_efficiency == 8.5
    assert scores.median_lead_time == 36.0
    assert scores.lead_time_score == 7.0
    assert scores.reviews_count == 12
    assert scores.review_activity == 10.0
    assert scores.average_comments == 2.0
    assert scores.feedback_score == 2.0
    assert scores.issues_closed == 3
    assert scores.issue_resolution == 3.0


def test_compute_developer_scores_empty_inputs() -> None:
    scores = compute_developer_scores(0, 0, [])

    assert scores.merge_rate == 0
    assert scores.merge_success == 0
    assert scores.median_size == 0
    assert scores.median_lead_time == 0
    assert scores.reviews_count == 0
    assert scores.issues_closed == 0
    assert scores.cycle_efficiency == 10.0
    assert scores.size_efficiency == 10.0
    assert scores.lead_time_score == 10.0


def test_scores_are_clamped() -> None:
    detail = create_mock_pull_request_detail(
        createdAt="2024-01-01T00:00:00Z",
        mergedAt="2024-03-01T00:00:00Z",
        additions=5000,
        deletions=0,
        comments={"totalCount": 50},
        reviews={"nodes": [{"state": "CHANGES_REQUESTED"}] * 8},
    )

    scores = compute_developer_scores(1, 0, [detail])

    assert scores.cycle_efficiency == 0
    assert scores.size_efficiency == 0
    assert scores.lead_time_score == 0
    assert scores.feedback_score == 10


def test_scores_are_rounded_to_two_decimals() -> None:
    scores = compute_developer_scores(3, 0, _developer_details()[:1])

    assert scores.merge_rate == 0.33
    assert scores.merge_success == 3.33


def _serve_developer(fake: FakeGitHub) -> None:
    fake.configure("GET", "/users/octocat", json=create_mock_user("octocat"))
    fake.configure(
        "GET",
        "/search/issues",
        json={
            "total_count": 2,
            "incomplete_results": False,
            "items": [create_mock_search_item(1), create_mock_search_item(3)],
        },
    )
    details = _developer_details()
    fake.add_pull_request("octocat", "hello-world", 1, details[0])
    fake.add_pull_request("octocat", "hello-world", 3, details[2])


def test_fetch_developer_metrics(fake_github: FakeGitHub, github_client) -> None:
    _serve_developer(fake_github)
    cache = MemoryCache()

    metrics = asyncio.run(fetch_developer_metrics(github_client, "octocat", cache))
    asyncio.run(fetch_developer_metrics(github_client, "octocat", cache))

    assert metrics.profile.login == "octocat"
    assert metrics.profile.followers == 100
    assert metrics.scores.merge_rate == 1.0
    assert metrics.scores.reviews_count == 2
    assert metrics.scores.issues_closed == 3
    assert fake_github.call_count("GET", "/users/octocat") == 1

    queries = sorted(call.params["q"] for call in fake_github.get_calls("GET", "/search/issues")[:2])
    assert queries == ["is:pr author:octocat", "is:pr reviewed-by:octocat"]
    assert all(call.params["per_page"] == "30" for call in fake_github.get_calls("GET", "/search/issues"))


def test_fetch_developer_metrics_unknown_user(pipeline: MetricsPipeline) -> None:
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(pipeline.developer_metrics("ghost"))

    assert exc_info.value.status == 404


# ============================================================================
# Repository insights
# ============================================================================

NOW = datetime(2024, 3, 31, tzinfo=timezone.utc)
SINCE = NOW - timedelta(days=30)

CLOSED_PULLS = [
    {"number": 1, "created_at": "2024-03-10T00:00:00Z", "merged_at": "2024-03-11T00:00:00Z"},
    {"number": 2, "created_at": "2024-02-01T00:00:00Z", "merged_at": "2024-02-02T00:00:00Z"},
    {"number": 3, "created_at": "2024-03-12T00:00:00Z", "merged_at": None},
]

# Newest first, as the API returns them
WORKFLOW_RUNS = [
    {"id": 6, "conclusion": "failure", "created_at": "2024-03-20T00:00:00Z"},
    {"id": 5, "conclusion": "success", "created_at": "2024-03-10T03:00:00Z"},
    {"id": 4, "conclusion": "failure", "created_at": "2024-03-10T01:00:00Z"},
    {"id": 3, "conclusion": "failure", "created_at": "2024-03-10T00:00:00Z"},
    {"id": 2, "conclusion": "success", "created_at": "2024-03-05T06:00:00Z"},
    {"id": 1, "conclusion": "failure", "created_at": "2024-03-05T00:00:00Z"},
    {"id": 0, "conclusion": "success", "created_at": "2024-02-01T00:00:00Z"},
]

COMMIT_ACTIVITY = [
    {"days": [0, 1, 2, 3, 4, 5, 6], "total": 21, "week": 1709424000},
    {"days": [1, 0, 0, 2, 0, 0, 1], "total": 4, "week": 1710028800},
]


def test_derive_repo_insights() -> None:
    insights = derive_repo_insights(
        {"default_branch": "main", "open_issues_count": 10},
        commits=[{}, {}, {}],
        closed_pulls=CLOSED_PULLS,
        open_pulls=[{}, {}],
        workflow_runs=WORKFLOW_RUNS,
        commit_activity=COMMIT_ACTIVITY,
        contributors=[{}, {}, {}, {}],
        community_profile={"health_percentage": 85},
        since=SINCE,
    )

    assert insights.deployment_frequency == 3
    assert insights.lead_time == insights.average_merge_time == 24.0
    assert insights.change_failure_rate == pytest.approx(4 / 6)
    # 6h, 3h and 2h to the next success; the last failure has none
    assert insights.mean_time_to_restore == pytest.approx(11 / 3)
    assert insights.open_issues == 8
    assert insights.open_pull_requests == 2
    assert insights.weekly_commits == [1, 0, 0, 2, 0, 0, 1]
    assert insights.contributor_count == 4
    assert insights.community_health_score == 85


def test_derive_repo_insights_without_activity() -> None:
    insights = derive_repo_insights(
        {"open_issues_count": 0},
        commits=[],
        closed_pulls=[],
        open_pulls=[],
        workflow_runs=[],
        commit_activity=[],
        contributors=[],
        community_profile={},
        since=SINCE,
    )

    assert insights.lead_time == 0
    assert insights.change_failure_rate == 0
    assert insights.mean_time_to_restore == 0
    assert insights.weekly_commits == []
    assert insights.community_health_score is None


def _serve_repo(fake: FakeGitHub, stats_ready: bool = True) -> None:
    fake.configure("GET", "/repos/acme/api", json={"default_branch": "main", "open_issues_count": 10})
    fake.configure("GET", "/repos/acme/api/commits", json=[{"sha": "a"}, {"sha": "b"}, {"sha": "c"}])
    fake.configure("GET", "/repos/acme/api/pulls", json=CLOSED_PULLS, params={"state": "closed"})
    fake.configure("GET", "/repos/acme/api/pulls", json=[{"number": 9}, {"number": 10}], params={"state": "open"})
    fake.configure(
        "GET",
        "/repos/acme/api/actions/runs",
        json={"total_count": len(WORKFLOW_RUNS), "workflow_runs": WORKFLOW_RUNS},
    )
    if stats_ready:
        fake.configure("GET", "/repos/acme/api/stats/commit_activity", json=COMMIT_ACTIVITY)
    else:
        fake.configure("GET", "/repos/acme/api/stats/commit_activity", status=202)
    fake.configure("GET", "/repos/acme/api/contributors", json=[{"login": "a"}, {"login": "b"}])
    fake.configure("GET", "/repos/acme/api/community/profile", json={"health_percentage": 71})


def test_fetch_repo_insights(fake_github: FakeGitHub, github_client) -> None:
    _serve_repo(fake_github)
    cache = MemoryCache()

    insights = asyncio.run(fetch_repo_insights(github_client, "acme", "api", cache, now=NOW))
    asyncio.run(fetch_repo_insights(github_client, "acme", "api", cache, now=NOW))

    assert insights.deployment_frequency == 3
    assert insights.open_pull_requests == 2
    assert insights.open_issues == 8
    assert insights.lead_time == 24.0
    assert insights.contributor_count == 2
    assert insights.community_health_score == 71
    assert insights.weekly_commits == [1, 0, 0, 2, 0, 0, 1]
    assert fake_github.call_count("GET", "/repos/acme/api") == 1

    commits_call = fake_github.get_calls("GET", "/repos/acme/api/commits")[0]
    assert commits_call.params["sha"] == "main"
    assert commits_call.params["since"] == "2024-03-01T00:00:00+00:00"
    runs_call = fake_github.get_calls("GET", "/repos/acme/api/actions/runs")[0]
    assert runs_call.params["branch"] == "main"
    assert runs_call.params["status"] == "completed"


def test_fetch_repo_insights_stats_not_ready(fake_github: FakeGitHub, github_client) -> None:
    _serve_repo(fake_github, stats_ready=False)

    insights = asyncio.run(fetch_repo_insights(github_client, "acme", "api", now=NOW))

    assert insights.weekly_commits == []


def test_fetch_repo_insights_unknown_repository(pipeline: MetricsPipeline) -> None:
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(pipeline.repo_insights("acme", "missing"))

    assert exc_info.value.status == 404


# ============================================================================
# Rounding
# ============================================================================


def test_summary_rounds_ties_up() -> None:
    record = create_mock_record(state="merged", first_commit_at=T0, closed_at=T0 + timedelta(hours=2, minutes=15))

    summary = summarize([record], now=T0)

    assert summary.median_lead_time_h == 2.3
    assert summary.avg_lead_time_h == 2.3


def test_developer_scores_round_ties_up() -> None:
    details = [
        create_mock_pull_request_detail(1, mergedAt="2024-01-11T08:00:00Z", comments={"totalCount": 1})
    ] + [create_mock_pull_request_detail(n, comments={"totalCount": 0}) for n in range(2, 9)]

    scores = compute_developer_scores(8, 0, details)

    assert scores.merge_rate == 0.13
    assert scores.merge_success == 1.25
    assert scores.average_comments == 0.13
    assert scores.feedback_score == 0.13


@pytest.mark.parametrize(
    "value,places,expected",
    [(2.25, 1, 2.3), (2.35, 1, 2.4), (0.125, 2, 0.13), (0.124, 2, 0.12), (7.0, 2, 7.0)],
)
def test_round_half_up(value: float, places: int, expected: float) -> None:
    assert round_half_up(value, places) == expected
