"""
Pytest fixtures and payload factories for prmetrics testing.

Factories build the raw GitHub payloads the pipeline consumes (search items,
GraphQL pull request details, REST commits) as well as normalized records.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Generator

import pytest

from prmetrics.client import AsyncGitHubClient
from prmetrics.pipeline import MetricsPipeline
from prmetrics.testing.mock import FakeGitHub
from prmetrics.types.pulls import PullRequestRecord, TimelineEntry


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_search_item(
    number: int = 1,
    owner: str = "octocat",
    repo: str = "hello-world",
    item_id: int | None = None,
    title: str = "Mock pull request",
) -> dict[str, Any]:
    """
    Create a search result item for a pull request.

    Example:
        ```python
        item = create_mock_search_item(number=42, owner="acme", repo="api")
        assert item["repository_url"].endswith("/repos/acme/api")
        ```
    """
    return {
        "id": item_id if item_id is not None else 1000 + number,
        "number": number,
        "title": title,
        "repository_url": f"https://api.github.com/repos/{owner}/{repo}",
        "html_url": f"https://github.com/{owner}/{repo}/pull/{number}",
        "pull_request": {"url": f"https://api.github.com/repos/{owner}/{repo}/pulls/{number}"},
    }


def create_mock_review(
    login: str | None = "reviewer",
    state: str = "APPROVED",
    submitted_at: str = "2024-01-11T09:00:00Z",
) -> dict[str, Any]:
    """Create a GraphQL review node (``login=None`` for a deleted account)."""
    return {
        "author": {"login": login} if login else None,
        "state": state,
        "submittedAt": submitted_at,
    }


def create_mock_pull_request_detail(number: int = 1, **overrides: Any) -> dict[str, Any]:
    """
    Create a GraphQL PullRequest detail.

    Keyword arguments override top-level fields, e.g.
    ``create_mock_pull_request_detail(mergedAt="2024-01-12T00:00:00Z")``.
    """
    detail: dict[str, Any] = {
        "id": f"PR_kwDOmock{number}",
        "title": f"Mock pull request #{number}",
        "author": {"login": "octocat"},
        "createdAt": "2024-01-10T08:00:00Z",
        "publishedAt": "2024-01-10T08:00:00Z",
        "closedAt": None,
        "mergedAt": None,
        "isDraft": False,
        "additions": 10,
        "deletions": 5,
        "comments": {"totalCount": 2},
        "reviews": {"nodes": []},
        "commits": {"nodes": []},
        "closingIssuesReferences": {"totalCount": 0},
    }
    detail.update(overrides)
    return detail


def create_mock_commit(
    author_date: str | None = "2024-01-09T12:00:00Z",
    committer_date: str | None = None,
    sha: str = "a1b2c3d4e5f6",
) -> dict[str, Any]:
    """Create a REST commit object as returned by the pull request commits list."""
    return {
        "sha": sha,
        "commit": {
            "author": {"date": author_date} if author_date else None,
            "committer": {"date": committer_date or author_date},
        },
    }


def create_mock_user(login: str = "octocat", **overrides: Any) -> dict[str, Any]:
    """Create a REST user object."""
    user = {
        "login": login,
        "name": "The Octocat",
        "avatar_url": f"https://avatars.githubusercontent.com/{login}",
        "html_url": f"https://github.com/{login}",
        "bio": None,
        "company": "@github",
        "location": "San Francisco",
        "followers": 100,
        "following": 10,
        "public_repos": 8,
    }
    user.update(overrides)
    return user


def create_mock_record(**overrides: Any) -> PullRequestRecord:
    """
    Create a PullRequestRecord with sensible defaults.

    Example:
        ```python
        record = create_mock_record(state="merged", closed_at=datetime(2024, 1, 12, tzinfo=timezone.utc))
        ```
    """
    created = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)
    record = PullRequestRecord(
        id="PR_kwDOmock1",
        owner="octocat",
        repo_name="hello-world",
        repo="octocat/hello-world",
        number=1,
        title="Mock pull request #1",
        url="https://github.com/octocat/hello-world/pull/1",
        author="octocat",
        state="open",
        created_at=created,
        published_at=created,
        closed_at=None,
        first_review_at=None,
        first_commit_at=datetime(2024, 1, 9, 12, 0, tzinfo=timezone.utc),
        reviewers=(),
        changes_requested=0,
        additions=10,
        deletions=5,
        comment_count=2,
        timeline=(TimelineEntry("Created", created), TimelineEntry("Published", created)),
    )
    return replace(record, **overrides)


# ============================================================================
# Fake API Fixtures
# ============================================================================


@pytest.fixture
def fake_github() -> Generator[FakeGitHub, None, None]:
    """
    Provide a FakeGitHub for testing.

    Example:
        ```python
        def test_my_feature(fake_github, github_client):
            fake_github.configure("GET", "/user", json=create_mock_user())
            user = asyncio.run(github_client.users.get_authenticated())
            assert fake_github.was_called("GET", "/user")
        ```
    """
    fake = FakeGitHub()
    yield fake
    fake.reset()


@pytest.fixture
def github_client(fake_github: FakeGitHub) -> Generator[AsyncGitHubClient, None, None]:
    """Provide an AsyncGitHubClient served by ``fake_github``."""
    client = fake_github.client()
    yield client
    asyncio.run(client.close())


@pytest.fixture
def pipeline(github_client: AsyncGitHubClient) -> MetricsPipeline:
    """Provide a MetricsPipeline with fresh caches."""
    return MetricsPipeline(github_client)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_search_item() -> dict[str, Any]:
    """Provide a sample search item."""
    return create_mock_search_item()


@pytest.fixture
def sample_pull_request_detail() -> dict[str, Any]:
    """Provide a sample GraphQL pull request detail."""
    return create_mock_pull_request_detail()


@pytest.fixture
def sample_commit() -> dict[str, Any]:
    """Provide a sample REST commit."""
    return create_mock_commit()


@pytest.fixture
def sample_record() -> PullRequestRecord:
    """Provide a sample PullRequestRecord."""
    return create_mock_record()
