"""
Metrics ingestion pipeline.

Turns a search query into normalized pull request records:
validate, search, batch-fetch details, fetch commits, transform. Enrichment
runs ENRICH_CONCURRENCY items at a time and whole results are cached for
SEARCH_CACHE_TTL seconds.
"""

import asyncio
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from prmetrics.batching import ResolvedPullRequest, chunked, fetch_details
from prmetrics.cache import MemoryCache
from prmetrics.exceptions import UpstreamError
from prmetrics.logging import get_logger
from prmetrics.metrics.developer import fetch_developer_metrics
from prmetrics.metrics.repo_insights import fetch_repo_insights
from prmetrics.query.validator import validate_and_sanitize
from prmetrics.transformers import parse_timestamp, to_pull_request_record
from prmetrics.types.metrics import DeveloperMetrics, RepoInsights
from prmetrics.types.pulls import (
    PullRequestDetails,
    PullRequestRecord,
    SearchOptions,
    SearchResult,
)

if TYPE_CHECKING:
    from prmetrics.client import AsyncGitHubClient

ENRICH_CONCURRENCY = 5
SEARCH_CACHE_TTL = 300
USER_SEARCH_LIMIT = 5
LEGACY_PER_PAGE = 100

_AUTHENTICATED_USER_KEY = "authenticated_user"

PULL_REQUEST_FIELDS = (
    "id title author { login } createdAt publishedAt closedAt mergedAt isDraft "
    "additions deletions comments { totalCount } "
    "reviews(first: 100) { nodes { author { login } state submittedAt } } "
    "commits(first: 1) { nodes { commit { authoredDate committedDate } } }"
)

_DETAILS_DOCUMENT = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      title createdAt publishedAt closedAt mergedAt
      reviews(first: 100) { nodes { submittedAt } }
    }
  }
}
"""

logger = get_logger("pipeline")


@dataclass
class PipelineCaches:
    """Caches used by a pipeline; pass shared instances to share state."""

    user: MemoryCache = field(default_factory=MemoryCache)
    repo: MemoryCache = field(default_factory=MemoryCache)
    commit: MemoryCache = field(default_factory=MemoryCache)
    search: MemoryCache = field(default_factory=MemoryCache)


class MetricsPipeline:
    """
    Resolves GitHub searches into PullRequestRecord results.

    Example:
        ```python
        async with AsyncGitHubClient.from_env() as client:
            pipeline = MetricsPipeline(client)
            result = await pipeline.search_pull_requests(
                "author:octocat is:merged",
                SearchOptions(per_page=50),
            )
            summary = summarize(result.items)
        ```
    """

    def __init__(self, client: "AsyncGitHubClient", caches: PipelineCaches | None = None) -> None:
        """
        Initialize the pipeline.

        Args:
            client: GitHub client used for every remote call
            caches: Cache instances; fresh ones are created when omitted
        """
        self.client = client
        self.caches = caches or PipelineCaches()

    async def search_pull_requests(
        self,
        query: str,
        options: SearchOptions | None = None,
    ) -> SearchResult:
        """
        Search pull requests and normalize every hit.

        Args:
            query: Search query; validated and sanitized first
            options: Pagination and ordering

        Returns:
            SearchResult with the upstream totals and one record per
            resolvable pull request, in search order

        Raises:
            ValidationError: If the query is invalid (before any network call)
            PRMetricsError: On upstream failures; nothing is cached
        """
        options = options or SearchOptions()
        sanitized = validate_and_sanitize(query)

        cache_key = _search_cache_key(sanitized, options)
        cached = self.caches.search.get(cache_key)
        if cached is not None:
            logger.debug(f"Search cache hit for {sanitized!r}")
            return _copy_result(cached)

        page = await self.client.search.issues_and_pull_requests(
            sanitized,
            page=options.page,
            per_page=options.per_page,
            sort=options.sort,
            order=options.order,
        )
        stubs = page["items"]
        resolved = await fetch_details(self.client.graphql, stubs, PULL_REQUEST_FIELDS)

        records: list[PullRequestRecord] = []
        for index, chunk in enumerate(chunked(resolved, ENRICH_CONCURRENCY)):
            logger.debug(f"Enriching chunk {index + 1} ({len(chunk)} pull requests)")
            records.extend(await asyncio.gather(*(self._enrich(item) for item in chunk)))

        result = SearchResult(
            total_count=page["total_count"],
            incomplete_results=page["incomplete_results"],
            items=records,
        )
        self.caches.search.set(cache_key, _copy_result(result), SEARCH_CACHE_TTL)
        return result

    async def fetch_pull_request_metrics(self) -> list[PullRequestRecord]:
        """
        Records for everything the authenticated user authored or reviewed.

        Kept for callers that expect a bare list; searches up to 100 pull
        requests.
        """
        login = (await self.get_authenticated_user())["login"]
        result = await self.search_pull_requests(
            f"author:{login} OR reviewed-by:{login}",
            SearchOptions(per_page=LEGACY_PER_PAGE),
        )
        return result.items

    async def fetch_pull_request_details(self, owner: str, repo: str, number: int) -> PullRequestDetails:
        """
        Fetch the timestamps and review submissions of one pull request.

        Raises:
            UpstreamError: With status 404 if the pull request does not exist
        """
        cache_key = f"{owner}/{repo}/pr/{number}/details"
        cached = self.caches.repo.get(cache_key)
        if cached is not None:
            return cached

        data = await self.client.graphql.query(
            _DETAILS_DOCUMENT,
            {"owner": owner, "repo": repo, "number": int(number)},
        )
        pull_request = (data.get("repository") or {}).get("pullRequest")
        if not pull_request:
            raise UpstreamError(f"Pull request {owner}/{repo}#{number} not found", 404)

        submissions = []
        for node in (pull_request.get("reviews") or {}).get("nodes") or []:
            submitted = parse_timestamp(node.get("submittedAt"))
            if submitted is not None:
                submissions.append(submitted)

        details = PullRequestDetails(
            title=pull_request.get("title", ""),
            created_at=parse_timestamp(pull_request.get("createdAt")),
            published_at=parse_timestamp(pull_request.get("publishedAt")),
            closed_at=parse_timestamp(pull_request.get("closedAt")),
            merged_at=parse_timestamp(pull_request.get("mergedAt")),
            review_submissions=submissions,
        )
        self.caches.repo.set(cache_key, details, None)
        return details

    async def get_authenticated_user(self) -> dict[str, Any]:
        """The authenticated user's account data, fetched once per pipeline."""
        user = self.caches.user.get(_AUTHENTICATED_USER_KEY)
        if user is None:
            user = await self.client.users.get_authenticated()
            self.caches.user.set(_AUTHENTICATED_USER_KEY, user, None)
        return user

    async def search_users(self, query: str) -> list[dict[str, str]]:
        """Find users by name or login; returns ``login`` and ``avatar_url``."""
        items = await self.client.search.users(query, per_page=USER_SEARCH_LIMIT)
        return [{"login": item["login"], "avatar_url": item.get("avatar_url", "")} for item in items]

    async def developer_metrics(self, login: str) -> DeveloperMetrics:
        """Profile and 0-10 contribution scores for ``login``."""
        return await fetch_developer_metrics(self.client, login, self.caches.user)

    async def repo_insights(self, owner: str, repo: str) -> RepoInsights:
        """DevOps metrics for one repository."""
        return await fetch_repo_insights(self.client, owner, repo, self.caches.repo)

    async def _enrich(self, item: ResolvedPullRequest) -> PullRequestRecord:
        commits = await self._commits(item.owner, item.repo, item.stub["number"])
        return to_pull_request_record(item.detail, item.stub, item.owner, item.repo, commits)

    async def _commits(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        cache_key = f"{owner}/{repo}/pr/{number}"
        commits = self.caches.commit.get(cache_key)
        if commits is None:
            commits = await self.client.pulls.list_commits(owner, repo, number)
            self.caches.commit.set(cache_key, commits, None)
        else:
            logger.debug(f"Commit cache hit for {cache_key}")
        return commits


def _search_cache_key(query: str, options: SearchOptions) -> str:
    return f"search:{query}|page={options.page}|per_page={options.per_page}|sort={options.sort}|order={options.order}"


def _copy_result(result: SearchResult) -> SearchResult:
    # Records are frozen; only the list needs copying
    return replace(result, items=list(result.items))
