"""prmetrics - pull request metrics for GitHub: query tooling, ingestion and aggregation."""

from prmetrics.cache import MemoryCache
from prmetrics.client import AsyncGitHubClient
from prmetrics.exceptions import (
    AuthenticationError,
    ConfigurationError,
    PRMetricsError,
    RateLimitError,
    SuggestionLookupFailure,
    UpstreamError,
    UpstreamRejectedQueryError,
    ValidationError,
)
from prmetrics.logging import configure_logging, get_logger
from prmetrics.metrics import (
    fetch_developer_metrics,
    fetch_repo_insights,
    summarize,
)
from prmetrics.pipeline import MetricsPipeline, PipelineCaches
from prmetrics.query import (
    build_query,
    parse_query,
    query_complexity,
    validate_and_sanitize,
    validate_query,
    validate_realtime,
)
from prmetrics.suggestions import SuggestionEngine
from prmetrics.transport import AsyncHTTPTransport
from prmetrics.types import (
    AutocompleteSuggestion,
    FilterState,
    PullRequestRecord,
    QueryValidationResult,
    SearchOptions,
    SearchResult,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main Client
    "AsyncGitHubClient",
    # Pipeline
    "MetricsPipeline",
    "PipelineCaches",
    "MemoryCache",
    # Query
    "parse_query",
    "build_query",
    "query_complexity",
    "validate_query",
    "validate_realtime",
    "validate_and_sanitize",
    "SuggestionEngine",
    # Metrics
    "summarize",
    "fetch_developer_metrics",
    "fetch_repo_insights",
    # Types
    "FilterState",
    "QueryValidationResult",
    "AutocompleteSuggestion",
    "PullRequestRecord",
    "SearchOptions",
    "SearchResult",
    # Exceptions
    "PRMetricsError",
    "ConfigurationError",
    "ValidationError",
    "AuthenticationError",
    "RateLimitError",
    "UpstreamRejectedQueryError",
    "UpstreamError",
    "SuggestionLookupFailure",
    # Transport
    "AsyncHTTPTransport",
    # Logging
    "configure_logging",
    "get_logger",
]
