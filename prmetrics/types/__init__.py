"""prmetrics type definitions.

This module exports all data model types used by the package.
"""

from prmetrics.types.metrics import (
    DeveloperMetrics,
    DeveloperProfile,
    DeveloperScores,
    RepoInsights,
    SummaryMetrics,
)
from prmetrics.types.pulls import (
    PullRequestDetails,
    PullRequestRecord,
    SearchOptions,
    SearchResult,
    TimelineEntry,
)
from prmetrics.types.query import (
    DateBounds,
    DateRange,
    FilterState,
    QueryParams,
    QueryValidationResult,
)
from prmetrics.types.suggestions import AutocompleteSuggestion

__all__ = [
    # Query types
    "FilterState",
    "DateRange",
    "DateBounds",
    "QueryValidationResult",
    "QueryParams",
    # Pull request types
    "PullRequestRecord",
    "TimelineEntry",
    "SearchOptions",
    "SearchResult",
    "PullRequestDetails",
    # Metric types
    "SummaryMetrics",
    "DeveloperProfile",
    "DeveloperScores",
    "DeveloperMetrics",
    "RepoInsights",
    # Autocomplete types
    "AutocompleteSuggestion",
]
