"""Aggregators over pull request records and repository data."""

from prmetrics.metrics.developer import (
    compute_developer_scores,
    fetch_developer_metrics,
    fetch_developer_profile,
)
from prmetrics.metrics.repo_insights import derive_repo_insights, fetch_repo_insights
from prmetrics.metrics.summary import mean, median, summarize

__all__ = [
    "summarize",
    "median",
    "mean",
    "compute_developer_scores",
    "fetch_developer_profile",
    "fetch_developer_metrics",
    "derive_repo_insights",
    "fetch_repo_insights",
]
