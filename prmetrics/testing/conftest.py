"""
Pytest plugin for prmetrics testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["prmetrics.testing.conftest"]

Or import the fixtures directly:

    from prmetrics.testing.fixtures import fake_github, pipeline
"""

# Re-export all fixtures for pytest auto-discovery
from prmetrics.testing.fixtures import (
    fake_github,
    github_client,
    pipeline,
    sample_commit,
    sample_pull_request_detail,
    sample_record,
    sample_search_item,
)

__all__ = [
    "fake_github",
    "github_client",
    "pipeline",
    "sample_search_item",
    "sample_pull_request_detail",
    "sample_commit",
    "sample_record",
]
