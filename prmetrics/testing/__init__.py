"""prmetrics testing utilities.

Provides a fake GitHub API and fixtures for testing code that uses prmetrics.
"""

from prmetrics.testing.fixtures import (
    create_mock_commit,
    create_mock_pull_request_detail,
    create_mock_record,
    create_mock_review,
    create_mock_search_item,
    create_mock_user,
)
from prmetrics.testing.mock import FakeGitHub, MockCall, MockResponse

__all__ = [
    # Fake API
    "FakeGitHub",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_search_item",
    "create_mock_pull_request_detail",
    "create_mock_review",
    "create_mock_commit",
    "create_mock_user",
    "create_mock_record",
]
