"""prmetrics async resource clients."""

from prmetrics.clients.actions import ActionsClient
from prmetrics.clients.graphql import GraphQLClient, PullRequestRef
from prmetrics.clients.pulls import PullsClient
from prmetrics.clients.repos import ReposClient
from prmetrics.clients.search import SearchClient
from prmetrics.clients.users import UsersClient

__all__ = [
    "SearchClient",
    "UsersClient",
    "ReposClient",
    "PullsClient",
    "ActionsClient",
    "GraphQLClient",
    "PullRequestRef",
]
