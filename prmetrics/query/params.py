"""Helpers for carrying a search in dashboard URL parameters."""

from collections.abc import Mapping
from urllib.parse import urlencode

from prmetrics.types.query import QueryParams

DEFAULT_SORT = "updated"
DEFAULT_PER_PAGE = 20


def default_query(login: str) -> str:
    """Query for everything a user authored or reviewed."""
    return f"is:pr author:{login} OR is:pr reviewed-by:{login}"


def parse_query_params(params: Mapping[str, str]) -> QueryParams:
    """
    Read search parameters from a URL query mapping.

    Missing or non-numeric ``page``/``per_page`` values fall back to the
    defaults.
    """
    return QueryParams(
        q=params.get("q") or None,
        page=_to_int(params.get("page"), 1),
        sort=params.get("sort") or DEFAULT_SORT,
        per_page=_to_int(params.get("per_page"), DEFAULT_PER_PAGE),
    )


def build_query_string(params: QueryParams) -> str:
    """Encode search parameters, omitting values that equal the defaults."""
    pairs: list[tuple[str, str]] = []

    if params.q:
        pairs.append(("q", params.q))
    if params.page > 1:
        pairs.append(("page", str(params.page)))
    if params.sort and params.sort != DEFAULT_SORT:
        pairs.append(("sort", params.sort))
    if params.per_page and params.per_page != DEFAULT_PER_PAGE:
        pairs.append(("per_page", str(params.per_page)))

    return urlencode(pairs)


def _to_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default
