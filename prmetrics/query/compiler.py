"""
Bidirectional compiler between query strings and FilterState.

``parse_query`` reads a query into a FilterState, and ``build_query`` writes
one back out in a fixed token order. Building normalizes, so
``build_query(parse_query(q))`` need not equal ``q``. Parsing a built query
does reproduce the original FilterState.
"""

from datetime import date, datetime, timezone
from typing import Literal

from prmetrics.query.tokenizer import Token, TokenKind, qualifiers, tokenize
from prmetrics.types.query import DateBounds, DateRange, FilterState

QueryComplexity = Literal["simple", "moderate", "complex"]

# (FilterState attribute, qualifier key), in build order
_LIST_QUALIFIERS = [
    ("authors", "author"),
    ("reviewers", "reviewed-by"),
    ("repositories", "repo"),
    ("labels", "label"),
    ("assignees", "assignee"),
    ("involves", "involves"),
]

_DATE_QUALIFIERS = ("created", "updated")


def parse_query(query: str) -> FilterState:
    """
    Parse a search query into a FilterState.

    Each qualifier family is extracted independently. Repeated qualifiers
    accumulate in order of appearance. Labels are only recognized in their
    quoted form (``label:"bug"``).

    Args:
        query: Search query string

    Returns:
        FilterState with absent fields left at their defaults
    """
    tokens = tokenize(query)
    filters = FilterState()

    for attribute, key in _LIST_QUALIFIERS:
        matched = qualifiers(tokens, key)
        if key == "label":
            matched = [token for token in matched if _is_closed_quote(token)]
        setattr(filters, attribute, [token.value for token in matched if token.value])

    is_values = {token.value for token in qualifiers(tokens, "is")}
    if "open" in is_values:
        filters.state = "open"
    elif "closed" in is_values:
        filters.state = "closed"
    elif "merged" in is_values:
        filters.state = "merged"

    negated_is = {
        token.value for token in qualifiers(tokens, "is", include_negated=True) if token.negated
    }
    if "draft" in negated_is:
        filters.is_draft = False
    elif "draft" in is_values:
        filters.is_draft = True

    filters.date_range = DateRange(
        created=_parse_date_bounds(qualifiers(tokens, "created")),
        updated=_parse_date_bounds(qualifiers(tokens, "updated")),
    )
    return filters


def build_query(filters: FilterState) -> str:
    """
    Serialize a FilterState into a search query.

    Tokens are emitted in a fixed order: ``is:pr``, authors, reviewers,
    repositories, labels, assignees, involves, state, draft flag, then the
    created and updated bounds. Dates are written as UTC ``YYYY-MM-DD``.

    Args:
        filters: Filters to serialize

    Returns:
        Query string; ``"is:pr"`` for an empty FilterState
    """
    parts = ["is:pr"]

    for attribute, key in _LIST_QUALIFIERS:
        for value in getattr(filters, attribute):
            if key == "label":
                parts.append(f'label:"{value}"')
            else:
                parts.append(f"{key}:{value}")

    if filters.state != "all":
        parts.append(f"is:{filters.state}")

    if filters.is_draft is True:
        parts.append("is:draft")
    elif filters.is_draft is False:
        parts.append("-is:draft")

    for key in _DATE_QUALIFIERS:
        bounds = getattr(filters.date_range, key)
        if bounds is None:
            continue
        if bounds.start is not None:
            parts.append(f"{key}:>{format_date(bounds.start)}")
        if bounds.end is not None:
            parts.append(f"{key}:<{format_date(bounds.end)}")

    return " ".join(parts)


def query_complexity(query: str) -> QueryComplexity:
    """
    Classify how involved a query is.

    Returns:
        "complex" if it uses OR/AND or parentheses, or has more than 8 words;
        "moderate" if it filters on created/updated dates, or has more than
        4 words; otherwise "simple"
    """
    word_count = len(query.split())
    tokens = tokenize(query)

    has_boolean = any(
        (token.kind is TokenKind.OPERATOR and token.text in ("AND", "OR"))
        or token.kind in (TokenKind.LPAREN, TokenKind.RPAREN)
        for token in tokens
    )
    has_dates = any(token.is_qualifier and token.key in _DATE_QUALIFIERS for token in tokens)

    if has_boolean or word_count > 8:
        return "complex"
    if has_dates or word_count > 4:
        return "moderate"
    return "simple"


def format_date(value: date) -> str:
    """Format a date (or datetime, converted to UTC) as YYYY-MM-DD."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def _parse_date_bounds(tokens: list[Token]) -> DateBounds | None:
    if not tokens:
        return None

    bounds = DateBounds()
    for token in tokens:
        value = token.value or ""
        if ".." in value:
            low, _, high = value.partition("..")
            bounds.start = _parse_date(low) or bounds.start
            bounds.end = _parse_date(high) or bounds.end
        elif value.startswith(">"):
            bounds.start = _parse_date(value.lstrip(">=")) or bounds.start
        elif value.startswith("<"):
            bounds.end = _parse_date(value.lstrip("<=")) or bounds.end

    if bounds.start is None and bounds.end is None:
        return None
    return bounds


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _is_closed_quote(token: Token) -> bool:
    raw_value = token.text.split(":", 1)[1]
    return len(raw_value) >= 2 and raw_value.startswith('"') and raw_value.endswith('"')
