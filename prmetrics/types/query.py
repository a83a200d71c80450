"""Search-query data models."""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

PRState = Literal["open", "closed", "merged", "all"]


@dataclass
class DateBounds:
    """Start and end bounds for one date qualifier."""

    start: date | None = None
    end: date | None = None


@dataclass
class DateRange:
    """Date filters keyed by the qualifier they compile to."""

    created: DateBounds | None = None
    updated: DateBounds | None = None


@dataclass
class FilterState:
    """Structured, editable representation of a search query."""

    authors: list[str] = field(default_factory=list)
    reviewers: list[str] = field(default_factory=list)
    repositories: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    involves: list[str] = field(default_factory=list)
    state: PRState = "all"
    is_draft: bool | None = None
    date_range: DateRange = field(default_factory=DateRange)


@dataclass
class QueryValidationResult:
    """Outcome of validating one query string."""

    is_valid: bool
    sanitized: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class QueryParams:
    """Dashboard URL parameters that describe a search."""

    q: str | None = None
    page: int = 1
    sort: str = "updated"
    per_page: int = 20
