"""Summary statistics over a set of pull request records."""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from prmetrics.types.metrics import SummaryMetrics
from prmetrics.types.pulls import PullRequestRecord

STALE_AFTER = timedelta(days=7)


def median(values: Sequence[float]) -> float | None:
    """Median; the two middle values are averaged for even lengths."""
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def mean(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def summarize(
    records: Iterable[PullRequestRecord],
    now: datetime | None = None,
) -> SummaryMetrics | None:
    """
    Roll up a set of records.

    Lead time (first commit to close) is measured over merged records and
    review time (publication to first review) over all records; a record
    only contributes when both endpoints are known.

    Args:
        records: Records to summarize
        now: Reference time for staleness (default: current UTC time)

    Returns:
        SummaryMetrics, or None when there are no records
    """
    records = list(records)
    if not records:
        return None

    now = now or datetime.now(timezone.utc)

    merged = [r for r in records if r.closed_at is not None and r.state != "open"]
    open_records = [r for r in records if r.state == "open"]

    lead_times = [
        hours_between(r.first_commit_at, r.closed_at)
        for r in merged
        if r.first_commit_at is not None and r.closed_at is not None
    ]
    review_times = [
        hours_between(r.published_at, r.first_review_at)
        for r in records
        if r.published_at is not None and r.first_review_at is not None
    ]
    stale_open = sum(
        1 for r in open_records if r.created_at is not None and now - r.created_at > STALE_AFTER
    )

    return SummaryMetrics(
        count=len(records),
        merged=len(merged),
        open=len(open_records),
        median_lead_time_h=_round1(median(lead_times)),
        avg_lead_time_h=_round1(mean(lead_times)),
        median_review_h=_round1(median(review_times)),
        avg_review_h=_round1(mean(review_times)),
        stale_open=stale_open,
    )


def round_half_up(value: float, places: int) -> float:
    """Round to ``places`` decimals with ties away from zero (2.25 -> 2.3)."""
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def _round1(value: float | None) -> float | None:
    if value is None:
        return None
    return round_half_up(value, 1)
