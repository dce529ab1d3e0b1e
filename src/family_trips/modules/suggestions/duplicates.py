from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime

from family_trips.core.logging import get_logger, log_event
from family_trips.modules.suggestions.models import DuplicateCheck, ExistingTrip, TripSuggestion

logger = get_logger(__name__)

DEFAULT_MAX_DAYS_APART = 7
DUPLICATE_PROXIMITY_DAYS = 3
_UNKNOWN_MONTH = 6


def _as_date(value: object) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _span(visit: object, end: object) -> tuple[date, date] | None:
    start = _as_date(visit) or _as_date(end)
    stop = _as_date(end) or start
    if start is None or stop is None:
        return None
    if stop < start:
        start, stop = stop, start
    return start, stop


def _ranges_close(a: tuple[date, date], b: tuple[date, date], proximity_days: int) -> bool:
    if a[0] <= b[1] and b[0] <= a[1]:
        return True
    gap = min(abs((x - y).days) for x in a for y in b)
    return gap <= proximity_days


def _year_month(
    span: tuple[date, date] | None, year: int | None, month: int | None
) -> tuple[int | None, int | None]:
    if span is not None:
        return span[0].year, span[0].month
    return year, month


def _same_country(suggestion: TripSuggestion, trip: ExistingTrip) -> bool:
    if suggestion.country_code and trip.country_code:
        return suggestion.country_code.strip().upper() == trip.country_code.strip().upper()
    left = (suggestion.country_name or "").strip().casefold()
    right = (trip.country_name or "").strip().casefold()
    return bool(left) and left == right


def _describe(trip: ExistingTrip) -> str:
    span = _span(trip.visit_date, trip.end_date)
    if span is not None:
        start, stop = span
        if start == stop:
            return f"on {start.isoformat()}"
        return f"from {start.isoformat()} to {stop.isoformat()}"
    if trip.approximate_year and trip.approximate_month:
        return f"in {date(trip.approximate_year, trip.approximate_month, 1):%B %Y}"
    if trip.approximate_year:
        return f"in {trip.approximate_year}"
    return "with no dates"


def _reason(trip: ExistingTrip) -> str:
    return f"You already have a trip to {trip.country_name} {_describe(trip)}"


def check_duplicate_trip(
    suggestion: TripSuggestion,
    existing_trips: Iterable[ExistingTrip],
    *,
    proximity_days: int = DUPLICATE_PROXIMITY_DAYS,
) -> DuplicateCheck:
    """Whether a suggestion repeats a trip that is already recorded.

    Exact dates on both sides must overlap or come within ``proximity_days``
    of each other. Otherwise years must agree, and months too when both sides
    have one; an exact date contributes its start year and month. Two trips
    without any date evidence match on country alone.
    """
    s_span = _span(suggestion.visit_date, suggestion.end_date)
    s_year, s_month = _year_month(
        s_span, suggestion.approximate_year, suggestion.approximate_month
    )

    for trip in existing_trips:
        if not _same_country(suggestion, trip):
            continue
        e_span = _span(trip.visit_date, trip.end_date)

        if s_span is not None and e_span is not None:
            if _ranges_close(s_span, e_span, proximity_days):
                return DuplicateCheck(is_duplicate=True, reason=_reason(trip))
            continue

        e_year, e_month = _year_month(e_span, trip.approximate_year, trip.approximate_month)
        if s_year is None and e_year is None:
            return DuplicateCheck(is_duplicate=True, reason=_reason(trip))
        if s_year is None or e_year is None or s_year != e_year:
            continue
        if s_month and e_month and s_month != e_month:
            continue
        return DuplicateCheck(is_duplicate=True, reason=_reason(trip))

    return DuplicateCheck(is_duplicate=False)


def mark_duplicate_suggestions(
    suggestions: Sequence[TripSuggestion],
    existing_trips: Sequence[ExistingTrip],
    *,
    proximity_days: int = DUPLICATE_PROXIMITY_DAYS,
) -> list[TripSuggestion]:
    out: list[TripSuggestion] = []
    for suggestion in suggestions:
        check = check_duplicate_trip(suggestion, existing_trips, proximity_days=proximity_days)
        out.append(
            replace(
                suggestion,
                already_exists=check.is_duplicate,
                duplicate_reason=check.reason if check.is_duplicate else None,
            )
        )
    return out


def _sort_date(suggestion: TripSuggestion) -> date | None:
    exact = _as_date(suggestion.visit_date)
    if exact is not None:
        return exact
    if suggestion.approximate_year:
        try:
            return date(
                suggestion.approximate_year, suggestion.approximate_month or _UNKNOWN_MONTH, 15
            )
        except ValueError:
            return None
    return None


def _sort_key(suggestion: TripSuggestion) -> tuple[int, date]:
    when = _sort_date(suggestion)
    return (0, when) if when is not None else (1, date.max)


def _merge_pair(
    current: TripSuggestion, nxt: TripSuggestion, max_days_apart: int
) -> TripSuggestion | None:
    current_end = _as_date(current.end_date) or _as_date(current.visit_date)
    next_start = _as_date(nxt.visit_date)
    if current_end is None or next_start is None:
        return None
    if abs((next_start - current_end).days) > max_days_apart:
        return None

    starts = [d for d in (_as_date(current.visit_date), next_start) if d is not None]
    ends = [d for d in (current_end, _as_date(nxt.end_date) or next_start) if d is not None]

    total_photos = (current.photo_count or 0) + (nxt.photo_count or 0)
    confidences = [c for c in (current.confidence, nxt.confidence) if c is not None]
    if total_photos > 0:
        label = f"From {total_photos} photos"
    else:
        label = f"{current.source_label} + {nxt.source_label}"

    return replace(
        current,
        visit_date=min(starts),
        end_date=max(ends),
        photo_count=total_photos or None,
        photo_file_names=[*current.photo_file_names, *nxt.photo_file_names],
        confidence=max(confidences) if confidences else None,
        source_label=label,
    )


def merge_nearby_trips(
    suggestions: Sequence[TripSuggestion], max_days_apart: int = DEFAULT_MAX_DAYS_APART
) -> list[TripSuggestion]:
    """Fold suggestions for the same country whose dates nearly touch.

    Groups keep the order in which their country first appears. Inputs are
    never modified; a suggestion that is not merged is returned as is.
    """
    if len(suggestions) <= 1:
        return list(suggestions)

    groups: dict[str, list[TripSuggestion]] = {}
    for suggestion in suggestions:
        key = (suggestion.country_code or suggestion.country_name or "").upper()
        groups.setdefault(key, []).append(suggestion)

    merged: list[TripSuggestion] = []
    for trips in groups.values():
        if len(trips) == 1:
            merged.append(trips[0])
            continue

        ordered = sorted(trips, key=_sort_key)
        current = ordered[0]
        for nxt in ordered[1:]:
            folded = _merge_pair(current, nxt, max_days_apart)
            if folded is None:
                merged.append(current)
                current = nxt
            else:
                current = folded
        merged.append(current)

    log_event(
        logger,
        "suggestions.merge",
        level=logging.DEBUG,
        before=len(suggestions),
        after=len(merged),
        max_days_apart=max_days_apart,
    )
    return merged
