from __future__ import annotations

import time

from fastapi import APIRouter

from family_trips.core.config import settings
from family_trips.core.logging import get_logger, log_event, monotonic_ms
from family_trips.modules.suggestions.duplicates import (
    check_duplicate_trip,
    mark_duplicate_suggestions,
    merge_nearby_trips,
)
from family_trips.modules.suggestions.email_parser import parse_email_content
from family_trips.modules.suggestions.paste_parser import parse_pasted_text
from family_trips.modules.suggestions.schemas import (
    CheckDuplicateIn,
    DuplicateCheckOut,
    MarkDuplicatesIn,
    MergeIn,
    ParseTextIn,
    TripSuggestionSchema,
)

router = APIRouter(tags=["trip-suggestions"])
logger = get_logger(__name__)


@router.post("/trip-suggestions/parse-text", response_model=list[TripSuggestionSchema])
def parse_text(payload: ParseTextIn) -> list[TripSuggestionSchema]:
    start = time.monotonic()
    suggestions = parse_pasted_text(payload.text)
    log_event(
        logger,
        "suggestions.parse_text",
        chars=len(payload.text),
        suggestions=len(suggestions),
        duration_ms=monotonic_ms(start),
    )
    return [TripSuggestionSchema.from_model(s) for s in suggestions]


@router.post("/trip-suggestions/parse-email", response_model=list[TripSuggestionSchema])
def parse_email(payload: ParseTextIn) -> list[TripSuggestionSchema]:
    start = time.monotonic()
    suggestions = parse_email_content(payload.text)
    log_event(
        logger,
        "suggestions.parse_email",
        chars=len(payload.text),
        suggestions=len(suggestions),
        duration_ms=monotonic_ms(start),
    )
    return [TripSuggestionSchema.from_model(s) for s in suggestions]


@router.post("/trip-suggestions/merge", response_model=list[TripSuggestionSchema])
def merge(payload: MergeIn) -> list[TripSuggestionSchema]:
    max_days_apart = payload.max_days_apart
    if max_days_apart is None:
        max_days_apart = settings.merge_max_days_apart
    merged = merge_nearby_trips(
        [s.to_model() for s in payload.suggestions], max_days_apart=max_days_apart
    )
    return [TripSuggestionSchema.from_model(s) for s in merged]


@router.post("/trip-suggestions/mark-duplicates", response_model=list[TripSuggestionSchema])
def mark_duplicates(payload: MarkDuplicatesIn) -> list[TripSuggestionSchema]:
    marked = mark_duplicate_suggestions(
        [s.to_model() for s in payload.suggestions],
        [t.to_model() for t in payload.existing_trips],
        proximity_days=settings.duplicate_proximity_days,
    )
    log_event(
        logger,
        "suggestions.mark_duplicates",
        suggestions=len(marked),
        duplicates=sum(1 for s in marked if s.already_exists),
    )
    return [TripSuggestionSchema.from_model(s) for s in marked]


@router.post("/trip-suggestions/check-duplicate", response_model=DuplicateCheckOut)
def check_duplicate(payload: CheckDuplicateIn) -> DuplicateCheckOut:
    check = check_duplicate_trip(
        payload.suggestion.to_model(),
        [t.to_model() for t in payload.existing_trips],
        proximity_days=settings.duplicate_proximity_days,
    )
    return DuplicateCheckOut.from_model(check)
