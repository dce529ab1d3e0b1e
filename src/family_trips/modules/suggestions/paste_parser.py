from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from family_trips.core.countries import Country
from family_trips.core.logging import get_logger, log_event
from family_trips.modules.suggestions.dates import MONTH_PATTERN, extract_date_evidence
from family_trips.modules.suggestions.locate import find_country_in_text
from family_trips.modules.suggestions.models import (
    DateEvidence,
    SourceType,
    TripSuggestion,
    new_suggestion_id,
)

logger = get_logger(__name__)

DEFAULT_SOURCE_LABEL = "From pasted text"
MIN_FRAGMENT_CHARS = 6

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_BULLET_SPLIT = re.compile(r"(?m)^[ \t]*(?:[-*•·]|\d{1,2}[.)])[ \t]+")

_APOS = r"['’]"


@dataclass(frozen=True)
class _SentencePattern:
    name: str
    pattern: re.Pattern[str]
    names_trip: bool = False


# Each pattern captures a place phrase and a date phrase in one sentence.
_SENTENCE_PATTERNS: tuple[_SentencePattern, ...] = (
    _SentencePattern(
        "out_of_office",
        re.compile(
            r"\b(?:ooo|out\s+of\s+(?:the\s+)?office)\b[^\n]*?\bin\s+(?P<place>[^\n]+?)"
            r"\s+(?:from|between|on)\s+(?P<when>[^\n]+)",
            re.I,
        ),
    ),
    _SentencePattern(
        "will_be_in",
        re.compile(
            rf"\b(?:(?:i|we)\s+will\s+be|(?:i|we){_APOS}ll\s+be"
            rf"|i{_APOS}m|i\s+am|we{_APOS}re|we\s+are)\b[^\n]*?"
            r"\b(?:in|visiting|travel(?:l)?ing\s+to)\s+(?P<place>[^\n]+?)"
            r"\s+(?:from|between|on)\s+(?P<when>[^\n]+)",
            re.I,
        ),
    ),
    _SentencePattern(
        "labelled_trip",
        re.compile(r"(?m)^[ \t]*(?P<place>[^\n:]{2,60}?)\s+trip\s*:\s*(?P<when>[^\n]+)", re.I),
        names_trip=True,
    ),
    _SentencePattern(
        "flight_to",
        re.compile(
            r"\bflight\s+to\s+(?P<place>[a-z][a-z .'-]*?)\s+(?:on\s+)?"
            r"(?P<when>\d{1,2}(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)(?:\d{4}|\d{2})?)"
            r"(?![a-z\d])",
            re.I,
        ),
    ),
)

_TRIP_NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"\b(?:my|our|the)\s+((?:[\w'’-]+\s+){1,3}?"
        r"(?:trip|vacation|holiday|getaway|honeymoon))\b",
        re.I,
    ),
    re.compile(rf"\b({MONTH_PATTERN}\s+\d{{4}}\s+trip)\b", re.I),
    re.compile(
        r"\b((?:honeymoon|anniversary|birthday|family|ski|beach|road|business|babymoon)"
        r"\s+(?:trip|vacation|holiday|getaway))\b",
        re.I,
    ),
)


def split_fragments(text: str) -> list[str]:
    """Paragraphs, then list items, each trimmed; short scraps are dropped."""
    fragments: list[str] = []
    for paragraph in _PARAGRAPH_SPLIT.split(text):
        for piece in _BULLET_SPLIT.split(paragraph):
            piece = piece.strip()
            if len(piece) >= MIN_FRAGMENT_CHARS:
                fragments.append(piece)
    if not fragments and text.strip():
        fragments.append(text.strip())
    return fragments


def _capitalize(phrase: str) -> str:
    phrase = " ".join(phrase.split())
    return phrase[:1].upper() + phrase[1:]


def extract_trip_name(fragment: str) -> str | None:
    for pattern in _TRIP_NAME_PATTERNS:
        m = pattern.search(fragment)
        if m:
            return _capitalize(m.group(1))
    return None


def _build(country: Country, evidence: DateEvidence, trip_name: str | None) -> TripSuggestion:
    return TripSuggestion(
        id=new_suggestion_id("paste"),
        country_name=country.name,
        country_code=country.code,
        visit_date=evidence.visit,
        end_date=evidence.end,
        approximate_month=evidence.approx_month,
        approximate_year=evidence.approx_year,
        trip_name=trip_name,
        source_type=SourceType.PASTED_TEXT,
        source_label=trip_name or DEFAULT_SOURCE_LABEL,
    )


def _from_sentence(fragment: str) -> TripSuggestion | None:
    for sentence in _SENTENCE_PATTERNS:
        m = sentence.pattern.search(fragment)
        if not m:
            continue
        place = m.group("place").strip(" ,.;")
        country = find_country_in_text(place)
        if country is None:
            continue
        evidence = extract_date_evidence(m.group("when"))
        trip_name = _capitalize(f"{place} trip") if sentence.names_trip else None
        return _build(country, evidence, trip_name)
    return None


def _from_fragment(fragment: str) -> TripSuggestion | None:
    found = _from_sentence(fragment)
    if found is not None:
        return found

    country = find_country_in_text(fragment)
    if country is None:
        return None
    return _build(country, extract_date_evidence(fragment), extract_trip_name(fragment))


def parse_pasted_text(text: str) -> list[TripSuggestion]:
    """Trip suggestions from pasted free text (OOO replies, notes, lists).

    Every paragraph or list item is parsed independently; within one call only
    the first suggestion per (country, start date or year) is kept.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    fragments = split_fragments(text)
    seen: set[tuple[str | None, object]] = set()
    out: list[TripSuggestion] = []
    for fragment in fragments:
        suggestion = _from_fragment(fragment)
        if suggestion is None:
            continue
        key = (
            suggestion.country_code,
            suggestion.visit_date or suggestion.approximate_year or "no-date",
        )
        if key in seen:
            continue
        seen.add(key)
        out.append(suggestion)

    log_event(
        logger,
        "suggestions.paste.parsed",
        level=logging.DEBUG,
        fragments=len(fragments),
        suggestions=len(out),
    )
    return out
