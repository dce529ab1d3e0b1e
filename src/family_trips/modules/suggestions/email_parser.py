from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from family_trips.core.airports import airport_country
from family_trips.core.countries import Country
from family_trips.core.logging import get_logger, log_event
from family_trips.modules.suggestions.dates import find_first_date
from family_trips.modules.suggestions.locate import find_country_in_text
from family_trips.modules.suggestions.models import SourceType, TripSuggestion, new_suggestion_id

logger = get_logger(__name__)

# Airport codes and flight numbers stay case-sensitive inside otherwise
# case-insensitive patterns.
_CODE = r"(?-i:([A-Z]{3}))"
_ARROW = r"\s*(?:→|->|–|—|-|\bto\b)\s*"
_PLACE_WORDS = r"([a-zà-ÿ][a-zà-ÿ .'-]*?)"
_FLAGS = re.I | re.S | re.M

_CHECK_IN_RE = re.compile(r"\bcheck.?in\b\s*:?\s*([^\n]+)", re.I)
_CHECK_OUT_RE = re.compile(r"\bcheck.?out\b\s*:?\s*([^\n]+)", re.I)


@dataclass(frozen=True)
class EmailMatch:
    country: Country
    source_label: str
    visit_date: date | None
    end_date: date | None


@dataclass(frozen=True)
class EmailPattern:
    name: str
    pattern: re.Pattern[str]
    confidence: float
    extract: Callable[[re.Match[str], str], EmailMatch | None]


def _dated(country: Country | None, label: str, text: str) -> EmailMatch | None:
    if country is None:
        return None
    when = find_first_date(text)
    return EmailMatch(country=country, source_label=label, visit_date=when, end_date=when)


def _place_label(line: str) -> str:
    # "Hotel Avenida in Lisbon, Portugal from ..." -> "Lisbon"
    head = re.split(r"\s+(?:from|on|for)\s+|,", line.strip(), maxsplit=1)[0]
    return re.split(r"\s+in\s+", head)[-1].strip(" .")


def _flight_route(m: re.Match[str], text: str) -> EmailMatch | None:
    destination = m.group(2)
    return _dated(airport_country(destination), f"Flight to {destination}", text)


def _airline_confirmation(m: re.Match[str], text: str) -> EmailMatch | None:
    label = f"Flight confirmation {m.group(1)}"
    country = airport_country(m.group(3)) if m.group(3) else None
    if country is None:
        country = find_country_in_text(m.group(2))
    return _dated(country, label, text)


def _hotel_booking(m: re.Match[str], text: str) -> EmailMatch | None:
    line = m.group(1)
    country = find_country_in_text(line)
    if country is None:
        return None

    check_in = _CHECK_IN_RE.search(text)
    check_out = _CHECK_OUT_RE.search(text)
    visit = (find_first_date(check_in.group(1)) if check_in else None) or find_first_date(text)
    end = (find_first_date(check_out.group(1)) if check_out else None) or visit
    if visit and end and end < visit:
        end = visit
    return EmailMatch(
        country=country,
        source_label=f"Hotel in {_place_label(line)}",
        visit_date=visit,
        end_date=end,
    )


def _location_with_label(label: str) -> Callable[[re.Match[str], str], EmailMatch | None]:
    def extract(m: re.Match[str], text: str) -> EmailMatch | None:
        return _dated(find_country_in_text(m.group(1)), label, text)

    return extract


def _boarding_pass(m: re.Match[str], text: str) -> EmailMatch | None:
    return _dated(airport_country(m.group(3)), f"Boarding pass {m.group(1)}", text)


# Evaluated in order; when two patterns find the same country and date the
# earlier one is kept.
EMAIL_PATTERNS: tuple[EmailPattern, ...] = (
    EmailPattern(
        name="flight_route",
        pattern=re.compile(
            rf"\b(?:flight|booking)\s+(?:confirmation|itinerary)\b.*?\b{_CODE}{_ARROW}{_CODE}\b",
            _FLAGS,
        ),
        confidence=0.9,
        extract=_flight_route,
    ),
    EmailPattern(
        name="airline_confirmation",
        pattern=re.compile(
            r"\bconfirmation\s*(?:number|code|#)?\s*:?\s*(?-i:([A-Z0-9]{6}))\b.*?"
            rf"\b(?:to|arriving(?:\s+in)?|destination\s*:?)\s+{_PLACE_WORDS}"
            r"\s*(?:\((?-i:([A-Z]{3}))\)|[\n,.!]|$)",
            _FLAGS,
        ),
        confidence=0.85,
        extract=_airline_confirmation,
    ),
    EmailPattern(
        name="hotel_booking",
        pattern=re.compile(
            r"\b(?:hotel|accommodation|stay)\s+(?:confirmation|booking|reservation)\b.*?"
            r"\b(?:in|at)\s+([^\n]+)",
            _FLAGS,
        ),
        confidence=0.8,
        extract=_hotel_booking,
    ),
    EmailPattern(
        name="booking_com",
        pattern=re.compile(
            r"\bbooking\.com\b.*?\b(?:your\s+)?(?:reservation|booking)\s+(?:in|at|for)\s+([^\n]+)",
            _FLAGS,
        ),
        confidence=0.85,
        extract=_location_with_label("Booking.com reservation"),
    ),
    EmailPattern(
        name="airbnb",
        pattern=re.compile(
            r"\bairbnb\b.*?\b(?:reservation|booking|trip)\s+(?:in|to|at)\s+([^\n]+)", _FLAGS
        ),
        confidence=0.85,
        extract=_location_with_label("Airbnb reservation"),
    ),
    EmailPattern(
        name="expedia",
        pattern=re.compile(
            r"\bexpedia\b.*?\b(?:trip|booking|itinerary)\s+(?:to|in|for)\s+([^\n]+)", _FLAGS
        ),
        confidence=0.85,
        extract=_location_with_label("Expedia booking"),
    ),
    EmailPattern(
        name="visa_document",
        pattern=re.compile(
            r"\b(?:visa|travel\s+document|entry\s+permit)\b.*?\b(?:for|to)\s+"
            rf"{_PLACE_WORDS}(?:\s+valid\b|\s+from\b|\s+issued\b|[\n,.]|$)",
            _FLAGS,
        ),
        confidence=0.7,
        extract=_location_with_label("Visa/travel document"),
    ),
    EmailPattern(
        name="travel_mention",
        pattern=re.compile(
            r"\b(?:traveling|travelling|flying|going|headed|heading)\s+to\s+"
            rf"{_PLACE_WORDS}(?:\s+on\b|\s+from\b|\s+for\b|[\n,!.]|$)",
            _FLAGS,
        ),
        confidence=0.6,
        extract=_location_with_label("Travel mention"),
    ),
    EmailPattern(
        name="boarding_pass",
        pattern=re.compile(
            r"\bboarding\s+pass\b.*?(?-i:\b([A-Z][A-Z0-9]\d{3,4})\b).*?"
            rf"\b{_CODE}{_ARROW}{_CODE}\b",
            _FLAGS,
        ),
        confidence=0.95,
        extract=_boarding_pass,
    ),
)


def parse_email_content(text: str) -> list[TripSuggestion]:
    """Trip suggestions from a travel email body.

    Each pattern contributes at most one suggestion, scored with the
    pattern's confidence. Airport-based patterns resolve the destination
    through the IATA table; the rest resolve a place phrase. A missing date
    leaves every date field empty.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    seen: set[str] = set()
    out: list[TripSuggestion] = []
    matched: list[str] = []
    for email_pattern in EMAIL_PATTERNS:
        m = email_pattern.pattern.search(text)
        if not m:
            continue
        found = email_pattern.extract(m, text)
        if found is None:
            continue
        matched.append(email_pattern.name)

        visit = found.visit_date.isoformat() if found.visit_date else "unknown"
        key = f"{found.country.code}|{visit}"
        if key in seen:
            continue
        seen.add(key)
        out.append(
            TripSuggestion(
                id=new_suggestion_id("email"),
                country_name=found.country.name,
                country_code=found.country.code,
                visit_date=found.visit_date,
                end_date=found.end_date,
                source_type=SourceType.PASTED_TEXT,
                source_label=found.source_label or f"From {email_pattern.name}",
                confidence=email_pattern.confidence,
            )
        )

    log_event(
        logger,
        "suggestions.email.parsed",
        level=logging.DEBUG,
        patterns=matched,
        suggestions=len(out),
    )
    return out
