from __future__ import annotations

import enum
import re
import time
from dataclasses import dataclass
from datetime import date
from html import unescape
from io import BytesIO

from pypdf import PdfReader

from family_trips.core.airports import (
    airport_country,
    extract_airport_codes,
    get_airport,
    is_same_country,
)
from family_trips.core.countries import Country, country_by_name, get_country, name_patterns
from family_trips.core.logging import get_logger, log_event, monotonic_ms
from family_trips.modules.documents.ai import document_ai_available, extract_trips_with_ai
from family_trips.modules.suggestions.dates import MONTH_PATTERN, month_number
from family_trips.modules.suggestions.locate import find_country_in_text
from family_trips.modules.suggestions.models import SourceType, TripSuggestion, new_suggestion_id

logger = get_logger(__name__)


class UnsupportedDocumentError(ValueError):
    pass


class TravelSource(str, enum.Enum):
    FLIGHT = "flight"
    HOTEL = "hotel"
    COUNTRY = "country"


class ParseConfidence(str, enum.Enum):
    HIGH = "high"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class ParsedTravelData:
    country_name: str
    country_code: str | None
    city: str
    start_date: date | None
    end_date: date | None
    trip_name: str
    source: TravelSource
    is_domestic: bool = False
    missing_year: bool = False


@dataclass(frozen=True)
class DocumentParseResult:
    trip: ParsedTravelData | None
    confidence: ParseConfidence
    method: str
    is_home_country: bool = False
    ai_attempted: bool = False

    @property
    def suggestion(self) -> TripSuggestion | None:
        """The parsed trip as a suggestion; dates with a guessed year are left out."""
        if self.trip is None:
            return None
        trip = self.trip
        dated = not trip.missing_year
        return TripSuggestion(
            id=new_suggestion_id("doc"),
            country_name=trip.country_name,
            country_code=trip.country_code,
            visit_date=trip.start_date if dated else None,
            end_date=(trip.end_date or trip.start_date) if dated else None,
            trip_name=trip.trip_name,
            source_type=SourceType.PASTED_TEXT,
            source_label=trip.trip_name,
        )


# --- Text extraction -------------------------------------------------------


def extract_document_text(*, filename: str, content_type: str | None, body: bytes) -> str:
    kind = _detect_file_kind(filename=filename, content_type=content_type, body=body)
    if kind == "pdf":
        try:
            pages = _extract_pdf_pages(body)
        except Exception as e:
            raise UnsupportedDocumentError(f"Could not read PDF: {filename}") from e
        text = "\n".join(pages)
    elif kind == "text":
        text = _decode_text_bytes(body=body, filename=filename, content_type=content_type)
    elif kind == "bad_pdf_upload":
        raise UnsupportedDocumentError(f"File is not a valid PDF: {filename}")
    elif kind == "image":
        raise UnsupportedDocumentError("Images are not supported; upload a PDF or text file")
    else:
        raise UnsupportedDocumentError(f"Unsupported file type: {filename}")

    log_event(logger, "documents.text.extracted", filename=filename, kind=kind, chars=len(text))
    return text


def _decode_text_bytes(*, body: bytes, filename: str, content_type: str | None) -> str:
    ctype = (content_type or "").lower()
    is_html = ctype.startswith("text/html") or filename.lower().endswith((".html", ".htm"))
    if body.startswith(b"\xef\xbb\xbf"):
        body = body[3:]
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        text = body.decode("latin-1", errors="replace")
    if is_html or _looks_like_html(text):
        text = _html_to_text(text)
    return text


def _looks_like_html(text: str) -> bool:
    t = (text or "").lstrip().lower()
    if not t:
        return False
    if t.startswith("<!doctype html") or t.startswith("<html"):
        return True
    head = t[:2000]
    return bool(re.search(r"<(html|body|div|p|br|table|tr|td|span)(\s|>)", head, re.I))


def _detect_file_kind(*, filename: str, content_type: str | None, body: bytes) -> str:
    if _looks_like_pdf_bytes(body):
        return "pdf"
    if _looks_like_image_bytes(body):
        return "image"
    if _looks_like_text_bytes(body):
        return "text"

    # Never hand PdfReader bytes that are not a PDF.
    if filename.lower().endswith(".pdf") or (content_type or "").lower().endswith("/pdf"):
        return "bad_pdf_upload"
    return "unknown"


def _looks_like_pdf_bytes(body: bytes) -> bool:
    if not body:
        return False
    b = body.lstrip()
    if b.startswith(b"\xef\xbb\xbf"):
        b = b[3:].lstrip()
    return b.startswith(b"%PDF")


def _looks_like_image_bytes(body: bytes) -> bool:
    if not body:
        return False
    b = body.lstrip()
    return (
        b.startswith(b"\x89PNG\r\n\x1a\n")
        or b.startswith(b"\xff\xd8\xff")
        or b.startswith((b"GIF87a", b"GIF89a"))
        or (len(b) >= 12 and b.startswith(b"RIFF") and b[8:12] == b"WEBP")
    )


def _looks_like_text_bytes(body: bytes) -> bool:
    if not body:
        return False
    sample = body[:4096]
    if b"\x00" in sample:
        return False
    stripped = sample.lstrip()
    if stripped.startswith(b"\xef\xbb\xbf"):
        stripped = stripped[3:]
    try:
        stripped.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        return False

    nontext = 0
    for ch in stripped:
        if ch in {9, 10, 13} or 32 <= ch <= 126 or ch >= 128:
            continue
        nontext += 1
    return (nontext / max(1, len(stripped))) <= 0.02


def _html_to_text(html: str) -> str:
    html = re.sub(r"(?is)<(script|style).*?>.*?</\1>", "", html)
    html = re.sub(r"(?i)<br\s*/?>", "\n", html)
    html = re.sub(r"(?i)</p\s*>", "\n\n", html)
    html = re.sub(r"(?i)</(div|tr|li|h[1-6])\s*>", "\n", html)
    html = re.sub(r"(?s)<[^>]+>", "", html)
    html = unescape(html)
    lines = [re.sub(r"\s+", " ", ln).strip() for ln in html.splitlines()]
    return "\n".join([ln for ln in lines if ln])


def _extract_pdf_pages(body: bytes) -> list[str]:
    reader = PdfReader(BytesIO(body))
    pages: list[str] = []
    for page in reader.pages:
        text = (page.extract_text() or "").replace("\u202f", " ").replace("\xa0", " ")
        pages.append(text)
    return pages


# --- Local parsing ---------------------------------------------------------

_WEEKDAY = r"(?:(?:mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?,?\s*)?"
_MONTH_DAY = rf"{MONTH_PATTERN}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s+\d{{4}})?"

_ARRIVAL_RE = re.compile(rf"\barrival[:\s]+{_WEEKDAY}({_MONTH_DAY})", re.I)
_DEPARTURE_RE = re.compile(rf"\bdeparture[:\s]+{_WEEKDAY}({_MONTH_DAY})", re.I)
_CHECK_IN_RE = re.compile(rf"\bcheck\s*-?\s*in[:\s]+{_WEEKDAY}({_MONTH_DAY}|[\d/]+)", re.I)
_CHECK_OUT_RE = re.compile(rf"\bcheck\s*-?\s*out[:\s]+{_WEEKDAY}({_MONTH_DAY}|[\d/]+)", re.I)
_SAME_MONTH_RANGE_RE = re.compile(
    rf"\b({MONTH_PATTERN})\.?\s+(\d{{1,2}})\s*[–-]\s*(\d{{1,2}})\b(?:,?\s+(\d{{4}}))?", re.I
)
_MONTH_DAY_RE = re.compile(
    rf"\b({MONTH_PATTERN})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?\b(?:,?\s*(\d{{4}}))?", re.I
)
_SLASH_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_ADDRESS_RE = re.compile(r"\baddress[:\s]+(.+)", re.I)
_PLACE_LABEL_RE = re.compile(
    r"^(confirmation|booking|reservation|check|address|phone|duration)", re.I
)


@dataclass(frozen=True)
class _DocumentDates:
    start: date | None = None
    end: date | None = None
    missing_year: bool = False


def _today() -> date:
    return date.today()


class _DateReader:
    """Builds dates from month/day fragments, noting when a year had to be assumed."""

    def __init__(self) -> None:
        self.missing_year = False

    def build(self, year: str | None, month: str, day: str) -> date | None:
        month_no = month_number(month)
        if month_no is None:
            return None
        if not year:
            self.missing_year = True
        try:
            return date(int(year) if year else _today().year, month_no, int(day))
        except ValueError:
            return None

    def parse(self, fragment: str) -> date | None:
        m = _MONTH_DAY_RE.search(fragment)
        if m:
            return self.build(m.group(3), m.group(1), m.group(2))
        m = _SLASH_DATE_RE.search(fragment)
        if m:
            try:
                return date(int(m.group(3)), int(m.group(1)), int(m.group(2)))
            except ValueError:
                return None
        return None

    def result(self, start: date | None, end: date | None) -> _DocumentDates:
        return _DocumentDates(start=start, end=end, missing_year=self.missing_year)


def extract_document_dates(text: str) -> _DocumentDates:
    reader = _DateReader()

    arrival = _ARRIVAL_RE.search(text)
    departure = _DEPARTURE_RE.search(text)
    if arrival or departure:
        return reader.result(
            reader.parse(arrival.group(1)) if arrival else None,
            reader.parse(departure.group(1)) if departure else None,
        )

    check_in = _CHECK_IN_RE.search(text)
    check_out = _CHECK_OUT_RE.search(text)
    if check_in or check_out:
        return reader.result(
            reader.parse(check_in.group(1)) if check_in else None,
            reader.parse(check_out.group(1)) if check_out else None,
        )

    m = _SAME_MONTH_RANGE_RE.search(text)
    if m:
        start = reader.build(m.group(4), m.group(1), m.group(2))
        end = reader.build(m.group(4), m.group(1), m.group(3))
        if start and end:
            return reader.result(start, end)

    found: list[date] = []
    for m in _MONTH_DAY_RE.finditer(text):
        d = reader.build(m.group(3), m.group(1), m.group(2))
        if d is not None:
            found.append(d)
    if len(found) >= 2:
        return reader.result(found[0], found[-1])
    if found:
        return reader.result(found[0], None)
    return _DocumentDates()


def _matches_home(country_name: str, country_code: str | None, home_country: str | None) -> bool:
    if not home_country or not home_country.strip():
        return False
    home = home_country.strip().lower()
    return home == country_name.lower() or (country_code or "").lower() == home


def _find_country_in_document(text: str) -> tuple[Country, str] | None:
    m = _ADDRESS_RE.search(text)
    if m:
        parts = [p.strip() for p in m.group(1).split(",")]
        for i in range(len(parts) - 1, -1, -1):
            part = parts[i].lower()
            country = country_by_name(part)
            if country is None:
                country = next((c for c, pattern in name_patterns() if pattern.search(part)), None)
            if country is not None:
                return country, parts[i - 1] if i > 0 else ""

    country = find_country_in_text(text)
    if country is None:
        return None
    city_m = re.search(
        rf"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?),?\s*{re.escape(country.name)}", text, re.I
    )
    city = city_m.group(1) if city_m else ""
    if city.lower() == country.name.lower():
        city = ""
    return country, city


def _extract_place_name(text: str) -> str:
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return ""
    first = lines[0]
    if len(first) < 50 and not _PLACE_LABEL_RE.match(first):
        return first
    return ""


def _parse_flight(text: str, home_country: str | None) -> ParsedTravelData | None:
    codes = extract_airport_codes(text)
    if len(codes) < 2:
        return None

    departure, arrival = codes[0], codes[-1]
    if home_country:
        international = None
        for code in codes:
            country = airport_country(code)
            if country and not _matches_home(country.name, country.code, home_country):
                international = code
                break
        if international:
            arrival = international
            departure = codes[1] if codes[0] == international else codes[0]

    if departure == arrival:
        return None
    airport = get_airport(arrival)
    country = airport_country(arrival)
    if airport is None or country is None:
        return None

    dates = extract_document_dates(text)
    return ParsedTravelData(
        country_name=country.name,
        country_code=country.code,
        city=airport.city,
        start_date=dates.start,
        end_date=dates.end,
        trip_name=f"Trip to {airport.city}",
        source=TravelSource.FLIGHT,
        is_domestic=is_same_country(departure, arrival),
        missing_year=dates.missing_year,
    )


def parse_document_locally(text: str, home_country: str | None = None) -> ParsedTravelData | None:
    """Airport route first, then a country named in the text (address lines preferred)."""
    if not isinstance(text, str) or not text.strip():
        return None

    flight = _parse_flight(text, home_country)
    if flight is not None:
        return flight

    found = _find_country_in_document(text)
    if found is None:
        return None
    country, city = found
    dates = extract_document_dates(text)
    place = _extract_place_name(text)
    return ParsedTravelData(
        country_name=country.name,
        country_code=country.code,
        city=city,
        start_date=dates.start,
        end_date=dates.end,
        trip_name=f"Stay at {place}" if place else f"Trip to {city or country.name}",
        source=TravelSource.HOTEL,
        missing_year=dates.missing_year,
    )


def grade_confidence(data: ParsedTravelData | None, text: str) -> ParseConfidence:
    if data is None:
        return ParseConfidence.NONE
    if data.source == TravelSource.FLIGHT:
        # International itineraries have stopovers and overnight legs.
        return ParseConfidence.HIGH if data.is_domestic else ParseConfidence.LOW
    if _ADDRESS_RE.search(text):
        return ParseConfidence.HIGH
    if re.search(r"\bcheck\s*-?\s*in\b", text, re.I) and data.start_date:
        return ParseConfidence.HIGH
    return ParseConfidence.LOW


def _from_ai_trip(trip: dict, home_country: str | None) -> ParsedTravelData:
    name = trip["destination_country"]
    country = country_by_name(name) or find_country_in_text(name)
    if country is None and len(name) == 2:
        country = get_country(name)
    country_name = country.name if country else name
    city = trip.get("destination_city") or ""
    return ParsedTravelData(
        country_name=country_name,
        country_code=country.code if country else None,
        city=city,
        start_date=trip.get("start_date"),
        end_date=trip.get("end_date"),
        trip_name=trip.get("trip_name") or f"Trip to {city or country_name}",
        source=TravelSource.FLIGHT if trip.get("source") == "flight" else TravelSource.HOTEL,
        is_domestic=_matches_home(country_name, country.code if country else None, home_country),
    )


def _result(
    trip: ParsedTravelData | None,
    confidence: ParseConfidence,
    *,
    method: str,
    home_country: str | None,
    ai_attempted: bool,
) -> DocumentParseResult:
    is_home = trip is not None and _matches_home(trip.country_name, trip.country_code, home_country)
    return DocumentParseResult(
        trip=trip,
        confidence=confidence,
        method=method,
        is_home_country=is_home,
        ai_attempted=ai_attempted,
    )


def parse_travel_document(text: str, home_country: str | None = None) -> DocumentParseResult:
    """Parse a boarding pass, hotel confirmation or itinerary.

    The local parse is used directly when it grades high. Otherwise the AI
    extraction is tried when configured, and the local parse is the fallback.
    """
    start = time.monotonic()
    local = parse_document_locally(text, home_country)
    confidence = grade_confidence(local, text or "")

    if confidence == ParseConfidence.HIGH:
        log_event(
            logger,
            "documents.parse.local",
            country_code=local.country_code if local else None,
            source=local.source.value if local else None,
            duration_ms=monotonic_ms(start),
        )
        return _result(
            local, confidence, method="local", home_country=home_country, ai_attempted=False
        )

    ai_attempted = False
    if document_ai_available() and text and text.strip():
        ai_attempted = True
        trips = extract_trips_with_ai(text, home_country=home_country)
        if trips:
            trip = _from_ai_trip(trips[0], home_country)
            log_event(
                logger,
                "documents.parse.ai",
                country_code=trip.country_code,
                trips=len(trips),
                local_confidence=confidence.value,
                duration_ms=monotonic_ms(start),
            )
            return _result(
                trip, confidence, method="ai", home_country=home_country, ai_attempted=True
            )

    method = "local" if local is not None else "none"
    log_event(
        logger,
        "documents.parse.fallback" if local is not None else "documents.parse.empty",
        local_confidence=confidence.value,
        ai_attempted=ai_attempted,
        duration_ms=monotonic_ms(start),
    )
    return _result(
        local, confidence, method=method, home_country=home_country, ai_attempted=ai_attempted
    )
