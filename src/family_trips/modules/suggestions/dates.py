from __future__ import annotations

import calendar
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from family_trips.modules.suggestions.models import DateEvidence

MONTH_PATTERN = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_MONTH3 = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
_DAY = r"(\d{1,2})(?:st|nd|rd|th)?\b"
_SEP = r"\s*(?:to|through|thru|until|till|-|–|—)\s*"
_YEAR_SEP = r"(?:,\s*|\s+)"

_MONTH_NUMBERS: dict[str, int] = {}
for _i in range(1, 13):
    _MONTH_NUMBERS[calendar.month_name[_i].lower()] = _i
    _MONTH_NUMBERS[calendar.month_abbr[_i].lower()] = _i
_MONTH_NUMBERS["sept"] = 9


def month_number(name: str | None) -> int | None:
    if not name:
        return None
    return _MONTH_NUMBERS.get(name.strip().rstrip(".").lower())


def month_span(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _today() -> date:
    return date.today()


def _expand_year(raw: str) -> int:
    year = int(raw)
    return 2000 + year if len(raw) == 2 else year


def _named(month_name: str, day: str, year: int | str) -> date:
    month = month_number(month_name)
    if month is None:
        raise ValueError(f"unknown month: {month_name!r}")
    return date(int(year), month, int(day))


def _exact(visit: date, end: date | None = None) -> DateEvidence:
    return DateEvidence(visit=visit, end=end or visit)


def _ordered(first: date, second: date) -> DateEvidence:
    return _exact(min(first, second), max(first, second))


def _us_slash_range(m: re.Match[str]) -> DateEvidence:
    visit = date(_expand_year(m.group(3)), int(m.group(1)), int(m.group(2)))
    end = date(_expand_year(m.group(6)), int(m.group(4)), int(m.group(5)))
    return _exact(visit, end)


def _named_full_range(m: re.Match[str]) -> DateEvidence:
    visit = _named(m.group(1), m.group(2), m.group(3))
    end = _named(m.group(4), m.group(5), m.group(6))
    return _exact(visit, end)


def _named_shared_year(m: re.Match[str]) -> DateEvidence:
    year = int(m.group(5))
    visit = _named(m.group(1), m.group(2), year)
    end = _named(m.group(3), m.group(4), year)
    if end.month < visit.month:
        # "Dec 28 to Jan 3, 2014" starts in the previous year.
        visit = visit.replace(year=year - 1)
    return _ordered(visit, end)


def _same_month(m: re.Match[str]) -> DateEvidence:
    visit = _named(m.group(1), m.group(2), m.group(4))
    end = _named(m.group(1), m.group(3), m.group(4))
    return _exact(visit, end)


def _iso_range(m: re.Match[str]) -> DateEvidence:
    visit = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    end = date(int(m.group(4)), int(m.group(5)), int(m.group(6)))
    return _exact(visit, end)


def _day_first_range(m: re.Match[str]) -> DateEvidence:
    visit = date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
    end = date(int(m.group(6)), int(m.group(5)), int(m.group(4)))
    return _exact(visit, end)


def _boarding_compact(m: re.Match[str]) -> DateEvidence:
    raw_year = m.group(3)
    year = _expand_year(raw_year) if raw_year else _today().year
    return _exact(_named(m.group(2), m.group(1), year))


@dataclass(frozen=True)
class _Matcher:
    name: str
    pattern: re.Pattern[str]
    parse: Callable[[re.Match[str]], DateEvidence]


# Highest specificity first. The US slash form outranks the day-first slash
# form, so "3/4/2020 to 3/9/2020" always reads as March; day-first only wins
# when the US reading is not a real date ("25/3/2013").
_RANGE_MATCHERS: tuple[_Matcher, ...] = (
    _Matcher(
        "us_slash_range",
        re.compile(
            rf"(?<!\d)(\d{{1,2}})/(\d{{1,2}})/(\d{{4}}|\d{{2}})(?!\d){_SEP}"
            rf"(\d{{1,2}})/(\d{{1,2}})/(\d{{4}}|\d{{2}})(?!\d)",
            re.I,
        ),
        _us_slash_range,
    ),
    _Matcher(
        "named_full_range",
        re.compile(
            rf"\b({MONTH_PATTERN})\b\.?\s+{_DAY}{_YEAR_SEP}(\d{{4}}){_SEP}"
            rf"({MONTH_PATTERN})\b\.?\s+{_DAY}{_YEAR_SEP}(\d{{4}})\b",
            re.I,
        ),
        _named_full_range,
    ),
    _Matcher(
        "named_shared_year",
        re.compile(
            rf"\b({MONTH_PATTERN})\b\.?\s+{_DAY}{_SEP}"
            rf"({MONTH_PATTERN})\b\.?\s+{_DAY}{_YEAR_SEP}(\d{{4}})\b",
            re.I,
        ),
        _named_shared_year,
    ),
    _Matcher(
        "same_month",
        re.compile(
            rf"\b({MONTH_PATTERN})\b\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?\s*(?:-|–|—|to)\s*"
            rf"(\d{{1,2}})(?:st|nd|rd|th)?\b{_YEAR_SEP}(\d{{4}})\b",
            re.I,
        ),
        _same_month,
    ),
    _Matcher(
        "iso_range",
        re.compile(rf"\b(\d{{4}})-(\d{{2}})-(\d{{2}}){_SEP}(\d{{4}})-(\d{{2}})-(\d{{2}})\b", re.I),
        _iso_range,
    ),
    _Matcher(
        "dotted_range",
        re.compile(
            rf"(?<![\d.])(\d{{1,2}})\.(\d{{1,2}})\.(\d{{4}}){_SEP}"
            rf"(\d{{1,2}})\.(\d{{1,2}})\.(\d{{4}})(?!\d)",
            re.I,
        ),
        _day_first_range,
    ),
    _Matcher(
        "day_first_slash_range",
        re.compile(
            rf"(?<!\d)(\d{{1,2}})/(\d{{1,2}})/(\d{{4}}){_SEP}"
            rf"(\d{{1,2}})/(\d{{1,2}})/(\d{{4}})(?!\d)",
            re.I,
        ),
        _day_first_range,
    ),
    _Matcher(
        "boarding_compact",
        re.compile(rf"(?<!\d)(\d{{1,2}})({_MONTH3})(\d{{4}}|\d{{2}})?(?![a-z\d])", re.I),
        _boarding_compact,
    ),
)

_MONTH_DAY_YEAR_RE = re.compile(rf"\b({MONTH_PATTERN})\b\.?\s+{_DAY}{_YEAR_SEP}(\d{{4}})\b", re.I)
_DAY_MONTH_YEAR_RE = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+({MONTH_PATTERN})\b\.?,?\s+(\d{{4}})\b", re.I
)
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_US_SLASH_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?!\d)")
_MONTH_YEAR_RE = re.compile(rf"\b({MONTH_PATTERN})\b\.?,?\s+(\d{{4}})\b", re.I)
_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")


def _first_valid(matcher: _Matcher, text: str) -> DateEvidence | None:
    for m in matcher.pattern.finditer(text):
        try:
            return matcher.parse(m)
        except ValueError:
            continue
    return None


def _month_day_year_dates(text: str) -> list[date]:
    out: list[date] = []
    for m in _MONTH_DAY_YEAR_RE.finditer(text):
        try:
            out.append(_named(m.group(1), m.group(2), m.group(3)))
        except ValueError:
            continue
    return out


def parse_single_date_or_approx(text: str) -> DateEvidence:
    for m in _MONTH_YEAR_RE.finditer(text or ""):
        month = month_number(m.group(1))
        year = int(m.group(2))
        if month is None or not 1900 <= year <= 2099:
            continue
        first, last = month_span(year, month)
        return DateEvidence(visit=first, end=last, approx_month=month, approx_year=year)

    m = _YEAR_RE.search(text or "")
    if m:
        return DateEvidence(approx_year=int(m.group(1)))
    return DateEvidence()


def extract_date_evidence(text: str) -> DateEvidence:
    """Most specific date evidence in a text fragment.

    Range matchers run in priority order and the first one that yields real
    calendar dates wins. Then "Month D, YYYY" mentions (first and last
    distinct become a range in calendar order, a lone one a single day),
    then "Month YYYY" or a bare year. Never raises; no evidence gives an
    empty result.
    """
    if not isinstance(text, str) or not text.strip():
        return DateEvidence()

    for matcher in _RANGE_MATCHERS:
        found = _first_valid(matcher, text)
        if found is not None:
            return found

    dates = _month_day_year_dates(text)
    if dates:
        first = dates[0]
        distinct = [d for d in dates[1:] if d != first]
        return _ordered(first, distinct[-1] if distinct else first)

    return parse_single_date_or_approx(text)


def find_first_date(text: str) -> date | None:
    """First single date in any supported shape, or None."""
    if not isinstance(text, str) or not text:
        return None

    for m in _MONTH_DAY_YEAR_RE.finditer(text):
        try:
            return _named(m.group(1), m.group(2), m.group(3))
        except ValueError:
            continue
    for m in _DAY_MONTH_YEAR_RE.finditer(text):
        try:
            return _named(m.group(2), m.group(1), m.group(3))
        except ValueError:
            continue
    for m in _ISO_DATE_RE.finditer(text):
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            continue
    for m in _US_SLASH_DATE_RE.finditer(text):
        try:
            return date(_expand_year(m.group(3)), int(m.group(1)), int(m.group(2)))
        except ValueError:
            continue
    boarding = _first_valid(_RANGE_MATCHERS[-1], text)
    return boarding.visit if boarding else None
