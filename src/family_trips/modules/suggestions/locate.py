from __future__ import annotations

import calendar

from family_trips.core.countries import (
    Country,
    alias_patterns,
    get_country,
    name_patterns,
    search_countries,
)

# Tokens that are substrings of country names ("the" in Netherlands, "our" in
# Luxembourg) and would otherwise hit the per-word search.
_COMMON_WORDS: frozenset[str] = frozenset(
    {
        "all", "also", "and", "are", "back", "been", "but", "can", "day", "days",
        "for", "from", "had", "has", "have", "her", "here", "his", "home", "into",
        "its", "land", "man", "new", "not", "off", "one", "our", "out", "ran",
        "she", "the", "then", "there", "they", "this", "trip", "two", "via", "was",
        "way", "week", "weeks", "were", "will", "with", "you", "your",
    }
)

# Weekday and month names ("mon" is in Montreal, "fri" in Africa).
_CALENDAR_WORDS: frozenset[str] = frozenset(
    name.lower()
    for name in (
        *calendar.day_name,
        *calendar.day_abbr,
        *calendar.month_name,
        *calendar.month_abbr,
        "sept",
        "tues",
        "thur",
        "thurs",
    )
    if name
)

_STRIP_CHARS = ",.;:!?()[]{}\"'"


def find_country_in_text(text: str) -> Country | None:
    """Resolve the country a free-text fragment talks about.

    Aliases (cities, former names, abbreviations) are tried first, then
    canonical country names, both as whole words. As a last resort each
    word of three or more letters goes through the general country search.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    lower = text.lower()

    for code, pattern in alias_patterns():
        if pattern.search(lower):
            country = get_country(code)
            if country:
                return country

    for country, pattern in name_patterns():
        if pattern.search(lower):
            return country

    for word in text.split():
        token = word.strip(_STRIP_CHARS)
        if len(token) < 3 or not token.isalpha():
            continue
        lowered = token.lower()
        if lowered in _COMMON_WORDS or lowered in _CALENDAR_WORDS:
            continue
        found = search_countries(token)
        if found:
            return found[0]
    return None
