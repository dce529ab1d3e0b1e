from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

import pycountry


@dataclass(frozen=True)
class Country:
    code: str
    name: str


# ISO names that read poorly in a travel log ("Korea, Republic of") or that
# changed between iso-codes releases.
_DISPLAY_NAMES: dict[str, str] = {
    "BN": "Brunei",
    "BO": "Bolivia",
    "CD": "DR Congo",
    "CG": "Congo",
    "FM": "Micronesia",
    "GB": "United Kingdom",
    "IR": "Iran",
    "KP": "North Korea",
    "KR": "South Korea",
    "LA": "Laos",
    "MD": "Moldova",
    "NL": "Netherlands",
    "PS": "Palestine",
    "RU": "Russia",
    "SY": "Syria",
    "TR": "Turkey",
    "TW": "Taiwan",
    "TZ": "Tanzania",
    "US": "United States",
    "VA": "Vatican City",
    "VE": "Venezuela",
    "VN": "Vietnam",
}

# Evaluated in order; the first alias found in the text wins.
COUNTRY_ALIASES: dict[str, tuple[str, ...]] = {
    "GB": (
        "uk",
        "u.k.",
        "britain",
        "great britain",
        "united kingdom",
        "england",
        "scotland",
        "wales",
        "northern ireland",
        "london",
        "edinburgh",
        "manchester",
        "liverpool",
        "glasgow",
    ),
    "US": (
        "usa",
        "u.s.a.",
        "u.s.",
        "united states of america",
        "united states",
        "new york",
        "nyc",
        "new jersey",
        "new mexico",
        "los angeles",
        "san francisco",
        "las vegas",
        "chicago",
        "boston",
        "seattle",
        "miami",
        "orlando",
        "hawaii",
        "honolulu",
        "california",
        "florida",
        "alaska",
        "washington dc",
        "washington d.c.",
        "america",
    ),
    "AE": ("uae", "u.a.e.", "emirates", "dubai", "abu dhabi"),
    "KP": ("north korea", "pyongyang"),
    "KR": ("south korea", "korea", "seoul", "busan"),
    "CZ": ("czechia", "czech republic", "prague"),
    "NL": ("holland", "the netherlands", "amsterdam", "rotterdam"),
    "CI": ("ivory coast", "cote d'ivoire"),
    "CD": ("democratic republic of the congo", "dr congo", "drc"),
    "BA": ("bosnia", "sarajevo"),
    "RU": ("russia", "moscow", "st petersburg"),
    "VN": ("vietnam", "viet nam", "hanoi", "ho chi minh city", "saigon"),
    "LA": ("laos",),
    "IR": ("iran", "persia", "tehran"),
    "SY": ("syria",),
    "TW": ("taiwan", "taipei"),
    "PS": ("palestine",),
    "VA": ("vatican", "vatican city"),
    "HK": ("hong kong",),
    "MO": ("macau", "macao"),
    "MM": ("burma", "myanmar", "yangon"),
    "SZ": ("swaziland", "eswatini"),
    "MK": ("macedonia", "north macedonia", "skopje"),
    "TR": ("turkey", "turkiye", "türkiye", "istanbul", "cappadocia"),
    "CV": ("cape verde", "cabo verde"),
    "TL": ("east timor", "timor-leste"),
    "IS": ("reykjavik", "reykjavík"),
    "FR": ("paris", "lyon", "marseille", "bordeaux", "provence", "normandy", "french riviera"),
    "DE": ("berlin", "munich", "frankfurt", "hamburg", "cologne", "bavaria"),
    "IT": ("rome", "milan", "venice", "florence", "naples", "tuscany", "sicily", "amalfi"),
    "ES": ("madrid", "barcelona", "seville", "mallorca", "majorca", "ibiza", "canary islands"),
    "PT": ("lisbon", "porto", "madeira", "algarve", "azores"),
    "GR": ("athens", "santorini", "mykonos", "crete"),
    "IE": ("dublin", "galway"),
    "AT": ("vienna", "salzburg"),
    "CH": ("zurich", "geneva", "zermatt"),
    "BE": ("brussels", "bruges", "antwerp"),
    "DK": ("copenhagen",),
    "SE": ("stockholm",),
    "NO": ("oslo", "bergen"),
    "FI": ("helsinki", "lapland"),
    "HU": ("budapest",),
    "PL": ("warsaw", "krakow"),
    "HR": ("dubrovnik", "zagreb"),
    "JP": ("tokyo", "kyoto", "osaka", "hokkaido", "okinawa"),
    "CN": ("beijing", "shanghai"),
    "TH": ("bangkok", "phuket", "chiang mai"),
    "ID": ("bali", "jakarta"),
    "SG": ("singapore",),
    "MY": ("kuala lumpur",),
    "PH": ("manila",),
    "IN": ("delhi", "new delhi", "mumbai", "goa"),
    "MA": ("marrakech", "marrakesh", "casablanca"),
    "EG": ("cairo",),
    "IL": ("jerusalem", "tel aviv"),
    "ZA": ("cape town", "johannesburg"),
    "AU": ("sydney", "melbourne", "brisbane"),
    "NZ": ("auckland", "queenstown"),
    "CA": ("toronto", "vancouver", "montreal", "banff"),
    "MX": ("cancun", "mexico city", "tulum", "cabo"),
    "BR": ("rio de janeiro", "sao paulo"),
    "AR": ("buenos aires", "patagonia"),
    "PE": ("lima", "machu picchu", "cusco"),
    "CR": ("san jose costa rica",),
    "PR": ("san juan",),
}

_WORD_EDGE_L = r"(?<![a-z0-9])"
_WORD_EDGE_R = r"(?![a-z0-9])"


def whole_word_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(_WORD_EDGE_L + re.escape(phrase.lower()) + _WORD_EDGE_R)


@lru_cache(maxsize=1)
def all_countries() -> tuple[Country, ...]:
    out: list[Country] = []
    for c in pycountry.countries:
        code = c.alpha_2
        name = _DISPLAY_NAMES.get(code) or getattr(c, "common_name", None) or c.name
        out.append(Country(code=code, name=name))
    return tuple(sorted(out, key=lambda c: c.name))


@lru_cache(maxsize=1)
def _by_code() -> dict[str, Country]:
    return {c.code: c for c in all_countries()}


@lru_cache(maxsize=1)
def alias_patterns() -> tuple[tuple[str, re.Pattern[str]], ...]:
    return tuple(
        (code, whole_word_pattern(alias))
        for code, aliases in COUNTRY_ALIASES.items()
        for alias in aliases
    )


@lru_cache(maxsize=1)
def name_patterns() -> tuple[tuple[Country, re.Pattern[str]], ...]:
    # Longest names first so "Papua New Guinea" is not claimed by "Guinea".
    ordered = sorted(all_countries(), key=lambda c: len(c.name), reverse=True)
    return tuple((c, whole_word_pattern(c.name)) for c in ordered)


def get_country(code: str | None) -> Country | None:
    if not code:
        return None
    return _by_code().get(code.strip().upper())


def country_by_name(name: str | None) -> Country | None:
    if not name or not name.strip():
        return None
    normalized = name.strip().lower()
    for c in all_countries():
        if c.name.lower() == normalized:
            return c
    for code, aliases in COUNTRY_ALIASES.items():
        if normalized in aliases:
            return get_country(code)
    return None


def search_countries(query: str) -> list[Country]:
    """Substring search over display names and aliases, in catalogue order."""
    q = (query or "").strip().lower()
    if not q:
        return []
    out: list[Country] = []
    for c in all_countries():
        if q in c.name.lower():
            out.append(c)
            continue
        if any(q in alias for alias in COUNTRY_ALIASES.get(c.code, ())):
            out.append(c)
    return out
