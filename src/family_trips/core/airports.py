from __future__ import annotations

import re
from dataclasses import dataclass

from family_trips.core.countries import Country, get_country, whole_word_pattern


@dataclass(frozen=True)
class Airport:
    code: str
    city: str
    country_code: str


# Major airports only; documents mentioning anything else go through country
# name resolution or the AI fallback instead.
_AIRPORTS: dict[str, tuple[str, str]] = {
    # United States
    "ATL": ("Atlanta", "US"),
    "LAX": ("Los Angeles", "US"),
    "ORD": ("Chicago", "US"),
    "MDW": ("Chicago", "US"),
    "DFW": ("Dallas/Fort Worth", "US"),
    "DAL": ("Dallas", "US"),
    "DEN": ("Denver", "US"),
    "JFK": ("New York", "US"),
    "LGA": ("New York", "US"),
    "EWR": ("Newark", "US"),
    "SFO": ("San Francisco", "US"),
    "OAK": ("Oakland", "US"),
    "SJC": ("San Jose", "US"),
    "SEA": ("Seattle", "US"),
    "LAS": ("Las Vegas", "US"),
    "MCO": ("Orlando", "US"),
    "MIA": ("Miami", "US"),
    "FLL": ("Fort Lauderdale", "US"),
    "TPA": ("Tampa", "US"),
    "PHX": ("Phoenix", "US"),
    "IAH": ("Houston", "US"),
    "AUS": ("Austin", "US"),
    "BOS": ("Boston", "US"),
    "MSP": ("Minneapolis", "US"),
    "DTW": ("Detroit", "US"),
    "PHL": ("Philadelphia", "US"),
    "BWI": ("Baltimore", "US"),
    "DCA": ("Washington D.C.", "US"),
    "IAD": ("Washington D.C.", "US"),
    "SLC": ("Salt Lake City", "US"),
    "SAN": ("San Diego", "US"),
    "PDX": ("Portland", "US"),
    "HNL": ("Honolulu", "US"),
    "STL": ("St. Louis", "US"),
    "RDU": ("Raleigh", "US"),
    "SMF": ("Sacramento", "US"),
    # Canada / Mexico
    "YYZ": ("Toronto", "CA"),
    "YVR": ("Vancouver", "CA"),
    "YUL": ("Montreal", "CA"),
    "YYC": ("Calgary", "CA"),
    "YEG": ("Edmonton", "CA"),
    "YOW": ("Ottawa", "CA"),
    "MEX": ("Mexico City", "MX"),
    "CUN": ("Cancun", "MX"),
    "GDL": ("Guadalajara", "MX"),
    "SJD": ("Los Cabos", "MX"),
    "PVR": ("Puerto Vallarta", "MX"),
    # Europe
    "LHR": ("London", "GB"),
    "LGW": ("London", "GB"),
    "STN": ("London", "GB"),
    "MAN": ("Manchester", "GB"),
    "EDI": ("Edinburgh", "GB"),
    "BHX": ("Birmingham", "GB"),
    "GLA": ("Glasgow", "GB"),
    "CDG": ("Paris", "FR"),
    "ORY": ("Paris", "FR"),
    "NCE": ("Nice", "FR"),
    "LYS": ("Lyon", "FR"),
    "MRS": ("Marseille", "FR"),
    "FRA": ("Frankfurt", "DE"),
    "MUC": ("Munich", "DE"),
    "DUS": ("Dusseldorf", "DE"),
    "BER": ("Berlin", "DE"),
    "TXL": ("Berlin", "DE"),
    "HAM": ("Hamburg", "DE"),
    "MAD": ("Madrid", "ES"),
    "BCN": ("Barcelona", "ES"),
    "PMI": ("Palma de Mallorca", "ES"),
    "AGP": ("Malaga", "ES"),
    "IBZ": ("Ibiza", "ES"),
    "FCO": ("Rome", "IT"),
    "MXP": ("Milan", "IT"),
    "VCE": ("Venice", "IT"),
    "NAP": ("Naples", "IT"),
    "FLR": ("Florence", "IT"),
    "AMS": ("Amsterdam", "NL"),
    "BRU": ("Brussels", "BE"),
    "ZRH": ("Zurich", "CH"),
    "GVA": ("Geneva", "CH"),
    "VIE": ("Vienna", "AT"),
    "LIS": ("Lisbon", "PT"),
    "OPO": ("Porto", "PT"),
    "DUB": ("Dublin", "IE"),
    "CPH": ("Copenhagen", "DK"),
    "ARN": ("Stockholm", "SE"),
    "OSL": ("Oslo", "NO"),
    "HEL": ("Helsinki", "FI"),
    "KEF": ("Reykjavik", "IS"),
    "PRG": ("Prague", "CZ"),
    "WAW": ("Warsaw", "PL"),
    "BUD": ("Budapest", "HU"),
    "ATH": ("Athens", "GR"),
    "IST": ("Istanbul", "TR"),
    # Middle East / Africa
    "DXB": ("Dubai", "AE"),
    "AUH": ("Abu Dhabi", "AE"),
    "DOH": ("Doha", "QA"),
    "TLV": ("Tel Aviv", "IL"),
    "CAI": ("Cairo", "EG"),
    "CMN": ("Casablanca", "MA"),
    "JNB": ("Johannesburg", "ZA"),
    "CPT": ("Cape Town", "ZA"),
    "NBO": ("Nairobi", "KE"),
    # Asia
    "HND": ("Tokyo", "JP"),
    "NRT": ("Tokyo", "JP"),
    "KIX": ("Osaka", "JP"),
    "ICN": ("Seoul", "KR"),
    "GMP": ("Seoul", "KR"),
    "PEK": ("Beijing", "CN"),
    "PVG": ("Shanghai", "CN"),
    "CAN": ("Guangzhou", "CN"),
    "HKG": ("Hong Kong", "HK"),
    "TPE": ("Taipei", "TW"),
    "SIN": ("Singapore", "SG"),
    "BKK": ("Bangkok", "TH"),
    "KUL": ("Kuala Lumpur", "MY"),
    "CGK": ("Jakarta", "ID"),
    "DPS": ("Bali", "ID"),
    "MNL": ("Manila", "PH"),
    "SGN": ("Ho Chi Minh City", "VN"),
    "HAN": ("Hanoi", "VN"),
    "DEL": ("New Delhi", "IN"),
    "BOM": ("Mumbai", "IN"),
    # Oceania
    "SYD": ("Sydney", "AU"),
    "MEL": ("Melbourne", "AU"),
    "BNE": ("Brisbane", "AU"),
    "PER": ("Perth", "AU"),
    "AKL": ("Auckland", "NZ"),
    "CHC": ("Christchurch", "NZ"),
    # South America / Caribbean
    "GRU": ("Sao Paulo", "BR"),
    "GIG": ("Rio de Janeiro", "BR"),
    "EZE": ("Buenos Aires", "AR"),
    "SCL": ("Santiago", "CL"),
    "LIM": ("Lima", "PE"),
    "BOG": ("Bogota", "CO"),
    "SJU": ("San Juan", "PR"),
    "MBJ": ("Montego Bay", "JM"),
    "NAS": ("Nassau", "BS"),
    "PUJ": ("Punta Cana", "DO"),
    "AUA": ("Oranjestad", "AW"),
}

AIRPORTS: dict[str, Airport] = {
    code: Airport(code=code, city=city, country_code=cc)
    for code, (city, cc) in _AIRPORTS.items()
}

_AIRPORT_NAME_ALIASES: dict[str, str] = {
    "heathrow": "LHR",
    "gatwick": "LGW",
    "stansted": "STN",
    "charles de gaulle": "CDG",
    "orly": "ORY",
    "schiphol": "AMS",
    "fiumicino": "FCO",
    "barajas": "MAD",
    "el prat": "BCN",
    "keflavik": "KEF",
    "dubai international": "DXB",
    "hamad international": "DOH",
    "ben gurion": "TLV",
    "narita": "NRT",
    "haneda": "HND",
    "changi": "SIN",
    "incheon": "ICN",
    "suvarnabhumi": "BKK",
    "kingsford smith": "SYD",
    "tullamarine": "MEL",
    "pearson": "YYZ",
    "logan": "BOS",
    "o'hare": "ORD",
}

_CODE_RE = re.compile(r"\b([A-Z]{3})\b")


def get_airport(code: str | None) -> Airport | None:
    if not code:
        return None
    return AIRPORTS.get(code.strip().upper())


def airport_country(code: str | None) -> Country | None:
    airport = get_airport(code)
    if not airport:
        return None
    return get_country(airport.country_code)


def find_airport_by_name(name: str) -> Airport | None:
    normalized = (name or "").strip().lower()
    if not normalized:
        return None
    code = _AIRPORT_NAME_ALIASES.get(normalized)
    if code:
        return AIRPORTS[code]
    for alias, code in _AIRPORT_NAME_ALIASES.items():
        if whole_word_pattern(alias).search(normalized):
            return AIRPORTS[code]
    for airport in AIRPORTS.values():
        if whole_word_pattern(airport.city).search(normalized):
            return airport
    return None


def is_same_country(code_a: str, code_b: str) -> bool:
    a = get_airport(code_a)
    b = get_airport(code_b)
    if not a or not b:
        return False
    return a.country_code == b.country_code


def extract_airport_codes(text: str) -> list[str]:
    """Known IATA codes in order of first appearance.

    Only tokens written in capitals count, so ordinary words such as "can" or
    "man" never read as airports. Named airports ("Heathrow", "from: Narita")
    are used when fewer than two codes are present.
    """
    found: list[str] = []
    for m in _CODE_RE.finditer(text or ""):
        code = m.group(1)
        if code in AIRPORTS and code not in found:
            found.append(code)
    if len(found) >= 2:
        return found

    lower = (text or "").lower()
    from_m = re.search(r"\bfrom[:\s]+([a-z' ]+?)(?:\n|\d|$)", lower)
    to_m = re.search(r"\bto[:\s]+([a-z' ]+?)(?:\n|\d|$)", lower)
    if from_m:
        airport = find_airport_by_name(from_m.group(1))
        if airport and airport.code not in found:
            found.insert(0, airport.code)
    if to_m:
        airport = find_airport_by_name(to_m.group(1))
        if airport and airport.code not in found:
            found.append(airport.code)

    if len(found) < 2:
        for alias, code in _AIRPORT_NAME_ALIASES.items():
            if code not in found and whole_word_pattern(alias).search(lower):
                found.append(code)
    return found
