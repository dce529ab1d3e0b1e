from __future__ import annotations


def test_city_alias_resolves_country():
    from family_trips.modules.suggestions.locate import find_country_in_text

    country = find_country_in_text("Visiting Paris next week")
    assert country is not None
    assert (country.code, country.name) == ("FR", "France")

    country = find_country_in_text("Weekend in England")
    assert country is not None
    assert (country.code, country.name) == ("GB", "United Kingdom")


def test_alias_wins_over_shorter_country_name():
    from family_trips.modules.suggestions.locate import find_country_in_text

    country = find_country_in_text("Road trip through New Mexico")
    assert country is not None
    assert country.code == "US"


def test_longest_country_name_wins():
    from family_trips.modules.suggestions.locate import find_country_in_text

    country = find_country_in_text("Hiking in Papua New Guinea")
    assert country is not None
    assert country.code == "PG"


def test_partial_word_falls_back_to_country_search():
    from family_trips.modules.suggestions.locate import find_country_in_text

    country = find_country_in_text("Trip to Netherland")
    assert country is not None
    assert (country.code, country.name) == ("NL", "Netherlands")


def test_text_without_a_place_resolves_nothing():
    from family_trips.modules.suggestions.locate import find_country_in_text

    assert find_country_in_text("Dentist appointment next Tuesday at 3pm") is None
    assert find_country_in_text("Meet at the office") is None
    assert find_country_in_text("") is None
    assert find_country_in_text(None) is None  # type: ignore[arg-type]


def test_country_lookup_helpers():
    from family_trips.core.countries import country_by_name, get_country, search_countries

    assert get_country("is").name == "Iceland"
    assert get_country(None) is None
    assert country_by_name("United States").code == "US"
    assert country_by_name("holland").code == "NL"
    assert country_by_name("Atlantis") is None
    assert [c.code for c in search_countries("iceland")] == ["IS"]


def test_airport_codes_are_uppercase_tokens_only():
    from family_trips.core.airports import extract_airport_codes

    assert extract_airport_codes("JFK → CDG") == ["JFK", "CDG"]
    assert extract_airport_codes("we can fly to man") == []


def test_named_airports_fill_in_missing_codes():
    from family_trips.core.airports import extract_airport_codes

    assert extract_airport_codes("Departing Heathrow, arriving Narita") == ["LHR", "NRT"]


def test_airport_country_lookup():
    from family_trips.core.airports import airport_country, is_same_country

    assert airport_country("KEF").code == "IS"
    assert airport_country("kef").code == "IS"
    assert airport_country("XXX") is None
    assert is_same_country("JFK", "LAX")
    assert not is_same_country("JFK", "CDG")
    assert not is_same_country("JFK", "XXX")


def test_weekday_and_month_words_are_not_places():
    from family_trips.modules.suggestions.locate import find_country_in_text

    assert find_country_in_text("Dentist appointment Mon Mar 4, 2024") is None
    assert find_country_in_text("Team offsite Fri Oct 11, 2024") is None
    assert find_country_in_text("Dinner reservation Sat Jan 6, 2024") is None
    assert find_country_in_text("Classes start Sept 2024, Thursday evenings") is None
