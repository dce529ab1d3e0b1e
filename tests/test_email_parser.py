from __future__ import annotations

from datetime import date


def test_boarding_pass_uses_arrival_airport():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Your boarding pass is ready\nFlight AF007\nJFK → CDG\nDeparture 25MAR24"
    out = parse_email_content(text)
    assert len(out) == 1
    s = out[0]
    assert s.id.startswith("email_")
    assert (s.country_code, s.country_name) == ("FR", "France")
    assert s.confidence == 0.95
    assert s.source_label == "Boarding pass AF007"
    assert (s.visit_date, s.end_date) == (date(2024, 3, 25), date(2024, 3, 25))


def test_flight_itinerary_route():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Flight confirmation\nItinerary: SFO → NRT\nDeparting March 3, 2024"
    out = parse_email_content(text)
    assert len(out) == 1
    assert out[0].country_code == "JP"
    assert out[0].confidence == 0.9
    assert out[0].source_label == "Flight to NRT"
    assert out[0].visit_date == date(2024, 3, 3)


def test_airline_confirmation_prefers_airport_in_parentheses():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Your confirmation code: ABC123\nFlight to Lisbon (LIS) on June 3, 2023"
    out = parse_email_content(text)
    assert len(out) == 1
    assert out[0].country_code == "PT"
    assert out[0].confidence == 0.85
    assert out[0].source_label == "Flight confirmation ABC123"
    assert out[0].visit_date == date(2023, 6, 3)


def test_hotel_booking_reads_check_in_and_check_out():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = (
        "Hotel reservation confirmed\n"
        "Your stay at Hotel Avenida in Lisbon, Portugal\n"
        "Check-in: June 3, 2023\n"
        "Check-out: June 8, 2023"
    )
    out = parse_email_content(text)
    assert len(out) == 1
    s = out[0]
    assert s.country_code == "PT"
    assert s.confidence == 0.8
    assert s.source_label == "Hotel in Lisbon"
    assert (s.visit_date, s.end_date) == (date(2023, 6, 3), date(2023, 6, 8))


def test_undated_mention_leaves_dates_empty():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    out = parse_email_content("Hi! We are heading to Portugal for the summer.")
    assert len(out) == 1
    s = out[0]
    assert s.country_code == "PT"
    assert s.confidence == 0.6
    assert s.visit_date is None
    assert s.end_date is None
    assert s.approximate_year is None
    assert s.approximate_month is None


def test_lowercase_words_are_not_airport_codes():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    assert parse_email_content("Flight itinerary: you can fly to man - see you") == []


def test_empty_email_gives_nothing():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    assert parse_email_content("") == []
    assert parse_email_content(None) == []  # type: ignore[arg-type]
    assert parse_email_content("Lunch on Friday?") == []


def test_booking_com_reservation():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Booking.com\nYour reservation in Lisbon, Portugal\nCheck-in: June 3, 2022"
    out = parse_email_content(text)
    assert len(out) == 1
    s = out[0]
    assert s.country_code == "PT"
    assert s.visit_date == date(2022, 6, 3)
    assert s.source_label == "Booking.com reservation"
    assert s.confidence == 0.85


def test_airbnb_reservation():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Airbnb\nYour reservation in Kyoto\nArriving April 12, 2023"
    out = parse_email_content(text)
    assert len(out) == 1
    s = out[0]
    assert s.country_code == "JP"
    assert s.visit_date == date(2023, 4, 12)
    assert s.source_label == "Airbnb reservation"
    assert s.confidence == 0.85


def test_expedia_trip():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Expedia itinerary\nYour trip to Greece\nDeparting: May 5, 2021"
    out = parse_email_content(text)
    assert len(out) == 1
    s = out[0]
    assert s.country_code == "GR"
    assert s.visit_date == date(2021, 5, 5)
    assert s.source_label == "Expedia booking"
    assert s.confidence == 0.85


def test_visa_document():
    from family_trips.modules.suggestions.email_parser import parse_email_content

    text = "Your visa for Kenya\nValid from March 2, 2024"
    out = parse_email_content(text)
    assert len(out) == 1
    s = out[0]
    assert s.country_code == "KE"
    assert s.visit_date == date(2024, 3, 2)
    assert s.source_label == "Visa/travel document"
    assert s.confidence == 0.7
