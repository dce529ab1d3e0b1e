from __future__ import annotations

from datetime import date

import pytest

HOTEL_CONFIRMATION = (
    "Hotel Avenida\n"
    "Address: Rua das Flores 12, Lisbon, Portugal\n"
    "Check-in: September 7, 2025\n"
    "Check-out: September 11, 2025\n"
)

INTERNATIONAL_BOARDING_PASS = "BOARDING PASS\nJFK → CDG\nArrival: Mar 26, 2024\n"


def test_detect_file_kind_never_treats_junk_as_pdf():
    from family_trips.modules.documents.service import _detect_file_kind

    pdf = "application/pdf"
    assert _detect_file_kind(filename="a.pdf", content_type=pdf, body=b"%PDF-1.7") == "pdf"
    assert (
        _detect_file_kind(filename="a.pdf", content_type=pdf, body=b"\x00\x01\x02")
        == "bad_pdf_upload"
    )
    png = b"\x89PNG\r\n\x1a\nxxxx"
    assert _detect_file_kind(filename="a.png", content_type="image/png", body=png) == "image"
    assert _detect_file_kind(filename="notes.txt", content_type=None, body=b"hello") == "text"
    assert _detect_file_kind(filename="blob", content_type=None, body=b"\x00\x01") == "unknown"


def test_unsupported_uploads_raise():
    from family_trips.modules.documents.service import (
        UnsupportedDocumentError,
        extract_document_text,
    )

    with pytest.raises(UnsupportedDocumentError):
        extract_document_text(filename="a.pdf", content_type=None, body=b"\x00\x01\x02")
    with pytest.raises(UnsupportedDocumentError):
        extract_document_text(filename="a.png", content_type=None, body=b"\x89PNG\r\n\x1a\nxx")


def test_html_upload_is_flattened_to_text():
    from family_trips.modules.documents.service import extract_document_text

    body = b"<html><body><p>Hotel Avenida</p><p>Lisbon &amp; Porto</p></body></html>"
    text = extract_document_text(filename="c.html", content_type="text/html", body=body)
    assert text == "Hotel Avenida\nLisbon & Porto"


def test_pdf_pages_are_joined(monkeypatch):
    from family_trips.modules.documents import service

    class _Page:
        def __init__(self, text):
            self._text = text

        def extract_text(self):
            return self._text

    class _Reader:
        def __init__(self, _stream):
            self.pages = [_Page("BOARDING PASS"), _Page("JFK → CDG")]

    monkeypatch.setattr(service, "PdfReader", _Reader)

    text = service.extract_document_text(
        filename="pass.pdf", content_type="application/pdf", body=b"%PDF-1.4 fake"
    )
    assert text == "BOARDING PASS\nJFK → CDG"


def test_unreadable_pdf_raises(monkeypatch):
    from family_trips.modules.documents import service

    def _broken(_stream):
        raise ValueError("broken xref")

    monkeypatch.setattr(service, "PdfReader", _broken)

    with pytest.raises(service.UnsupportedDocumentError):
        service.extract_document_text(
            filename="pass.pdf", content_type="application/pdf", body=b"%PDF-1.4 fake"
        )


def test_hotel_with_address_is_high_confidence():
    from family_trips.modules.documents.service import (
        ParseConfidence,
        TravelSource,
        parse_travel_document,
    )

    result = parse_travel_document(HOTEL_CONFIRMATION)
    assert result.method == "local"
    assert result.confidence == ParseConfidence.HIGH
    assert result.ai_attempted is False

    trip = result.trip
    assert trip is not None
    assert (trip.country_code, trip.city) == ("PT", "Lisbon")
    assert trip.source == TravelSource.HOTEL
    assert (trip.start_date, trip.end_date) == (date(2025, 9, 7), date(2025, 9, 11))
    assert trip.trip_name == "Stay at Hotel Avenida"

    suggestion = result.suggestion
    assert suggestion is not None
    assert suggestion.id.startswith("doc_")
    assert (suggestion.visit_date, suggestion.end_date) == (date(2025, 9, 7), date(2025, 9, 11))
    assert suggestion.source_label == "Stay at Hotel Avenida"


def test_international_flight_without_ai_falls_back_to_local():
    from family_trips.modules.documents.service import ParseConfidence, parse_travel_document

    result = parse_travel_document(INTERNATIONAL_BOARDING_PASS)
    assert result.method == "local"
    assert result.confidence == ParseConfidence.LOW
    assert result.ai_attempted is False
    assert result.trip is not None
    assert (result.trip.country_code, result.trip.city) == ("FR", "Paris")
    assert result.trip.start_date == date(2024, 3, 26)
    assert result.trip.is_domestic is False


def test_international_flight_uses_ai_when_available(monkeypatch):
    from family_trips.modules.documents import service

    monkeypatch.setattr(service, "document_ai_available", lambda: True)
    monkeypatch.setattr(
        service,
        "extract_trips_with_ai",
        lambda _text, home_country=None: [
            {
                "destination_country": "France",
                "destination_city": "Paris",
                "start_date": date(2024, 3, 27),
                "end_date": date(2024, 4, 2),
                "trip_name": "Paris getaway",
                "source": "flight",
            }
        ],
    )

    result = service.parse_travel_document(INTERNATIONAL_BOARDING_PASS, home_country="US")
    assert result.method == "ai"
    assert result.ai_attempted is True
    assert result.confidence == service.ParseConfidence.LOW
    assert result.trip is not None
    assert result.trip.country_code == "FR"
    assert (result.trip.start_date, result.trip.end_date) == (date(2024, 3, 27), date(2024, 4, 2))
    assert result.trip.trip_name == "Paris getaway"
    assert result.is_home_country is False


def test_failed_ai_keeps_local_result(monkeypatch):
    from family_trips.modules.documents import service

    monkeypatch.setattr(service, "document_ai_available", lambda: True)
    monkeypatch.setattr(service, "extract_trips_with_ai", lambda _text, home_country=None: None)

    result = service.parse_travel_document(INTERNATIONAL_BOARDING_PASS)
    assert result.method == "local"
    assert result.ai_attempted is True
    assert result.trip is not None
    assert result.trip.country_code == "FR"


def test_domestic_flight_is_high_confidence_and_flags_missing_year(monkeypatch):
    from family_trips.modules.documents import service

    def _no_ai(*_args, **_kwargs):
        raise AssertionError("AI must not be called for a high confidence parse")

    monkeypatch.setattr(service, "_today", lambda: date(2025, 1, 1))
    monkeypatch.setattr(service, "document_ai_available", lambda: True)
    monkeypatch.setattr(service, "extract_trips_with_ai", _no_ai)

    result = service.parse_travel_document("LAS → FLL, Jan 29")
    assert result.method == "local"
    assert result.confidence == service.ParseConfidence.HIGH

    trip = result.trip
    assert trip is not None
    assert trip.country_code == "US"
    assert trip.city == "Fort Lauderdale"
    assert trip.is_domestic is True
    assert trip.missing_year is True
    assert trip.start_date == date(2025, 1, 29)

    suggestion = result.suggestion
    assert suggestion is not None
    assert suggestion.visit_date is None
    assert suggestion.end_date is None


def test_home_country_is_reported():
    from family_trips.modules.documents.service import parse_travel_document

    text = "Grand Hotel\nAddress: 1 Main St, Springfield, United States\n"
    result = parse_travel_document(text, home_country="United States")
    assert result.trip is not None
    assert result.trip.country_code == "US"
    assert result.trip.city == "Springfield"
    assert result.is_home_country is True

    assert parse_travel_document(text, home_country="us").is_home_country is True
    assert parse_travel_document(text, home_country="Canada").is_home_country is False


def test_document_without_a_place_parses_to_nothing():
    from family_trips.modules.documents.service import ParseConfidence, parse_travel_document

    result = parse_travel_document("Receipt total 12.50\nThank you for your purchase")
    assert result.trip is None
    assert result.suggestion is None
    assert result.confidence == ParseConfidence.NONE
    assert result.method == "none"
