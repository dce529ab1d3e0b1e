from __future__ import annotations


def test_healthz_echoes_request_id():
    from fastapi.testclient import TestClient

    from family_trips.main import app

    client = TestClient(app)
    resp = client.get("/healthz", headers={"x-request-id": "req-123"})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["x-request-id"] == "req-123"


def test_parse_text_returns_camel_case_suggestions():
    from fastapi.testclient import TestClient

    from family_trips.main import app

    client = TestClient(app)
    resp = client.post(
        "/api/trip-suggestions/parse-text",
        json={"text": "OOO in Iceland from 3/25/13 to 3/30/13"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert len(body) == 1
    assert body[0]["countryCode"] == "IS"
    assert body[0]["visitDate"] == "2013-03-25"
    assert body[0]["endDate"] == "2013-03-30"
    assert body[0]["sourceType"] == "pasted_text"
    assert body[0]["alreadyExists"] is False


def test_parse_email_endpoint():
    from fastapi.testclient import TestClient

    from family_trips.main import app

    client = TestClient(app)
    resp = client.post(
        "/api/trip-suggestions/parse-email",
        json={"text": "Your boarding pass\nFlight AF007\nJFK → CDG\nDate: 25MAR24"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert [s["countryCode"] for s in body] == ["FR"]
    assert body[0]["confidence"] == 0.95


def test_check_duplicate_endpoint():
    from fastapi.testclient import TestClient

    from family_trips.main import app

    client = TestClient(app)
    resp = client.post(
        "/api/trip-suggestions/check-duplicate",
        json={
            "suggestion": {
                "id": "s1",
                "countryName": "Iceland",
                "countryCode": "IS",
                "visitDate": "2013-03-28",
            },
            "existingTrips": [
                {
                    "countryName": "Iceland",
                    "countryCode": "IS",
                    "visitDate": "2013-03-25",
                    "endDate": "2013-03-30",
                }
            ],
        },
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["isDuplicate"] is True
    assert "Iceland" in body["reason"]


def test_mark_duplicates_and_merge_endpoints(monkeypatch):
    from fastapi.testclient import TestClient

    from family_trips.core.config import settings
    from family_trips.main import app

    monkeypatch.setattr(settings, "merge_max_days_apart", 7)

    client = TestClient(app)
    suggestions = [
        {"id": "a", "countryName": "Portugal", "countryCode": "PT", "visitDate": "2019-07-01"},
        {"id": "b", "countryName": "Portugal", "countryCode": "PT", "visitDate": "2019-07-05"},
    ]

    resp = client.post("/api/trip-suggestions/merge", json={"suggestions": suggestions})
    assert resp.status_code == 200, resp.text
    merged = resp.json()
    assert len(merged) == 1
    assert (merged[0]["visitDate"], merged[0]["endDate"]) == ("2019-07-01", "2019-07-05")

    resp = client.post(
        "/api/trip-suggestions/merge", json={"suggestions": suggestions, "maxDaysApart": 2}
    )
    assert len(resp.json()) == 2

    resp = client.post(
        "/api/trip-suggestions/mark-duplicates",
        json={
            "suggestions": suggestions,
            "existingTrips": [
                {"countryName": "Portugal", "countryCode": "PT", "approximateYear": 2019}
            ],
        },
    )
    assert resp.status_code == 200, resp.text
    assert [s["alreadyExists"] for s in resp.json()] == [True, True]


def test_document_upload():
    from fastapi.testclient import TestClient

    from family_trips.main import app

    client = TestClient(app)
    text = (
        "Hotel Avenida\n"
        "Address: Rua das Flores 12, Lisbon, Portugal\n"
        "Check-in: September 7, 2025\n"
        "Check-out: September 11, 2025\n"
    )
    resp = client.post(
        "/api/documents/parse",
        files={"upload": ("hotel.txt", text.encode("utf-8"), "text/plain")},
        data={"home_country": "Portugal"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["method"] == "local"
    assert body["confidence"] == "high"
    assert body["isHomeCountry"] is True
    assert body["trip"]["countryCode"] == "PT"
    assert body["trip"]["source"] == "hotel"
    assert body["suggestion"]["visitDate"] == "2025-09-07"


def test_document_upload_rejects_bad_files(monkeypatch):
    from fastapi.testclient import TestClient

    from family_trips.core.config import settings
    from family_trips.main import app

    client = TestClient(app)
    resp = client.post(
        "/api/documents/parse",
        files={"upload": ("pass.pdf", b"\x00\x01\x02\x03", "application/pdf")},
    )
    assert resp.status_code == 400
    assert "not a valid PDF" in resp.text

    monkeypatch.setattr(settings, "max_upload_bytes", 10)
    resp = client.post(
        "/api/documents/parse",
        files={"upload": ("notes.txt", b"x" * 11, "text/plain")},
    )
    assert resp.status_code == 413


def test_document_text_endpoint():
    from fastapi.testclient import TestClient

    from family_trips.main import app

    client = TestClient(app)
    resp = client.post("/api/documents/parse-text", json={"text": "   "})
    assert resp.status_code == 400

    resp = client.post(
        "/api/documents/parse-text",
        json={"text": "Receipt total 12.50\nThank you for your purchase"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["trip"] is None
    assert body["suggestion"] is None
    assert body["confidence"] == "none"
    assert body["method"] == "none"
