from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any

import httpx

from family_trips.core.config import settings
from family_trips.core.logging import get_logger, log_event

logger = get_logger(__name__)

_ALLOWED_SOURCES: set[str] = {"flight", "hotel", "general"}
_MAX_TRIPS = 10

_TRIPS_RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "travel_document_trips",
        "strict": True,
        "schema": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "trips": {
                    "type": "array",
                    "maxItems": _MAX_TRIPS,
                    "items": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {
                            "destination_country": {"type": "string"},
                            "destination_city": {"type": ["string", "null"]},
                            "start_date": {"type": ["string", "null"]},
                            "end_date": {"type": ["string", "null"]},
                            "trip_name": {"type": ["string", "null"]},
                            "source": {"type": "string", "enum": sorted(_ALLOWED_SOURCES)},
                        },
                        "required": [
                            "destination_country",
                            "destination_city",
                            "start_date",
                            "end_date",
                            "trip_name",
                            "source",
                        ],
                    },
                },
            },
            "required": ["trips"],
        },
    },
}

_SYSTEM_PROMPT = (
    "You analyze travel documents (boarding passes, hotel reservations, itineraries) "
    "and extract the trips they describe.\n"
    "Dates:\n"
    "- start_date is the day the traveler ARRIVES in the destination country. A flight "
    "leaving home on May 10 and landing on May 11 starts the trip on May 11.\n"
    "- end_date is the day the traveler LEAVES the destination country.\n"
    "- Use the year written in the document. Only if no year appears, return null dates.\n"
    "- If a duration such as '3 nights' is stated, the date range must match it.\n"
    "Destination:\n"
    "- Identify the final destination country and city. Ignore layovers in the home "
    "country.\n"
    "- destination_country is the full English country name.\n"
    "Only use information explicitly present in the text. Return JSON only."
)


def document_ai_available() -> bool:
    return bool(settings.document_ai_enabled and settings.openai_api_key)


def extract_trips_with_ai(text: str, *, home_country: str | None = None) -> list[dict] | None:
    """
    Best-effort AI extraction of trips from travel document text.

    Returns a list of dicts with keys: destination_country, destination_city,
    start_date, end_date (``date`` or None), trip_name, source. Returns None when
    AI is unavailable, the call fails, or nothing usable comes back.
    """
    if not document_ai_available():
        return None

    cleaned = _truncate_text(text, max_chars=int(settings.document_ai_max_chars or 0) or 12000)
    if not cleaned:
        return None

    payload = {
        "model": settings.openai_model,
        "temperature": 0,
        "response_format": _TRIPS_RESPONSE_FORMAT,
        "messages": [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    "Analyze this travel document.\n"
                    f"Home country: {home_country or 'Not specified'}\n"
                    f"Current year (for reference only): {date.today().year}\n\n"
                    'Return JSON of the form {"trips": [...]}.\n\n'
                    "Document text:\n" + cleaned
                ),
            },
        ],
    }

    headers = {
        "Authorization": f"Bearer {settings.openai_api_key}",
        "Content-Type": "application/json",
    }

    url = settings.openai_base_url.rstrip("/") + "/chat/completions"
    timeout = float(settings.document_ai_timeout_seconds or 20.0)
    try:
        resp = httpx.post(
            url, headers=headers, json=payload, timeout=timeout, follow_redirects=True
        )
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        # Some models/endpoints don't support Structured Outputs; fall back to JSON mode.
        status_code = e.response.status_code if e.response is not None else None
        if status_code not in {400, 422}:
            _log_failure("http_status", status_code=status_code)
            return None
        payload["response_format"] = {"type": "json_object"}
        try:
            resp = httpx.post(
                url, headers=headers, json=payload, timeout=timeout, follow_redirects=True
            )
            resp.raise_for_status()
        except Exception as retry_error:
            _log_failure("http_retry", error_type=type(retry_error).__name__)
            return None
    except Exception as e:
        _log_failure("http", error_type=type(e).__name__)
        return None

    try:
        raw = resp.json()
        msg = raw["choices"][0]["message"]
        if isinstance(msg, dict) and msg.get("refusal"):
            _log_failure("refusal")
            return None
        content = msg.get("content") if isinstance(msg, dict) else None
    except Exception:
        _log_failure("bad_response")
        return None

    if not isinstance(content, str) or not content.strip():
        _log_failure("empty_content")
        return None

    obj = _parse_json_object(content)
    if not isinstance(obj, dict):
        _log_failure("bad_json", content=content)
        return None

    trips = _sanitize_trips(obj)
    if not trips:
        _log_failure("no_trips")
        return None
    log_event(logger, "documents.ai.extracted", trips=len(trips))
    return trips


def _log_failure(reason: str, **fields: Any) -> None:
    log_event(logger, "documents.ai.failed", level=logging.WARNING, reason=reason, **fields)


def _truncate_text(text: str, *, max_chars: int) -> str:
    t = (text or "").replace("\u202f", " ").replace("\xa0", " ").strip()
    if not t:
        return ""
    if max_chars <= 0:
        return t
    if len(t) <= max_chars:
        return t
    return t[: max_chars - 20].rstrip() + "\n\n[TRUNCATED]"


def _parse_json_object(content: str) -> Any:
    c = (content or "").strip()
    if not c:
        return None
    c = re.sub(r"^```(?:json)?\s*|\s*```$", "", c)
    try:
        return json.loads(c)
    except ValueError:
        pass

    # Fallback: extract the first {...} block.
    m = re.search(r"\{.*\}", c, re.S)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except ValueError:
        return None


def _clean_str(value: Any, *, max_len: int) -> str | None:
    if not isinstance(value, str):
        return None
    s = " ".join(value.split())
    return s[:max_len] if s else None


def _parse_iso_date(value: Any) -> date | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _sanitize_trips(obj: dict[str, Any]) -> list[dict]:
    trips = obj.get("trips")
    if not isinstance(trips, list):
        return []

    out: list[dict] = []
    for item in trips[:_MAX_TRIPS]:
        if not isinstance(item, dict):
            continue
        country = _clean_str(item.get("destination_country"), max_len=100)
        if not country:
            continue
        start = _parse_iso_date(item.get("start_date"))
        end = _parse_iso_date(item.get("end_date"))
        if start and end and end < start:
            end = None
        source = str(item.get("source") or "general").strip().lower()
        out.append(
            {
                "destination_country": country,
                "destination_city": _clean_str(item.get("destination_city"), max_len=100),
                "start_date": start,
                "end_date": end,
                "trip_name": _clean_str(item.get("trip_name"), max_len=200),
                "source": source if source in _ALLOWED_SOURCES else "general",
            }
        )
    return out
