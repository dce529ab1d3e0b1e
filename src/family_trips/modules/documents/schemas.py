from __future__ import annotations

from datetime import date

from family_trips.modules.documents.service import (
    DocumentParseResult,
    ParseConfidence,
    TravelSource,
)
from family_trips.modules.suggestions.schemas import CamelModel, TripSuggestionSchema


class ParseDocumentTextIn(CamelModel):
    text: str
    home_country: str | None = None


class ParsedTravelDataOut(CamelModel):
    country_name: str
    country_code: str | None
    city: str
    start_date: date | None
    end_date: date | None
    trip_name: str
    source: TravelSource
    is_domestic: bool
    missing_year: bool


class DocumentParseOut(CamelModel):
    trip: ParsedTravelDataOut | None
    suggestion: TripSuggestionSchema | None
    confidence: ParseConfidence
    method: str
    is_home_country: bool
    ai_attempted: bool

    @classmethod
    def from_result(cls, result: DocumentParseResult) -> DocumentParseOut:
        trip = result.trip
        suggestion = result.suggestion
        return cls(
            trip=ParsedTravelDataOut(
                country_name=trip.country_name,
                country_code=trip.country_code,
                city=trip.city,
                start_date=trip.start_date,
                end_date=trip.end_date,
                trip_name=trip.trip_name,
                source=trip.source,
                is_domestic=trip.is_domestic,
                missing_year=trip.missing_year,
            )
            if trip
            else None,
            suggestion=TripSuggestionSchema.from_model(suggestion) if suggestion else None,
            confidence=result.confidence,
            method=result.method,
            is_home_country=result.is_home_country,
            ai_attempted=result.ai_attempted,
        )
