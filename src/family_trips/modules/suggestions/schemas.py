from __future__ import annotations

from dataclasses import asdict
from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from family_trips.modules.suggestions.models import (
    DuplicateCheck,
    ExistingTrip,
    SourceType,
    TripSuggestion,
)


class CamelModel(BaseModel):
    # The web client speaks camelCase; snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TripSuggestionSchema(CamelModel):
    id: str
    country_name: str
    country_code: str | None = None
    visit_date: date | None = None
    end_date: date | None = None
    approximate_month: int | None = Field(default=None, ge=1, le=12)
    approximate_year: int | None = None
    trip_name: str | None = None
    source_type: SourceType = SourceType.PASTED_TEXT
    source_label: str = "From pasted text"
    confidence: float | None = Field(default=None, ge=0, le=1)
    already_exists: bool = False
    duplicate_reason: str | None = None
    photo_count: int | None = None
    photo_file_names: list[str] = Field(default_factory=list)

    @classmethod
    def from_model(cls, suggestion: TripSuggestion) -> TripSuggestionSchema:
        return cls.model_validate(asdict(suggestion))

    def to_model(self) -> TripSuggestion:
        return TripSuggestion(**self.model_dump())


class ExistingTripIn(CamelModel):
    id: str | None = None
    country_name: str
    country_code: str | None = None
    visit_date: date | None = None
    end_date: date | None = None
    approximate_month: int | None = Field(default=None, ge=1, le=12)
    approximate_year: int | None = None
    trip_name: str | None = None

    def to_model(self) -> ExistingTrip:
        return ExistingTrip(**self.model_dump())


class ParseTextIn(CamelModel):
    text: str


class MergeIn(CamelModel):
    suggestions: list[TripSuggestionSchema]
    max_days_apart: int | None = Field(default=None, ge=0)


class MarkDuplicatesIn(CamelModel):
    suggestions: list[TripSuggestionSchema]
    existing_trips: list[ExistingTripIn] = Field(default_factory=list)


class CheckDuplicateIn(CamelModel):
    suggestion: TripSuggestionSchema
    existing_trips: list[ExistingTripIn] = Field(default_factory=list)


class DuplicateCheckOut(CamelModel):
    is_duplicate: bool
    reason: str | None = None

    @classmethod
    def from_model(cls, check: DuplicateCheck) -> DuplicateCheckOut:
        return cls(is_duplicate=check.is_duplicate, reason=check.reason)
