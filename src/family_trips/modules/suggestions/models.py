from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date


class SourceType(str, enum.Enum):
    PASTED_TEXT = "pasted_text"
    PHOTO_EXIF = "photo_exif"


@dataclass
class TripSuggestion:
    id: str
    country_name: str
    country_code: str | None = None
    visit_date: date | None = None
    end_date: date | None = None
    approximate_month: int | None = None
    approximate_year: int | None = None
    trip_name: str | None = None
    source_type: SourceType = SourceType.PASTED_TEXT
    source_label: str = "From pasted text"
    confidence: float | None = None
    already_exists: bool = False
    duplicate_reason: str | None = None
    photo_count: int | None = None
    photo_file_names: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExistingTrip:
    country_name: str
    country_code: str | None = None
    visit_date: date | None = None
    end_date: date | None = None
    approximate_month: int | None = None
    approximate_year: int | None = None
    trip_name: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class DateEvidence:
    visit: date | None = None
    end: date | None = None
    approx_month: int | None = None
    approx_year: int | None = None

    @property
    def empty(self) -> bool:
        return self.visit is None and self.end is None and self.approx_year is None


@dataclass(frozen=True)
class DuplicateCheck:
    is_duplicate: bool
    reason: str | None = None


def new_suggestion_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
