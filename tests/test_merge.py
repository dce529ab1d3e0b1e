from __future__ import annotations

from datetime import date


def _suggestion(**kwargs):
    from family_trips.modules.suggestions.models import TripSuggestion

    kwargs.setdefault("country_name", "Portugal")
    kwargs.setdefault("country_code", "PT")
    return TripSuggestion(**kwargs)


def test_single_suggestion_is_returned_as_is():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips

    only = _suggestion(id="a", visit_date=date(2019, 7, 1))
    out = merge_nearby_trips([only])
    assert len(out) == 1
    assert out[0] is only
    assert merge_nearby_trips([]) == []


def test_trips_a_few_days_apart_are_merged():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips

    first = _suggestion(id="a", visit_date=date(2019, 7, 1), end_date=date(2019, 7, 5))
    second = _suggestion(id="b", visit_date=date(2019, 7, 10), end_date=date(2019, 7, 12))

    out = merge_nearby_trips([second, first])
    assert len(out) == 1
    merged = out[0]
    assert merged.id == "a"
    assert (merged.visit_date, merged.end_date) == (date(2019, 7, 1), date(2019, 7, 12))
    assert merged.source_label == "From pasted text + From pasted text"
    assert merged.confidence is None

    assert (first.visit_date, first.end_date) == (date(2019, 7, 1), date(2019, 7, 5))


def test_trips_far_apart_stay_separate():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips

    first = _suggestion(id="a", visit_date=date(2019, 7, 1), end_date=date(2019, 7, 5))
    second = _suggestion(id="b", visit_date=date(2019, 7, 15), end_date=date(2019, 7, 20))

    out = merge_nearby_trips([first, second])
    assert [s.id for s in out] == ["a", "b"]
    assert out[0] is first
    assert out[1] is second


def test_max_days_apart_is_configurable():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips

    first = _suggestion(id="a", visit_date=date(2019, 7, 1), end_date=date(2019, 7, 5))
    second = _suggestion(id="b", visit_date=date(2019, 7, 15))

    assert len(merge_nearby_trips([first, second], max_days_apart=10)) == 1
    assert len(merge_nearby_trips([first, second], max_days_apart=9)) == 2


def test_photo_counts_and_confidence_are_combined():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips
    from family_trips.modules.suggestions.models import SourceType

    first = _suggestion(
        id="a",
        visit_date=date(2021, 5, 1),
        source_type=SourceType.PHOTO_EXIF,
        photo_count=10,
        photo_file_names=["a.jpg"],
        confidence=0.5,
    )
    second = _suggestion(
        id="b",
        visit_date=date(2021, 5, 3),
        source_type=SourceType.PHOTO_EXIF,
        photo_count=5,
        photo_file_names=["b.jpg"],
        confidence=0.8,
    )

    (merged,) = merge_nearby_trips([first, second])
    assert merged.photo_count == 15
    assert merged.photo_file_names == ["a.jpg", "b.jpg"]
    assert merged.confidence == 0.8
    assert merged.source_label == "From 15 photos"
    assert (merged.visit_date, merged.end_date) == (date(2021, 5, 1), date(2021, 5, 3))


def test_countries_are_merged_separately_in_first_seen_order():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips

    pt_1 = _suggestion(id="pt1", visit_date=date(2019, 7, 1))
    jp = _suggestion(id="jp", country_name="Japan", country_code="JP", visit_date=date(2019, 7, 2))
    pt_2 = _suggestion(id="pt2", visit_date=date(2019, 7, 3))

    out = merge_nearby_trips([pt_1, jp, pt_2])
    assert [s.country_code for s in out] == ["PT", "JP"]
    assert out[0].end_date == date(2019, 7, 3)
    assert out[1] is jp


def test_undated_suggestions_are_not_merged():
    from family_trips.modules.suggestions.duplicates import merge_nearby_trips

    dated = _suggestion(id="a", visit_date=date(2019, 7, 1))
    undated = _suggestion(id="b")

    out = merge_nearby_trips([undated, dated])
    assert [s.id for s in out] == ["a", "b"]
