from datetime import datetime, timezone

import pytest

from healthpath.growth.bmi import BmiThresholds, bmi_category, compute_bmi
from healthpath.growth.age import age
from healthpath.growth.reference import GrowthReferenceParams, reference_curve
from healthpath.schemas.child import Child, GrowthRecord
from healthpath.services.growth_store import GrowthRecordStore


def _dates(store):
    return [r.date for r in store.records]


def test_add_record_keeps_ascending_order(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-06-01", "66", "7.5")
    store.add_record("2024-03-01", "60", "6.0")
    store.add_record("2024-09-01", "70", "8.4")
    dates = _dates(store)
    assert dates == sorted(dates)
    assert dates[0] == datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_out_of_order_list_is_reordered_on_insert():
    kid = Child.model_validate(
        {
            "id": "k",
            "name": "K",
            "dob": "2024-01-01",
            "growthRecords": [
                {"date": "2024-05-01T00:00:00Z", "heightCm": "64", "weightKg": "7"},
                {"date": "2024-02-01T00:00:00Z", "heightCm": "55", "weightKg": "4.5"},
            ],
        }
    )
    store = GrowthRecordStore(kid)
    store.add_record("2024-08-01", "69", "8")
    assert [r.date.month for r in store.records] == [2, 5, 8]


def test_same_timestamp_replaces_existing_record(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-03-01T10:00:00Z", "60", "6.0")
    store.add_record("2024-03-01T10:00:00Z", "61", "6.2")
    assert len(store.records) == 1
    assert store.records[0].height_cm == 61


def test_incomplete_records_are_accepted(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-03-01", height_cm="", weight_kg="6.1")
    store.add_record("2024-04-01")
    assert len(store.records) == 2
    assert store.records[0].height_cm is None
    assert store.records[1].weight_kg is None


def test_add_record_defaults_to_now(child):
    before = datetime.now(timezone.utc)
    record = GrowthRecordStore(child).add_record(height_cm=70, weight_kg=8)
    assert record.date >= before


def test_latest_bmi_uses_newest_complete_record(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-03-01", "60", "6.0")
    store.add_record("2024-06-01", "70", "9.8")
    store.add_record("2024-07-01", None, "10.5")  # newest, but no height
    result = store.latest_bmi()
    assert result.value == pytest.approx(20.0)
    assert result.category == "Healthy"


def test_latest_bmi_none_without_complete_record(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-03-01", None, "6.0")
    assert store.latest_bmi() is None


def test_bmi_categories_and_thresholds():
    assert compute_bmi(9.0, 0) is None
    assert bmi_category(14.9) == "Underweight"
    assert bmi_category(22.1) == "Overweight"
    assert bmi_category(18.0) == "Healthy"
    assert bmi_category(18.0, BmiThresholds(underweight_below=19, overweight_above=25)) == "Underweight"


def test_chart_series_skips_dateless_and_pre_birth_records(child):
    child.growth_records = [
        GrowthRecord(date=None, height_cm=50, weight_kg=3),
        GrowthRecord(date="2023-12-01", height_cm=48, weight_kg=3),
        GrowthRecord(date="2024-01-01", weight_kg=3.2),
        GrowthRecord(date="2024-07-15", height_cm=66, weight_kg=7.4),
    ]
    points = list(GrowthRecordStore(child).chart_series())
    assert [p.age_months for p in points] == [0, 6]
    assert points[0].height_cm is None
    assert points[1].reference == reference_curve("Female", 6)
    # nothing was removed from storage
    assert len(child.growth_records) == 4


def test_chart_series_is_restartable_and_follows_mutations(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-02-01", "55", "4.4")
    series = store.chart_series()
    assert len(list(series)) == 1
    assert len(list(series)) == 1
    store.add_record("2024-04-01", "60", "6.0")
    assert [p.age_months for p in series] == [1, 3]


def test_chart_series_empty_for_invalid_dob():
    kid = Child(id="k", name="K", dob=None)
    store = GrowthRecordStore(kid)
    store.add_record("2024-02-01", "55", "4.4")
    assert list(store.chart_series()) == []


def test_chart_frame_columns(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-02-01", "55", "4.4")
    df = store.chart_frame()
    assert list(df["age_months"]) == [1]
    assert {"height_cm", "weight_kg", "weight_p50", "height_p97"} <= set(df.columns)
    assert df["weight_p50"].iloc[0] == round(reference_curve("Female", 1).weight_p50, 1)


def test_chart_frame_empty(child):
    assert GrowthRecordStore(child).chart_frame().empty


def test_record_time_of_day_does_not_change_age(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-03-01T00:00:00Z", "58", "5.5")
    store.add_record("2024-05-01T23:30:00Z", "62", "6.4")
    assert [p.age_months for p in store.chart_series()] == [2, 4]


def test_record_offset_keeps_the_entered_calendar_date(child):
    raw = "2024-03-31T23:30:00-05:00"
    store = GrowthRecordStore(child)
    record = store.add_record(raw, "60", "6")
    assert record.date.date().isoformat() == "2024-03-31"
    (point,) = store.chart_series()
    assert point.age_months == age(child.dob, raw).total_months == 2


def test_offset_records_sort_by_instant(child):
    store = GrowthRecordStore(child)
    store.add_record("2024-03-02T01:00:00+05:00", "60", "6")
    store.add_record("2024-03-01T22:00:00-05:00", "61", "6.1")
    store.add_record("2024-03-01T21:00:00Z", "59", "5.9")
    assert [r.height_cm for r in store.records] == [60, 59, 61]


def test_reference_frame_follows_gender_and_params(child):
    params = GrowthReferenceParams.from_config({"weight_rate2": 0.25})
    df = GrowthRecordStore(child, reference_params=params).reference_frame(24)
    assert list(df["age_months"]) == list(range(25))
    assert df["weight_p50"].iloc[10] == pytest.approx(reference_curve("Female", 10, params).weight_p50)
