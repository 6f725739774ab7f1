import pytest

from healthpath.reference_data import (
    categories,
    load_vaccination_schedule,
    pathology_tests,
    radiology_tests,
    search_tests,
    vaccination_schedule,
)


def test_schedule_is_ordered_and_complete():
    schedule = vaccination_schedule()
    assert len(schedule) == 9
    weeks = [v.age_in_weeks for v in schedule]
    assert weeks == sorted(weeks)
    assert schedule[0].id == "bcg_opv0_hepb1"
    assert schedule[1].age_in_weeks == 6
    assert schedule[-1].age_description == "4–6 Years"


def test_schedule_entries_are_immutable():
    entry = vaccination_schedule()[0]
    with pytest.raises(Exception):
        entry.age_in_weeks = 99


def test_missing_column_is_reported(tmp_path):
    path = tmp_path / "schedule.csv"
    path.write_text("id,name\nx,X\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing columns"):
        load_vaccination_schedule(path)


def test_duplicate_ids_are_reported(tmp_path):
    path = tmp_path / "schedule.csv"
    path.write_text(
        "id,name,age_in_weeks,age_description\na,A,0,Birth\na,A again,6,6 Weeks\n", encoding="utf-8"
    )
    with pytest.raises(ValueError, match="duplicate ids"):
        load_vaccination_schedule(path)


def test_catalog_sizes_and_categories():
    assert len(pathology_tests()) == 10
    assert len(radiology_tests()) == 33
    assert categories(radiology_tests()) == [
        "Basic Radiology Tests",
        "Intermediate Radiology Tests",
        "Advanced Radiology Tests",
        "Optional / Specialized Radiology",
    ]


def test_search_matches_name_or_purpose_case_insensitively():
    found = search_tests(radiology_tests(), query="KIDNEY")
    ids = {t.id for t in found}
    assert {"usg-kub", "ivp"} <= ids
    assert all("kidney" in (t.name + t.purpose).lower() for t in found)


def test_search_by_category():
    found = search_tests(pathology_tests(), category="Blood Tests")
    assert [t.id for t in found] == ["cbc", "lft", "kft", "lipid"]
    assert search_tests(pathology_tests(), category="all") == list(pathology_tests())


def test_search_combines_query_and_category():
    found = search_tests(radiology_tests(), query="pet", category="Advanced Radiology Tests")
    assert [t.id for t in found] == ["pet-ct"]
