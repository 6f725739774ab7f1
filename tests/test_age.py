from datetime import date, datetime, timezone

import pytest

from healthpath.growth.age import Age, age, format_age


def test_example_from_birthday_in_january():
    assert age("2023-01-15", "2024-03-20") == Age(years=1, months=2, total_months=14)


def test_borrows_a_month_only_when_month_delta_is_zero():
    assert age(date(2023, 3, 20), date(2024, 3, 10)) == Age(0, 12, 12)
    assert age(date(2023, 3, 20), date(2024, 3, 20)) == Age(1, 0, 12)


def test_negative_month_delta_borrows_a_year():
    assert age(date(2023, 11, 1), date(2024, 2, 1)) == Age(0, 3, 3)


@pytest.mark.parametrize(
    "dob,at",
    [
        ("2022-05-31", "2024-02-29"),
        ("2020-02-29", "2023-02-28"),
        ("2023-12-01", "2024-01-01"),
        ("2019-07-15", "2024-07-14"),
    ],
)
def test_total_months_matches_components(dob, at):
    a = age(dob, at)
    assert a.total_months == a.years * 12 + a.months


def test_time_of_day_is_ignored():
    plain = age("2023-01-15", "2024-03-20")
    assert age("2023-01-15T23:59:00", "2024-03-20T00:01:00") == plain
    assert age(datetime(2023, 1, 15, 6, 30), datetime(2024, 3, 20, 22, 0, tzinfo=timezone.utc)) == plain


@pytest.mark.parametrize("dob,at", [(None, "2024-01-01"), ("not a date", "2024-01-01"), ("2023-01-01", "garbage"), ("", None)])
def test_invalid_input_gives_zero_age(dob, at):
    assert age(dob, at) == Age(0, 0, 0)


def test_dob_after_date_is_negative():
    assert age("2024-05-01", "2024-03-01").total_months < 0


def test_format_age():
    assert format_age(Age(2, 3, 27)) == "2 years, 3 months"
