from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from healthpath.utils.time import as_date, today


@dataclass(frozen=True)
class Age:
    years: int
    months: int
    total_months: int


ZERO_AGE = Age(years=0, months=0, total_months=0)


def age(dob: Any, at: Any = None) -> Age:
    """
    Elapsed calendar time from dob to at (default: today).

    Unreadable inputs give a zero age. A dob after `at` gives a negative
    total_months, which callers use to drop records dated before birth.
    """
    birth = as_date(dob)
    target = as_date(at) if at is not None else today()
    if birth is None or target is None:
        return ZERO_AGE

    years = target.year - birth.year
    months = target.month - birth.month
    if months < 0 or (months == 0 and target.day < birth.day):
        years -= 1
        months += 12

    return Age(years=years, months=months, total_months=years * 12 + months)


def format_age(a: Age) -> str:
    return f"{a.years} years, {a.months} months"
