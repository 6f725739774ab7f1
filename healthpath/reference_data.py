from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, TypeVar

import pandas as pd

from healthpath.schemas.reference import PathologyTest, RadiologyTest, VaccinationScheduleEntry


DATA_DIR = Path(__file__).resolve().parent / "data"

T = TypeVar("T", PathologyTest, RadiologyTest)


def _load_table(path: Path, required: set[str]) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"{path.name} missing columns: {sorted(missing)}. Required={sorted(required)}"
        )
    if df["id"].duplicated().any():
        dupes = sorted(df.loc[df["id"].duplicated(), "id"].unique())
        raise ValueError(f"{path.name} has duplicate ids: {dupes}")
    return df


def load_vaccination_schedule(path: Optional[str | Path] = None) -> Tuple[VaccinationScheduleEntry, ...]:
    """Fixed schedule ordered by due age. Read-only; shared by all children."""
    p = Path(path) if path else DATA_DIR / "vaccination_schedule.csv"
    df = _load_table(p, {"id", "name", "age_in_weeks", "age_description"})
    df["age_in_weeks"] = df["age_in_weeks"].astype(int)
    df = df.sort_values("age_in_weeks", kind="stable")
    return tuple(
        VaccinationScheduleEntry(**{**row, "age_in_weeks": int(row["age_in_weeks"])})
        for row in df.to_dict("records")
    )


def load_pathology_tests(path: Optional[str | Path] = None) -> Tuple[PathologyTest, ...]:
    p = Path(path) if path else DATA_DIR / "pathology_tests.csv"
    df = _load_table(
        p,
        {"id", "name", "category", "purpose", "detects", "normal_range",
         "sample_type", "interpretation_tips", "system"},
    )
    records = df.to_dict("records")
    return tuple(PathologyTest(**{**r, "system": r["system"] or None}) for r in records)


def load_radiology_tests(path: Optional[str | Path] = None) -> Tuple[RadiologyTest, ...]:
    p = Path(path) if path else DATA_DIR / "radiology_tests.csv"
    df = _load_table(p, {"id", "name", "category", "sub_category", "purpose"})
    return tuple(RadiologyTest(**r) for r in df.to_dict("records"))


@lru_cache
def vaccination_schedule() -> Tuple[VaccinationScheduleEntry, ...]:
    return load_vaccination_schedule()


@lru_cache
def pathology_tests() -> Tuple[PathologyTest, ...]:
    return load_pathology_tests()


@lru_cache
def radiology_tests() -> Tuple[RadiologyTest, ...]:
    return load_radiology_tests()


def categories(tests: Iterable[T]) -> list[str]:
    seen: list[str] = []
    for t in tests:
        if t.category not in seen:
            seen.append(t.category)
    return seen


def search_tests(tests: Sequence[T], query: str = "", category: Optional[str] = None) -> list[T]:
    """Case-insensitive match on name or purpose, optionally narrowed to one category."""
    q = (query or "").strip().lower()
    out: list[T] = []
    for t in tests:
        if category and category != "all" and t.category != category:
            continue
        if q and q not in t.name.lower() and q not in t.purpose.lower():
            continue
        out.append(t)
    return out
