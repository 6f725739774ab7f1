from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from healthpath.growth.age import age
from healthpath.growth.bmi import DEFAULT_THRESHOLDS, BmiResult, BmiThresholds, latest_bmi
from healthpath.growth.reference import (
    DEFAULT_PARAMS,
    GrowthReferenceParams,
    ReferenceCurve,
    reference_curve,
    reference_table,
)
from healthpath.schemas.child import Child, GrowthRecord, parse_measurement, record_sort_key
from healthpath.utils.time import as_date, now_utc, parse_to_aware


@dataclass(frozen=True)
class ChartPoint:
    date: datetime
    age_months: int
    height_cm: Optional[float]
    weight_kg: Optional[float]
    reference: ReferenceCurve

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "age_months": self.age_months,
            "height_cm": self.height_cm,
            "weight_kg": self.weight_kg,
            **self.reference.as_dict(ndigits=1),
        }


class ChartSeries:
    """Iterable over chart points. Each iteration recomputes from the child's current records."""

    def __init__(self, child: Child, params: GrowthReferenceParams) -> None:
        self._child = child
        self._params = params

    def __iter__(self) -> Iterator[ChartPoint]:
        child = self._child
        if as_date(child.dob) is None:
            return iter(())

        points: List[ChartPoint] = []
        for r in child.growth_records or []:
            if r is None or r.date is None:
                continue
            a = age(child.dob, r.date)
            if a.total_months < 0:
                continue
            points.append(
                ChartPoint(
                    date=r.date,
                    age_months=a.total_months,
                    height_cm=r.height_cm,
                    weight_kg=r.weight_kg,
                    reference=reference_curve(child.gender, a.total_months, self._params),
                )
            )
        points.sort(key=lambda p: p.age_months)
        return iter(points)


class GrowthRecordStore:
    """Growth measurements of a single child, kept ascending by date."""

    def __init__(
        self,
        child: Child,
        *,
        reference_params: GrowthReferenceParams = DEFAULT_PARAMS,
        bmi_thresholds: BmiThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self.child = child
        self.reference_params = reference_params
        self.bmi_thresholds = bmi_thresholds

    @property
    def records(self) -> List[GrowthRecord]:
        return self.child.growth_records

    def add_record(
        self,
        date: Any = None,
        height_cm: Any = None,
        weight_kg: Any = None,
    ) -> GrowthRecord:
        """
        Insert a measurement and re-sort. A record with the same timestamp is
        replaced. Records missing one or both measurements are accepted;
        readers skip what they cannot use.
        """
        when = parse_to_aware(date) if date is not None else now_utc()
        record = GrowthRecord(
            date=when,
            height_cm=parse_measurement(height_cm),
            weight_kg=parse_measurement(weight_kg),
        )

        records = [r for r in (self.child.growth_records or []) if r is not None]
        if record.date is not None:
            records = [r for r in records if r.date != record.date]
        records.append(record)
        records.sort(key=record_sort_key)
        self.child.growth_records = records
        return record

    def latest_bmi(self) -> Optional[BmiResult]:
        return latest_bmi(self.records, self.bmi_thresholds)

    def chart_series(self) -> ChartSeries:
        return ChartSeries(self.child, self.reference_params)

    def reference_frame(self, max_months: int = 60) -> pd.DataFrame:
        """Reference bands for the child's gender, one row per month from birth."""
        return reference_table(self.child.gender, range(0, max_months + 1), self.reference_params)

    def chart_frame(self) -> pd.DataFrame:
        rows = [p.as_dict() for p in self.chart_series()]
        df = pd.DataFrame(rows)
        if len(df):
            df["date"] = pd.to_datetime(df["date"], utc=True)
        return df
