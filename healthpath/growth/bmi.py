from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, Optional


BmiCategory = Literal["Underweight", "Healthy", "Overweight"]


@dataclass(frozen=True)
class BmiThresholds:
    """
    Cut-offs for the BMI badge.
    Child BMI categories are percentile based; these flat values are a
    display simplification, not a clinical classification.
    """

    underweight_below: float = 15.0
    overweight_above: float = 22.0

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any] | None) -> "BmiThresholds":
        if not cfg:
            return cls()
        return cls(
            underweight_below=float(cfg.get("underweight_below", cls.underweight_below)),
            overweight_above=float(cfg.get("overweight_above", cls.overweight_above)),
        )


DEFAULT_THRESHOLDS = BmiThresholds()


@dataclass(frozen=True)
class BmiResult:
    value: float
    category: BmiCategory


def compute_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    if weight_kg is None or height_cm is None:
        return None
    if weight_kg <= 0 or height_cm <= 0:
        return None
    height_m = height_cm / 100.0
    return weight_kg / (height_m ** 2)


def bmi_category(value: float, thresholds: BmiThresholds = DEFAULT_THRESHOLDS) -> BmiCategory:
    if value < thresholds.underweight_below:
        return "Underweight"
    if value > thresholds.overweight_above:
        return "Overweight"
    return "Healthy"


def latest_bmi(records: Iterable[Any], thresholds: BmiThresholds = DEFAULT_THRESHOLDS) -> Optional[BmiResult]:
    """
    BMI of the newest record carrying both measurements.
    `records` must be ordered oldest -> newest; records with a single
    measurement are skipped even when they are the newest.
    """
    for r in reversed(list(records)):
        if r is None:
            continue
        value = compute_bmi(r.weight_kg, r.height_cm)
        if value is not None:
            return BmiResult(value=round(value, 1), category=bmi_category(value, thresholds))
    return None
