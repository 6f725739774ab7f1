from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, Literal, Mapping

import numpy as np
import pandas as pd


Gender = Literal["Male", "Female"]


@dataclass(frozen=True)
class GrowthReferenceParams:
    """
    Constants of the piecewise-linear reference curves.

    These approximate the shape of percentile growth charts for display
    overlays only. They are not a clinical growth standard.

    Weight p50 = base + rate1 * m           for m <= weight_breakpoint
               = base + rate1 * bp + rate2 * (m - bp)   after it
    Height follows the same form with its own breakpoint and rates.
    p3/p97 are p50 scaled by the tail factors.
    """

    weight_base: Dict[str, float] = field(default_factory=lambda: {"Male": 3.3, "Female": 3.2})
    weight_rate1: Dict[str, float] = field(default_factory=lambda: {"Male": 0.8, "Female": 0.7})
    weight_rate2: float = 0.5
    weight_breakpoint: int = 6
    weight_tails: tuple[float, float] = (0.85, 1.15)

    height_base: Dict[str, float] = field(default_factory=lambda: {"Male": 50.0, "Female": 49.0})
    height_rate1: float = 2.5
    height_rate2: float = 1.2
    height_breakpoint: int = 12
    height_tails: tuple[float, float] = (0.95, 1.05)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any] | None) -> "GrowthReferenceParams":
        if not cfg:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for k, v in cfg.items():
            if k not in known:
                raise ValueError(f"Unknown growth reference parameter: {k}")
            kwargs[k] = tuple(v) if k.endswith("_tails") else v
        return cls(**kwargs)


DEFAULT_PARAMS = GrowthReferenceParams()


@dataclass(frozen=True)
class ReferenceCurve:
    age_months: int
    weight_p3: float
    weight_p50: float
    weight_p97: float
    height_p3: float
    height_p50: float
    height_p97: float

    def as_dict(self, ndigits: int | None = None) -> Dict[str, float]:
        out = {
            "weight_p3": self.weight_p3,
            "weight_p50": self.weight_p50,
            "weight_p97": self.weight_p97,
            "height_p3": self.height_p3,
            "height_p50": self.height_p50,
            "height_p97": self.height_p97,
        }
        if ndigits is not None:
            out = {k: round(v, ndigits) for k, v in out.items()}
        return out


def _piecewise(base: float, rate1: float, rate2: float, breakpoint: int, months):
    months = np.asarray(months, dtype=float)
    return np.where(
        months <= breakpoint,
        base + months * rate1,
        base + breakpoint * rate1 + (months - breakpoint) * rate2,
    )


def _weight_p50(gender: Gender, months, params: GrowthReferenceParams):
    g = "Male" if gender == "Male" else "Female"
    return _piecewise(
        params.weight_base[g],
        params.weight_rate1[g],
        params.weight_rate2,
        params.weight_breakpoint,
        months,
    )


def _height_p50(gender: Gender, months, params: GrowthReferenceParams):
    g = "Male" if gender == "Male" else "Female"
    return _piecewise(
        params.height_base[g],
        params.height_rate1,
        params.height_rate2,
        params.height_breakpoint,
        months,
    )


def reference_curve(
    gender: Gender, total_months: int, params: GrowthReferenceParams = DEFAULT_PARAMS
) -> ReferenceCurve:
    w50 = float(_weight_p50(gender, total_months, params))
    h50 = float(_height_p50(gender, total_months, params))
    w_lo, w_hi = params.weight_tails
    h_lo, h_hi = params.height_tails
    return ReferenceCurve(
        age_months=int(total_months),
        weight_p3=w50 * w_lo,
        weight_p50=w50,
        weight_p97=w50 * w_hi,
        height_p3=h50 * h_lo,
        height_p50=h50,
        height_p97=h50 * h_hi,
    )


def reference_table(
    gender: Gender, months: Iterable[int], params: GrowthReferenceParams = DEFAULT_PARAMS
) -> pd.DataFrame:
    """Vectorised reference curves, one row per month."""
    m = np.asarray(list(months), dtype=float)
    w50 = _weight_p50(gender, m, params)
    h50 = _height_p50(gender, m, params)
    w_lo, w_hi = params.weight_tails
    h_lo, h_hi = params.height_tails
    return pd.DataFrame(
        {
            "age_months": m.astype(int),
            "weight_p3": w50 * w_lo,
            "weight_p50": w50,
            "weight_p97": w50 * w_hi,
            "height_p3": h50 * h_lo,
            "height_p50": h50,
            "height_p97": h50 * h_hi,
        }
    )
