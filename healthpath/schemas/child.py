from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from healthpath.utils.time import as_date, parse_to_aware, to_iso


Gender = Literal["Male", "Female"]
VaccineStatus = Literal["Completed", "Upcoming", "Pending", "Missed"]
OverrideStatus = Literal["Completed", "Missed"]

OVERRIDE_STATUSES = ("Completed", "Missed")


def parse_measurement(value: Any) -> Optional[float]:
    """Decimal string/number -> positive float, anything else -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if out != out or out <= 0:  # NaN or non-positive
        return None
    return out


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GrowthRecord(_CamelModel):
    date: Optional[datetime] = None
    height_cm: Optional[float] = Field(default=None, alias="heightCm")
    weight_kg: Optional[float] = Field(default=None, alias="weightKg")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Optional[datetime]:
        return parse_to_aware(v)

    @field_validator("height_cm", "weight_kg", mode="before")
    @classmethod
    def _parse_measurement(cls, v: Any) -> Optional[float]:
        return parse_measurement(v)

    @field_serializer("date")
    def _dump_date(self, v: Optional[datetime]) -> Optional[str]:
        return to_iso(v)


def record_sort_key(r: GrowthRecord):
    # Dateless records sort first; they stay in storage but are never charted.
    return (r.date is not None, r.date or datetime.min)


def normalize_gender(v: Any) -> Any:
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("m", "male"):
            return "Male"
        if s in ("f", "female"):
            return "Female"
    return v


class Child(_CamelModel):
    id: str = Field(..., min_length=1)
    name: str
    dob: Optional[date] = None
    gender: Gender = "Female"
    birth_weight_kg: Optional[float] = Field(default=None, alias="birthWeightKg")
    growth_records: List[GrowthRecord] = Field(default_factory=list, alias="growthRecords")
    vaccinations: Dict[str, OverrideStatus] = Field(default_factory=dict)

    @field_validator("dob", mode="before")
    @classmethod
    def _parse_dob(cls, v: Any) -> Optional[date]:
        # An unreadable stored dob is kept as None; derived views fall back to defaults.
        return as_date(v)

    @field_validator("gender", mode="before")
    @classmethod
    def _parse_gender(cls, v: Any) -> Any:
        return normalize_gender(v)

    @field_validator("birth_weight_kg", mode="before")
    @classmethod
    def _parse_birth_weight(cls, v: Any) -> Optional[float]:
        return parse_measurement(v)

    @field_validator("growth_records", mode="before")
    @classmethod
    def _drop_null_records(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [r for r in v if isinstance(r, (dict, GrowthRecord))]
        return [] if v is None else v

    @field_validator("vaccinations", mode="before")
    @classmethod
    def _keep_valid_overrides(cls, v: Any) -> Dict[str, str]:
        # Only Completed/Missed are persisted; anything else means "derive".
        if not isinstance(v, dict):
            return {}
        return {str(k): s for k, s in v.items() if s in OVERRIDE_STATUSES}

    @model_validator(mode="after")
    def _sort_records(self) -> "Child":
        self.growth_records = sorted(self.growth_records, key=record_sort_key)
        return self

    @field_serializer("dob")
    def _dump_dob(self, v: Optional[date]) -> Optional[str]:
        return to_iso(v)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Profile(BaseModel):
    """Stored profile document: children plus any unrelated sibling keys."""

    children: List[Child] = Field(default_factory=list)
    extra: Dict[str, Any] = Field(default_factory=dict)


class ChildCreate(BaseModel):
    name: str = ""
    dob: str = ""
    gender: Gender = "Female"
    birth_weight_kg: Optional[str | float] = Field(default=None, alias="birthWeightKg")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("gender", mode="before")
    @classmethod
    def _parse_gender(cls, v: Any) -> Any:
        return normalize_gender(v)


class GrowthRecordIn(BaseModel):
    date: Optional[str] = None
    height_cm: Optional[str | float] = Field(default=None, alias="heightCm")
    weight_kg: Optional[str | float] = Field(default=None, alias="weightKg")

    model_config = ConfigDict(populate_by_name=True)
