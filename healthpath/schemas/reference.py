from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VaccinationScheduleEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    age_in_weeks: int = Field(..., ge=0)
    age_description: str


class PathologyTest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    purpose: str
    detects: str
    normal_range: str
    sample_type: str
    interpretation_tips: str
    system: Optional[str] = None


class RadiologyTest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    sub_category: str
    purpose: str
