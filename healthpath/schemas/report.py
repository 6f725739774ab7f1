from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import Field, field_serializer, field_validator

from healthpath.schemas.child import _CamelModel
from healthpath.utils.time import parse_to_aware, to_iso


ReportSource = Literal["manual", "upload", "camera"]


class LabResult(_CamelModel):
    id: Optional[str] = None
    test_name: str = Field(..., min_length=1, alias="testName")
    value: str = ""
    unit: str = ""
    normal_range: str = Field(default="", alias="normalRange")

    @field_validator("value", "unit", "normal_range", mode="before")
    @classmethod
    def _as_text(cls, v: Any) -> str:
        return "" if v is None else str(v)


class LabReport(_CamelModel):
    """A dated set of lab results, as kept on the historical dashboard."""

    id: str = Field(..., min_length=1)
    date: datetime
    source: ReportSource = "manual"
    results: List[LabResult] = Field(default_factory=list)
    ai_summary: Optional[str] = Field(default=None, alias="aiSummary")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Any:
        parsed = parse_to_aware(v)
        if parsed is None:
            raise ValueError(f"unreadable report date: {v!r}")
        return parsed

    @field_serializer("date")
    def _dump_date(self, v: datetime) -> Optional[str]:
        return to_iso(v)
