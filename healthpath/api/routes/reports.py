from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from healthpath.api.state import AppState, get_state
from healthpath.schemas.report import LabReport
from healthpath.services.ai_analysis import analyze_report


router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/analysis")
def report_analysis(report: LabReport, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    """Summarise one historical lab report; the report comes back with aiSummary filled in."""
    summary = analyze_report(report, state.ai_client)
    return report.model_copy(update={"ai_summary": summary}).model_dump(by_alias=True)
