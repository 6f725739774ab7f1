from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, Request

from healthpath.growth.bmi import BmiThresholds
from healthpath.growth.reference import GrowthReferenceParams
from healthpath.schemas.child import Child
from healthpath.schemas.reference import VaccinationScheduleEntry
from healthpath.services.ai_analysis import AnalysisTracker, TextGenerator
from healthpath.services.child_repository import ChildRepository
from healthpath.services.events import EventBus, Subscription
from healthpath.services.growth_store import GrowthRecordStore


@dataclass
class AppState:
    config: Dict[str, Any]
    repository: ChildRepository
    bus: EventBus
    schedule: Tuple[VaccinationScheduleEntry, ...]
    reference_params: GrowthReferenceParams
    bmi_thresholds: BmiThresholds
    tracker: AnalysisTracker
    ai_client: Optional[TextGenerator] = None
    subscription: Optional[Subscription] = None

    def growth_store(self, child: Child) -> GrowthRecordStore:
        return GrowthRecordStore(
            child,
            reference_params=self.reference_params,
            bmi_thresholds=self.bmi_thresholds,
        )


def get_state(request: Request) -> AppState:
    return request.app.state.healthpath


def get_child_or_404(state: AppState, child_id: str) -> Child:
    child = state.repository.get(child_id)
    if child is None:
        raise HTTPException(status_code=404, detail=f"Child not found: {child_id}")
    return child
