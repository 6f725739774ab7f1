from __future__ import annotations

from typing import Any, Dict, List, Literal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel, ValidationError

from healthpath.api.state import AppState, get_child_or_404, get_state
from healthpath.growth.age import age, format_age
from healthpath.schemas.child import Child, ChildCreate, GrowthRecordIn
from healthpath.services.vaccination_status import mark_vaccine, reset_vaccine, vaccination_overview


router = APIRouter(prefix="/children", tags=["children"])


class VaccineStatusIn(BaseModel):
    status: Literal["Completed", "Missed"]


def _child_out(child: Child) -> Dict[str, Any]:
    return child.to_storage()


@router.get("")
def list_children(state: AppState = Depends(get_state)) -> List[Dict[str, Any]]:
    return [_child_out(c) for c in state.repository.children]


@router.post("", status_code=201)
def create_child(inp: ChildCreate, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    child = state.repository.add(
        name=inp.name,
        dob=inp.dob,
        gender=inp.gender,
        birth_weight_kg=inp.birth_weight_kg,
    )
    if child is None:
        raise HTTPException(status_code=400, detail="A child needs a name and a valid date of birth")
    return _child_out(child)


@router.get("/{child_id}")
def get_child(child_id: str, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    return _child_out(get_child_or_404(state, child_id))


@router.put("/{child_id}")
def update_child(child_id: str, payload: Dict[str, Any], state: AppState = Depends(get_state)) -> Dict[str, Any]:
    current = get_child_or_404(state, child_id)
    merged = {**current.to_storage(), **payload, "id": child_id}
    try:
        updated = Child.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid child: {e.error_count()} error(s)")
    if not state.repository.update(updated):
        raise HTTPException(status_code=400, detail="A child needs a name and a valid date of birth")
    return _child_out(updated)


@router.delete("/{child_id}")
def delete_child(child_id: str, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    return {"deleted": state.repository.remove(child_id)}


@router.get("/{child_id}/age")
def child_age(child_id: str, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    a = age(get_child_or_404(state, child_id).dob)
    return {"years": a.years, "months": a.months, "total_months": a.total_months, "label": format_age(a)}


@router.post("/{child_id}/growth", status_code=201)
def add_growth_record(child_id: str, inp: GrowthRecordIn, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    child = get_child_or_404(state, child_id)
    state.growth_store(child).add_record(date=inp.date, height_cm=inp.height_cm, weight_kg=inp.weight_kg)
    return _child_out(child)


@router.get("/{child_id}/growth/chart")
def growth_chart(child_id: str, state: AppState = Depends(get_state)) -> List[Dict[str, Any]]:
    child = get_child_or_404(state, child_id)
    return [p.as_dict() for p in state.growth_store(child).chart_series()]


@router.get("/{child_id}/growth/reference")
def growth_reference(
    child_id: str, months: int = Query(60, ge=0, le=240), state: AppState = Depends(get_state)
) -> List[Dict[str, Any]]:
    child = get_child_or_404(state, child_id)
    return state.growth_store(child).reference_frame(months).round(1).to_dict(orient="records")


@router.get("/{child_id}/bmi")
def bmi(child_id: str, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    child = get_child_or_404(state, child_id)
    result = state.growth_store(child).latest_bmi()
    if result is None:
        return {"value": None, "category": None}
    return {"value": result.value, "category": result.category}


@router.get("/{child_id}/vaccinations")
def vaccinations(child_id: str, state: AppState = Depends(get_state)) -> List[Dict[str, Any]]:
    child = get_child_or_404(state, child_id)
    return vaccination_overview(child, state.schedule)


@router.put("/{child_id}/vaccinations/{vaccine_id}")
def set_vaccination(
    child_id: str, vaccine_id: str, inp: VaccineStatusIn, state: AppState = Depends(get_state)
) -> List[Dict[str, Any]]:
    child = get_child_or_404(state, child_id)
    if vaccine_id not in {v.id for v in state.schedule}:
        raise HTTPException(status_code=404, detail=f"Unknown vaccine: {vaccine_id}")
    mark_vaccine(child, vaccine_id, inp.status)
    return vaccination_overview(child, state.schedule)


@router.delete("/{child_id}/vaccinations/{vaccine_id}")
def reset_vaccination(child_id: str, vaccine_id: str, state: AppState = Depends(get_state)) -> List[Dict[str, Any]]:
    child = get_child_or_404(state, child_id)
    reset_vaccine(child, vaccine_id)
    return vaccination_overview(child, state.schedule)


@router.post("/{child_id}/analysis", status_code=202)
def request_analysis(
    child_id: str, background: BackgroundTasks, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    snapshot = get_child_or_404(state, child_id).model_copy(deep=True)
    state.tracker.start(child_id)
    background.add_task(state.tracker.run, snapshot, state.ai_client)
    return {"child_id": child_id, "loading": True}


@router.get("/{child_id}/analysis")
def get_analysis(child_id: str, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    get_child_or_404(state, child_id)
    slot = state.tracker.get(child_id)
    return {"child_id": child_id, "loading": slot.loading, "analysis": slot.analysis}
