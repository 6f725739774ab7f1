from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from healthpath.api.state import AppState, get_state
from healthpath.render.markdown import render
from healthpath.services.reminders import upcoming_vaccination_reminders


router = APIRouter(tags=["profile"])


class RenderRequest(BaseModel):
    text: str = ""
    escape: bool = False


@router.post("/profile/save")
def save_profile(state: AppState = Depends(get_state)) -> Dict[str, Any]:
    state.repository.save()
    return {"status": "saved", "children": len(state.repository.children)}


@router.post("/profile/reload")
def reload_profile(state: AppState = Depends(get_state)) -> Dict[str, Any]:
    profile = state.repository.load()
    return {"status": "loaded", "children": len(profile.children)}


@router.get("/reminders")
def reminders(state: AppState = Depends(get_state)) -> Dict[str, Any]:
    found = upcoming_vaccination_reminders(
        state.repository.children,
        state.schedule,
        window_days=int(state.config["reminders"]["window_days"]),
    )
    return {"value": [r.as_dict() for r in found], "Count": len(found)}


@router.post("/render")
def render_markdown(req: RenderRequest) -> Dict[str, str]:
    return {"html": render(req.text, escape=req.escape)}
