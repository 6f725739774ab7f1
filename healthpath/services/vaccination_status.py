from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from healthpath.logging_config import get_logger
from healthpath.schemas.child import OVERRIDE_STATUSES, Child, VaccineStatus
from healthpath.schemas.reference import VaccinationScheduleEntry
from healthpath.utils.time import as_date, today as _today


logger = get_logger(__name__)


@dataclass(frozen=True)
class VaccineStatusResult:
    state: VaccineStatus
    due_date: Optional[date]


def due_date_for(vaccine: VaccinationScheduleEntry, dob: Any) -> Optional[date]:
    birth = as_date(dob)
    if birth is None:
        return None
    return birth + timedelta(weeks=vaccine.age_in_weeks)


def resolve_status(
    vaccine: VaccinationScheduleEntry, child: Child, today: Any = None
) -> VaccineStatusResult:
    """
    Derive the lifecycle state of one vaccine for one child.

    - no usable dob -> Upcoming with no due date
    - a Completed/Missed override always wins
    - otherwise Upcoming while the due date is in the future, Pending once it
      is today or past. Pending is never promoted to Missed automatically.
    """
    due = due_date_for(vaccine, child.dob)
    if due is None:
        return VaccineStatusResult(state="Upcoming", due_date=None)

    stored = (child.vaccinations or {}).get(vaccine.id)
    if stored in OVERRIDE_STATUSES:
        return VaccineStatusResult(state=stored, due_date=due)

    now = as_date(today) if today is not None else _today()
    if now is None:
        now = _today()

    if due > now:
        return VaccineStatusResult(state="Upcoming", due_date=due)
    return VaccineStatusResult(state="Pending", due_date=due)


def mark_vaccine(child: Child, vaccine_id: str, status: str) -> bool:
    """Record a manual Completed/Missed override. Other values are ignored."""
    if status not in OVERRIDE_STATUSES:
        logger.info("Ignoring vaccine override", child_id=child.id, vaccine_id=vaccine_id, status=status)
        return False
    child.vaccinations = {**(child.vaccinations or {}), vaccine_id: status}
    return True


def reset_vaccine(child: Child, vaccine_id: str) -> None:
    """Clear an override so the status is derived again."""
    updated = dict(child.vaccinations or {})
    updated.pop(vaccine_id, None)
    child.vaccinations = updated


def vaccination_overview(
    child: Child, schedule: Iterable[VaccinationScheduleEntry], today: Any = None
) -> List[Dict[str, Any]]:
    """One row per schedule entry with its resolved state, in schedule order."""
    rows: List[Dict[str, Any]] = []
    for vaccine in schedule:
        result = resolve_status(vaccine, child, today=today)
        rows.append(
            {
                "vaccine_id": vaccine.id,
                "name": vaccine.name,
                "age_description": vaccine.age_description,
                "status": result.state,
                "due_date": result.due_date.isoformat() if result.due_date else None,
            }
        )
    return rows
