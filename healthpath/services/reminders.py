from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List

from healthpath.schemas.child import Child
from healthpath.schemas.reference import VaccinationScheduleEntry
from healthpath.services.vaccination_status import due_date_for
from healthpath.utils.time import as_date, today as _today


@dataclass(frozen=True)
class Reminder:
    id: str
    child_id: str
    title: str
    message: str
    due_in_days: int
    type: str = "Child Health"
    link: str = "child-health"

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def upcoming_vaccination_reminders(
    children: Iterable[Child],
    schedule: Iterable[VaccinationScheduleEntry],
    today: Any = None,
    window_days: int = 7,
) -> List[Reminder]:
    """Vaccines due within the next `window_days` days that are not marked Completed."""
    now = as_date(today) if today is not None else _today()
    schedule = list(schedule)
    out: List[Reminder] = []
    for child in children:
        if child is None or as_date(child.dob) is None:
            continue
        overrides = child.vaccinations or {}
        for vaccine in schedule:
            if overrides.get(vaccine.id) == "Completed":
                continue
            due = due_date_for(vaccine, child.dob)
            days = (due - now).days
            if 0 < days <= window_days:
                out.append(
                    Reminder(
                        id=f"child-{child.id}-vaccine-{vaccine.id}",
                        child_id=child.id,
                        title="Upcoming Vaccination",
                        message=f"{child.name}'s {vaccine.name} vaccine is due in {days} days.",
                        due_in_days=days,
                    )
                )
    return out
