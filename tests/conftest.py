from __future__ import annotations

from datetime import date

import pytest

from healthpath.schemas.child import Child
from healthpath.schemas.reference import VaccinationScheduleEntry
from healthpath.services.events import EventBus
from healthpath.services.storage import MemoryStorage


@pytest.fixture
def six_week_vaccine() -> VaccinationScheduleEntry:
    return VaccinationScheduleEntry(
        id="dtp1_ipv1_hib1_hepb2",
        name="DTP 1, IPV 1, Hib 1, Hep B 2",
        age_in_weeks=6,
        age_description="6 Weeks",
    )


@pytest.fixture
def child() -> Child:
    return Child(id="c1", name="Asha", dob=date(2024, 1, 1), gender="Female")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


class FakeAI:
    def __init__(self, reply: str = "***Disclaimer***\n1. **Growth Summary:** steady", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError("upstream unavailable")
        return self.reply


@pytest.fixture
def fake_ai() -> FakeAI:
    return FakeAI()
