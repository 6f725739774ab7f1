from __future__ import annotations

import json
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from healthpath.logging_config import get_logger
from healthpath.schemas.child import Child, Profile, parse_measurement
from healthpath.services.events import EventBus, Subscription
from healthpath.services.growth_store import GrowthRecordStore
from healthpath.services.storage import StoragePort
from healthpath.utils.time import as_date, parse_to_aware


logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "healthpath_user_profile"
PROFILE_UPDATED_EVENT = "reportsUpdated"


def parse_profile(raw: Optional[str]) -> Profile:
    """
    Parse a stored profile document.

    Missing or malformed JSON gives an empty profile. Child entries that are
    not objects, have no id, or fail validation are dropped; other top-level
    keys are carried in Profile.extra so a save does not lose them.
    """
    if not raw:
        return Profile()
    try:
        doc = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored profile is not valid JSON, using empty profile", error=str(e))
        return Profile()
    if not isinstance(doc, dict):
        logger.warning("Stored profile is not an object, using empty profile", kind=type(doc).__name__)
        return Profile()

    extra = {k: v for k, v in doc.items() if k != "children"}
    entries = doc.get("children")
    if not isinstance(entries, list):
        return Profile(extra=extra)

    children: List[Child] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("id"):
            logger.warning("Dropping stored child without id")
            continue
        try:
            children.append(Child.model_validate(entry))
        except ValidationError as e:
            logger.warning("Dropping invalid stored child", child_id=entry.get("id"), errors=e.error_count())
    return Profile(children=children, extra=extra)


def _is_valid_child(child: Child) -> bool:
    return bool(child.name and child.name.strip()) and as_date(child.dob) is not None


class ChildRepository:
    """
    In-memory set of child profiles over a key-value storage port.

    Mutations stay in memory until save(), which writes the whole collection
    in one document and broadcasts the change event.
    """

    def __init__(
        self,
        storage: StoragePort,
        bus: Optional[EventBus] = None,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        event_name: str = PROFILE_UPDATED_EVENT,
    ) -> None:
        self.storage = storage
        self.bus = bus
        self.storage_key = storage_key
        self.event_name = event_name
        self._children: List[Child] = []

    @property
    def children(self) -> List[Child]:
        return list(self._children)

    def load(self) -> Profile:
        profile = parse_profile(self.storage.get(self.storage_key))
        self._children = list(profile.children)
        return profile

    def get(self, child_id: str) -> Optional[Child]:
        for c in self._children:
            if c.id == child_id:
                return c
        return None

    def add(
        self,
        name: str,
        dob: Any,
        gender: str = "Female",
        birth_weight_kg: Any = None,
    ) -> Optional[Child]:
        """Create a child; returns None (and changes nothing) for an empty name or unreadable dob."""
        birth = as_date(dob)
        if not name or not str(name).strip() or birth is None:
            logger.info("Rejected new child", has_name=bool(name), dob=str(dob))
            return None

        try:
            child = Child(
                id=uuid.uuid4().hex,
                name=str(name).strip(),
                dob=birth,
                gender=gender,
                birth_weight_kg=birth_weight_kg,
            )
        except ValidationError as e:
            logger.info("Rejected new child", errors=e.error_count())
            return None

        weight = parse_measurement(birth_weight_kg)
        if weight is not None:
            GrowthRecordStore(child).add_record(date=parse_to_aware(birth), weight_kg=weight)

        self._children.append(child)
        return child

    def update(self, child: Child) -> bool:
        if not _is_valid_child(child):
            logger.info("Rejected child update", child_id=child.id)
            return False
        for i, c in enumerate(self._children):
            if c.id == child.id:
                self._children[i] = child
                return True
        return False

    def remove(self, child_id: str) -> bool:
        before = len(self._children)
        self._children = [c for c in self._children if c.id != child_id]
        return len(self._children) != before

    def save(self) -> None:
        existing = self.storage.get(self.storage_key)
        doc: Dict[str, Any] = {}
        if existing:
            try:
                parsed = json.loads(existing)
                if isinstance(parsed, dict):
                    doc = parsed
            except ValueError:
                logger.warning("Overwriting unreadable stored profile", key=self.storage_key)

        doc["children"] = [c.to_storage() for c in self._children]
        self.storage.set(self.storage_key, json.dumps(doc, ensure_ascii=False))
        logger.info("Profile saved", children=len(self._children))

        if self.bus is not None:
            self.bus.publish(self.event_name)

    def watch(self) -> Subscription:
        """Reload whenever any component announces a saved profile."""
        if self.bus is None:
            raise RuntimeError("ChildRepository.watch() needs an EventBus")
        return self.bus.subscribe(self.event_name, self.load)
