from __future__ import annotations

from collections import defaultdict
from functools import lru_cache
from typing import Callable, Dict, List

from healthpath.logging_config import get_logger


logger = get_logger(__name__)

Callback = Callable[[], None]


class Subscription:
    """Handle returned by EventBus.subscribe. Unsubscribing twice is harmless."""

    def __init__(self, bus: "EventBus", name: str, callback: Callback) -> None:
        self._bus = bus
        self.name = name
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._bus._remove(self.name, self.callback)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.unsubscribe()


class EventBus:
    """
    Named broadcast events with synchronous, best-effort delivery.
    A subscriber that raises is logged and skipped; the publisher never sees it.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callback]] = defaultdict(list)

    def subscribe(self, name: str, callback: Callback) -> Subscription:
        self._subscribers[name].append(callback)
        return Subscription(self, name, callback)

    def _remove(self, name: str, callback: Callback) -> None:
        callbacks = self._subscribers.get(name) or []
        if callback in callbacks:
            callbacks.remove(callback)

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name) or [])

    def publish(self, name: str) -> int:
        """Notify every subscriber of `name`; returns how many ran without error."""
        delivered = 0
        for callback in list(self._subscribers.get(name) or []):
            try:
                callback()
                delivered += 1
            except Exception as e:
                logger.warning("Event subscriber failed", event=name, error=str(e))
        return delivered


@lru_cache
def get_event_bus() -> EventBus:
    """Process-wide bus shared by independent dashboards."""
    return EventBus()
