"""
Notifications emitted by custody and governance operations.

Events are appended to an in-memory log and forwarded to subscribers. Delivery
is fire-and-forget: a failing subscriber never affects the operation that
emitted the event.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    LOCKED = "locked"
    RELEASED = "released"
    PROPOSAL_CREATED = "proposal_created"
    VOTE_CAST = "vote_cast"
    PROPOSAL_EXECUTED = "proposal_executed"


@dataclass
class VaultEvent:
    """A single notification with the identifiers and amounts of the operation."""

    event_type: EventType
    payload: dict[str, Any]
    timestamp: int = field(default_factory=lambda: int(time.time()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "payload": dict(self.payload),
            "timestamp": self.timestamp,
        }


EventListener = Callable[[VaultEvent], None]


class EventLog:
    def __init__(self) -> None:
        self.events: list[VaultEvent] = []
        self._listeners: list[EventListener] = []
        self._lock = threading.RLock()

    def subscribe(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit(self, event_type: EventType, timestamp: int, **payload: Any) -> VaultEvent:
        event = VaultEvent(event_type=event_type, payload=payload, timestamp=timestamp)
        with self._lock:
            self.events.append(event)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Event listener failed",
                    extra={"event": "events.listener_failed", "event_type": event_type.value},
                )
        return event

    def filter(self, event_type: EventType) -> list[VaultEvent]:
        with self._lock:
            return [event for event in self.events if event.event_type is event_type]

    def __len__(self) -> int:
        return len(self.events)
