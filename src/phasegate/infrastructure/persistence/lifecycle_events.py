"""Lifecycle event store implementations."""

import json
import threading
from pathlib import Path
from typing import Any

from phasegate.domain.interfaces import LifecycleEventStoreInterface
from phasegate.domain.lifecycle_event import LifecycleEvent, LifecycleEventType


def _matches(
    event: LifecycleEvent,
    entity_id: str | None,
    event_type: LifecycleEventType | None,
) -> bool:
    return (entity_id is None or event.entity_id == entity_id) and (
        event_type is None or event.event_type == event_type
    )


class InMemoryLifecycleEventStore(LifecycleEventStoreInterface):
    """In-memory implementation for testing."""

    def __init__(self) -> None:
        self._events: list[LifecycleEvent] = []

    def store_event(self, event: LifecycleEvent) -> str:
        self._events.append(event)
        return event.event_id

    def get_events(
        self,
        entity_id: str | None = None,
        event_type: LifecycleEventType | None = None,
    ) -> list[LifecycleEvent]:
        return sorted(
            [e for e in self._events if _matches(e, entity_id, event_type)],
            key=lambda e: e.sequence,
        )


class FilesystemLifecycleEventStore(LifecycleEventStoreInterface):
    """Filesystem implementation storing events as one JSONL file."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path)
        self.events_dir = self.base_path / "events"
        self.events_dir.mkdir(parents=True, exist_ok=True)
        self.events_file = self.events_dir / "lifecycle.jsonl"
        self._lock = threading.Lock()

    def store_event(self, event: LifecycleEvent) -> str:
        line = json.dumps(self._event_to_dict(event))
        with self._lock, open(self.events_file, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        return event.event_id

    def get_events(
        self,
        entity_id: str | None = None,
        event_type: LifecycleEventType | None = None,
    ) -> list[LifecycleEvent]:
        if not self.events_file.exists():
            return []
        events: list[LifecycleEvent] = []
        with open(self.events_file, encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                event = self._dict_to_event(json.loads(line))
                if _matches(event, entity_id, event_type):
                    events.append(event)
        return sorted(events, key=lambda e: e.sequence)

    def _event_to_dict(self, event: LifecycleEvent) -> dict[str, Any]:
        """Serialize event to dict."""
        return {
            "event_id": event.event_id,
            "event_type": event.event_type.value,
            "entity_id": event.entity_id,
            "payload": dict(event.payload),
            "sequence": event.sequence,
            "created_at": event.created_at,
        }

    def _dict_to_event(self, data: dict[str, Any]) -> LifecycleEvent:
        """Deserialize dict to event."""
        return LifecycleEvent(
            event_id=data["event_id"],
            event_type=LifecycleEventType(data["event_type"]),
            entity_id=data.get("entity_id", ""),
            payload=data.get("payload", {}),
            sequence=data.get("sequence", 0),
            created_at=data.get("created_at", ""),
        )
