"""Lifecycle event emission service."""

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone

from phasegate.domain.interfaces import LifecycleEventStoreInterface
from phasegate.domain.lifecycle_event import (
    LifecycleEvent,
    LifecycleEventType,
    PayloadValue,
)

logger = logging.getLogger(__name__)

Listener = Callable[[LifecycleEvent], None]


class LifecycleEventEmitter:
    """Emits lifecycle events to listeners and an optional store.

    Injected into the engine; there is no process-wide emitter. Events carry
    a monotonically increasing sequence number so listeners can rely on
    emission order.
    """

    def __init__(
        self,
        event_store: LifecycleEventStoreInterface | None = None,
        listeners: Iterable[Listener] = (),
    ) -> None:
        self._store = event_store
        self._listeners: list[Listener] = list(listeners)
        self._sequence = 0
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def emit(
        self,
        event_type: LifecycleEventType,
        entity_id: str,
        payload: Mapping[str, PayloadValue] | None = None,
    ) -> LifecycleEvent:
        with self._lock:
            self._sequence += 1
            event = LifecycleEvent(
                event_id=str(uuid.uuid4()),
                event_type=event_type,
                entity_id=entity_id,
                payload=dict(payload or {}),
                sequence=self._sequence,
                created_at=self._now(),
            )
            if self._store is not None:
                self._store.store_event(event)

        logger.info("%s %s", event_type.value, entity_id or "-")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken observer must not abort the operation that emitted
                logger.exception(
                    "Lifecycle listener %r failed on %s", listener, event_type.value
                )
        return event

    def task_created(self, task_id: str, task_type: str, priority: str) -> None:
        """Emit task-created."""
        self.emit(
            LifecycleEventType.TASK_CREATED,
            task_id,
            {"type": task_type, "priority": priority},
        )

    def task_updated(
        self, task_id: str, status: str, quality: float | None = None
    ) -> None:
        """Emit task-updated with the status after the update."""
        self.emit(
            LifecycleEventType.TASK_UPDATED,
            task_id,
            {"status": status, "quality": quality},
        )

    def task_deleted(self, task_id: str) -> None:
        self.emit(LifecycleEventType.TASK_DELETED, task_id)

    def workflow_created(self, workflow_id: str, name: str) -> None:
        self.emit(LifecycleEventType.WORKFLOW_CREATED, workflow_id, {"name": name})

    def workflow_updated(self, workflow_id: str, task_id: str, task_count: int) -> None:
        """Emit workflow-updated after a task was added."""
        self.emit(
            LifecycleEventType.WORKFLOW_UPDATED,
            workflow_id,
            {"task_id": task_id, "task_count": task_count},
        )

    def workflow_executing(self, workflow_id: str, task_count: int) -> None:
        self.emit(
            LifecycleEventType.WORKFLOW_EXECUTING,
            workflow_id,
            {"task_count": task_count},
        )

    def workflow_executed(
        self, workflow_id: str, status: str, quality: float | None
    ) -> None:
        self.emit(
            LifecycleEventType.WORKFLOW_EXECUTED,
            workflow_id,
            {"status": status, "quality": quality},
        )

    def content_validated(
        self, content_type: str, valid: bool, score: float, task_id: str = ""
    ) -> None:
        self.emit(
            LifecycleEventType.CONTENT_VALIDATED,
            task_id,
            {"type": content_type, "valid": valid, "score": score},
        )
