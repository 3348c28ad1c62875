"""
Task ownership and lifecycle enforcement.

TaskStore is the only writer of Task records. Every mutation runs under the
task's own lock, so concurrent callers touching the same id are serialized
while different ids proceed independently.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from phasegate.application.collaborators import CollaboratorGateway
from phasegate.application.lifecycle_emitter import LifecycleEventEmitter
from phasegate.application.locking import KeyedLocks
from phasegate.domain.config import OrchestratorConfig
from phasegate.domain.exceptions import (
    InvalidTransition,
    TaskNotFound,
    UnsupportedOperation,
    ValidationFailure,
)
from phasegate.domain.interfaces import ExecutionSubstrateInterface
from phasegate.domain.models import (
    TASK_TRANSITIONS,
    Task,
    TaskFilter,
    TaskPriority,
    TaskStatus,
    TaskType,
    TaskUpdate,
)
from phasegate.domain.task_defaults import (
    determine_max_agents,
    determine_strategy,
    parse_priority,
    parse_task_type,
    required_capabilities,
    requires_consensus,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TaskStore:
    """
    Owns every Task created through one engine.

    Args:
        config: Supplies the consensus and specs-driven switches
        events: Lifecycle emitter (a private one is created if omitted)
        substrate: Receives best-effort cancellation on delete
        gateway: Deadline wrapper for the cancellation call
        clock: Timestamp source
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        events: LifecycleEventEmitter | None = None,
        substrate: ExecutionSubstrateInterface | None = None,
        gateway: CollaboratorGateway | None = None,
        clock: Clock = _utcnow,
    ):
        self._config = config or OrchestratorConfig()
        self._events = events or LifecycleEventEmitter()
        self._substrate = substrate
        self._gateway = gateway
        self._clock = clock
        self._locks = KeyedLocks()
        self._tasks: dict[str, Task] = {}  # insertion ordered
        self._active: set[str] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_task(
        self,
        description: str,
        task_type: str | TaskType,
        priority: str | TaskPriority = TaskPriority.MEDIUM,
        dependencies: tuple[str, ...] = (),
    ) -> Task:
        """
        Create a pending task with defaults derived from (type, priority).

        Raises:
            ValidationFailure: Empty description
            UnsupportedOperation: Unknown type or priority
        """
        if not description or not description.strip():
            raise ValidationFailure("Task description must not be empty")
        kind = parse_task_type(task_type)
        level = parse_priority(priority)

        task = Task(
            task_id=str(uuid.uuid4()),
            description=description.strip(),
            task_type=kind,
            priority=level,
            created_at=self._clock(),
            strategy=determine_strategy(kind, level),
            dependencies=tuple(dependencies),
            required_capabilities=required_capabilities(kind),
            max_agents=determine_max_agents(kind),
            require_consensus=requires_consensus(
                kind, level, self._config.enable_consensus
            ),
            metadata={
                "type": kind.value,
                "specs_driven": self._config.enable_specs_driven,
            },
        )
        with self._locks.hold(task.task_id):
            self._tasks[task.task_id] = task

        logger.debug(
            "Created task %s (%s/%s, strategy=%s)",
            task.task_id,
            kind.value,
            level.value,
            task.strategy.value,
        )
        self._events.task_created(task.task_id, kind.value, level.value)
        return task

    def register(self, task: Task) -> None:
        """Adopt an existing task record (used when restoring workflows)."""
        with self._locks.hold(task.task_id):
            self._tasks[task.task_id] = task
            if task.status is TaskStatus.IN_PROGRESS:
                self._active.add(task.task_id)
            else:
                self._active.discard(task.task_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    def find_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """Matching tasks, highest priority first; ties keep insertion order."""
        tasks = [
            t
            for t in list(self._tasks.values())
            if task_filter is None or task_filter.matches(t)
        ]
        return sorted(tasks, key=lambda t: t.priority.weight, reverse=True)

    def active_task_ids(self) -> frozenset[str]:
        return frozenset(self._active)

    # =========================================================================
    # Mutation
    # =========================================================================

    def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        """
        Apply a restricted patch.

        Re-applying the current status changes nothing (timestamps are not
        re-stamped), so the same patch applied twice yields the same task.

        Raises:
            TaskNotFound: Unknown id
            InvalidTransition: Illegal status move
            ValidationFailure: Empty description or quality outside [0, 1]
        """
        with self._locks.hold(task_id):
            current = self.get_task(task_id)
            changes: dict[str, Any] = {}

            if update.description is not None:
                if not update.description.strip():
                    raise ValidationFailure("Task description must not be empty")
                changes["description"] = update.description.strip()
            if update.priority is not None:
                changes["priority"] = parse_priority(update.priority)
            if update.quality is not None:
                if not 0.0 <= update.quality <= 1.0:
                    raise ValidationFailure("Task quality must be between 0 and 1")
                changes["quality"] = update.quality
            if update.dependencies is not None:
                changes["dependencies"] = tuple(update.dependencies)
            if update.metadata is not None:
                changes["metadata"] = {**current.metadata, **update.metadata}

            if update.status is not None and update.status != current.status:
                changes.update(self._transition(current, TaskStatus(update.status)))

            task = replace(current, **changes) if changes else current
            self._tasks[task_id] = task

        self._events.task_updated(task.task_id, task.status.value, task.quality)
        return task

    def _transition(self, task: Task, status: TaskStatus) -> dict[str, Any]:
        if status not in TASK_TRANSITIONS[task.status]:
            raise InvalidTransition(task.task_id, task.status.value, status.value)

        changes: dict[str, Any] = {"status": status}
        if status is TaskStatus.IN_PROGRESS:
            changes["started_at"] = self._clock()
            self._active.add(task.task_id)
        else:
            self._active.discard(task.task_id)
            if status is TaskStatus.COMPLETED:
                changes["completed_at"] = self._clock()
        return changes

    def revert_to_pending(self, task_id: str) -> Task:
        """
        Undo an in-progress claim after an interrupted run.

        Only in_progress tasks move; anything else is returned unchanged.
        """
        with self._locks.hold(task_id):
            current = self.get_task(task_id)
            if current.status is not TaskStatus.IN_PROGRESS:
                return current
            task = replace(current, status=TaskStatus.PENDING, started_at=None)
            self._tasks[task_id] = task
            self._active.discard(task_id)

        logger.debug("Reverted task %s to pending", task_id)
        self._events.task_updated(task.task_id, task.status.value, task.quality)
        return task

    def assign_workflow(self, task_id: str, workflow_id: str) -> Task:
        """
        Set the task's owning workflow.

        Raises:
            TaskNotFound: Unknown id
            UnsupportedOperation: Task already belongs to another workflow
        """
        with self._locks.hold(task_id):
            current = self.get_task(task_id)
            if current.workflow_id == workflow_id:
                return current
            if current.workflow_id is not None:
                raise UnsupportedOperation(
                    f"Task {task_id} already belongs to workflow "
                    f"{current.workflow_id}"
                )
            task = replace(current, workflow_id=workflow_id)
            self._tasks[task_id] = task
        return task

    def delete_task(self, task_id: str) -> bool:
        """
        Remove a task. Returns whether it existed.

        Cancellation on the execution substrate is best-effort: a failure is
        logged and never raised.
        """
        with self._locks.hold(task_id):
            existed = self._tasks.pop(task_id, None) is not None
            self._active.discard(task_id)

        if not existed:
            return False

        self._cancel(task_id)
        self._events.task_deleted(task_id)
        return True

    def _cancel(self, task_id: str) -> None:
        if self._substrate is None:
            return
        try:
            if self._gateway is not None:
                self._gateway.call(
                    "cancel_task",
                    self._substrate.cancel_task,
                    task_id,
                    timeout=self._config.session_timeout,
                )
            else:
                self._substrate.cancel_task(task_id)
        except Exception as e:
            logger.warning("Failed to cancel task %s: %s", task_id, e)
