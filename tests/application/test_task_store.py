"""Tests for TaskStore: creation defaults, ordering and lifecycle rules."""

import logging
from datetime import UTC, datetime, timedelta

import pytest

from phasegate.application.collaborators import CollaboratorGateway
from phasegate.application.lifecycle_emitter import LifecycleEventEmitter
from phasegate.application.task_store import TaskStore
from phasegate.domain.config import OrchestratorConfig
from phasegate.domain.exceptions import (
    InvalidTransition,
    TaskNotFound,
    UnsupportedOperation,
    ValidationFailure,
)
from phasegate.domain.interfaces import ExecutionSubstrateInterface
from phasegate.domain.lifecycle_event import LifecycleEventType
from phasegate.domain.models import (
    TaskFilter,
    TaskPriority,
    TaskStatus,
    TaskStrategy,
    TaskType,
    TaskUpdate,
)
from phasegate.infrastructure.persistence.lifecycle_events import (
    InMemoryLifecycleEventStore,
)
from phasegate.infrastructure.substrate import InProcessSubstrate


class TickingClock:
    """Returns a new second on every call."""

    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class BrokenSubstrate(ExecutionSubstrateInterface):
    def initialize(self, config: OrchestratorConfig) -> str:
        return "s"

    def cancel_task(self, task_id: str) -> None:
        raise ConnectionError("substrate unreachable")


@pytest.fixture
def store_events() -> InMemoryLifecycleEventStore:
    return InMemoryLifecycleEventStore()


@pytest.fixture
def store(store_events) -> TaskStore:
    return TaskStore(
        OrchestratorConfig(),
        LifecycleEventEmitter(store_events),
        clock=TickingClock(),
    )


def _run(store: TaskStore, task_id: str, final: TaskStatus) -> None:
    store.update_task(task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS))
    store.update_task(task_id, TaskUpdate(status=final))


class TestCreateTask:
    """Tests for task creation and derived defaults."""

    def test_critical_spec_defaults(self, store):
        """A critical spec runs sequentially and requires consensus."""
        task = store.create_task("Add login", "spec", "critical")

        assert task.strategy is TaskStrategy.SEQUENTIAL
        assert task.require_consensus is True
        assert task.max_agents == 2
        assert task.required_capabilities == (
            "requirements_analysis",
            "user_story_creation",
        )
        assert task.status is TaskStatus.PENDING
        assert task.created_at is not None

    def test_metadata_records_type_and_mode(self, store):
        """Metadata records the type and the specs-driven flag."""
        task = store.create_task("Add login", TaskType.DESIGN)

        assert task.metadata == {"type": "design", "specs_driven": True}
        assert task.priority is TaskPriority.MEDIUM

    def test_ids_are_unique(self, store):
        ids = {store.create_task(f"task {i}", "test").task_id for i in range(20)}
        assert len(ids) == 20

    def test_consensus_disabled_in_config(self):
        """Globally disabled consensus is never required."""
        store = TaskStore(OrchestratorConfig(enable_consensus=False))

        task = store.create_task("Add login", "spec", "critical")

        assert task.require_consensus is False

    def test_empty_description_rejected(self, store):
        """Blank descriptions raise ValidationFailure."""
        with pytest.raises(ValidationFailure):
            store.create_task("   ", "spec")
        assert len(store) == 0

    def test_unknown_type_rejected(self, store):
        """Unknown task types raise UnsupportedOperation."""
        with pytest.raises(UnsupportedOperation):
            store.create_task("Deploy", "deploy")

    def test_emits_task_created(self, store, store_events):
        task = store.create_task("Add login", "spec", "high")

        events = store_events.get_events(task.task_id)
        assert [e.event_type for e in events] == [LifecycleEventType.TASK_CREATED]
        assert events[0].payload == {"type": "spec", "priority": "high"}


class TestGetTasks:
    """Tests for task lookup and priority ordering."""

    def test_highest_priority_first(self, store):
        """get_tasks lists critical before low."""
        low = store.create_task("low", "spec", "low")
        critical = store.create_task("critical", "spec", "critical")
        medium = store.create_task("medium", "spec", "medium")

        ids = [t.task_id for t in store.get_tasks()]

        assert ids == [critical.task_id, medium.task_id, low.task_id]

    def test_ties_keep_insertion_order(self, store):
        """Equal priorities keep creation order."""
        first = store.create_task("first", "spec", "high")
        second = store.create_task("second", "design", "high")
        third = store.create_task("third", "test", "high")

        ids = [t.task_id for t in store.get_tasks()]

        assert ids == [first.task_id, second.task_id, third.task_id]

    def test_filter(self, store):
        spec = store.create_task("spec", "spec")
        store.create_task("design", "design")

        tasks = store.get_tasks(TaskFilter(task_type=TaskType.SPEC))

        assert [t.task_id for t in tasks] == [spec.task_id]

    def test_unknown_id(self, store):
        """Unknown ids raise TaskNotFound."""
        with pytest.raises(TaskNotFound):
            store.get_task("missing")
        assert store.find_task("missing") is None


class TestUpdateTask:
    """Tests for task patches and status transitions."""

    def test_lifecycle_stamps(self, store):
        """Moving through the lifecycle stamps started_at and completed_at."""
        task = store.create_task("Add login", "spec")

        started = store.update_task(
            task.task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS)
        )
        done = store.update_task(task.task_id, TaskUpdate(status=TaskStatus.COMPLETED))

        assert started.started_at is not None
        assert done.completed_at is not None
        assert done.completed_at > done.started_at
        assert done.task_id not in store.active_task_ids()

    def test_in_progress_is_tracked_as_active(self, store):
        """In-progress tasks are in the active set until they finish."""
        task = store.create_task("Add login", "spec")

        store.update_task(task.task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS))

        assert store.active_task_ids() == frozenset({task.task_id})

    def test_reapplying_status_is_idempotent(self, store):
        """Setting the current status again changes nothing."""
        task = store.create_task("Add login", "spec")
        update = TaskUpdate(status=TaskStatus.IN_PROGRESS)

        first = store.update_task(task.task_id, update)
        second = store.update_task(task.task_id, update)

        assert first == second

    def test_cannot_skip_in_progress(self, store):
        """pending cannot jump straight to completed."""
        task = store.create_task("Add login", "spec")

        with pytest.raises(InvalidTransition):
            store.update_task(task.task_id, TaskUpdate(status=TaskStatus.COMPLETED))

    @pytest.mark.parametrize("final", [TaskStatus.COMPLETED, TaskStatus.FAILED])
    def test_terminal_statuses_are_final(self, store, final):
        """Completed and failed tasks reject further status moves."""
        task = store.create_task("Add login", "spec")
        _run(store, task.task_id, final)

        with pytest.raises(InvalidTransition):
            store.update_task(task.task_id, TaskUpdate(status=TaskStatus.PENDING))
        assert store.get_task(task.task_id).status is final

    def test_metadata_is_merged(self, store):
        """Metadata patches merge into existing metadata."""
        task = store.create_task("Add login", "spec")

        updated = store.update_task(task.task_id, TaskUpdate(metadata={"note": "x"}))

        assert updated.metadata == {
            "type": "spec",
            "specs_driven": True,
            "note": "x",
        }

    def test_quality_out_of_range(self, store):
        task = store.create_task("Add login", "spec")

        with pytest.raises(ValidationFailure):
            store.update_task(task.task_id, TaskUpdate(quality=1.2))

    def test_failed_update_leaves_task_unchanged(self, store):
        """A rejected patch leaves the stored task as it was."""
        task = store.create_task("Add login", "spec")

        with pytest.raises(InvalidTransition):
            store.update_task(
                task.task_id,
                TaskUpdate(description="renamed", status=TaskStatus.COMPLETED),
            )

        assert store.get_task(task.task_id) == task

    def test_unknown_id(self, store):
        """Unknown ids raise TaskNotFound."""
        with pytest.raises(TaskNotFound):
            store.update_task("missing", TaskUpdate(quality=0.5))

    def test_emits_task_updated_with_new_status(self, store, store_events):
        task = store.create_task("Add login", "spec")

        store.update_task(task.task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS))

        event = store_events.get_events(
            task.task_id, LifecycleEventType.TASK_UPDATED
        )[0]
        assert event.payload["status"] == "in_progress"


class TestRevertAndAssign:
    """Tests for reverting interrupted tasks and workflow ownership."""

    def test_revert_in_progress_task(self, store):
        """An interrupted task goes back to pending without started_at."""
        task = store.create_task("Add login", "spec")
        store.update_task(task.task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS))

        reverted = store.revert_to_pending(task.task_id)

        assert reverted.status is TaskStatus.PENDING
        assert reverted.started_at is None
        assert store.active_task_ids() == frozenset()

    def test_revert_leaves_terminal_task_alone(self, store):
        """Reverting a finished task is a no-op."""
        task = store.create_task("Add login", "spec")
        _run(store, task.task_id, TaskStatus.COMPLETED)

        assert store.revert_to_pending(task.task_id).status is TaskStatus.COMPLETED

    def test_assign_workflow_once(self, store):
        """A task belongs to one workflow only."""
        task = store.create_task("Add login", "spec")

        assert store.assign_workflow(task.task_id, "wf-1").workflow_id == "wf-1"
        assert store.assign_workflow(task.task_id, "wf-1").workflow_id == "wf-1"
        with pytest.raises(UnsupportedOperation):
            store.assign_workflow(task.task_id, "wf-2")


class TestDeleteTask:
    """Tests for task deletion and substrate cancellation."""

    def test_delete_existing_task(self, store, store_events):
        task = store.create_task("Add login", "spec")

        assert store.delete_task(task.task_id) is True
        assert store.find_task(task.task_id) is None
        assert store_events.get_events(task.task_id)[-1].event_type == (
            LifecycleEventType.TASK_DELETED
        )

    def test_delete_missing_task(self, store):
        assert store.delete_task("missing") is False

    def test_delete_cancels_on_substrate(self):
        """Deleting a task cancels it on the substrate."""
        substrate = InProcessSubstrate()
        gateway = CollaboratorGateway()
        store = TaskStore(substrate=substrate, gateway=gateway)
        task = store.create_task("Add login", "spec")

        store.delete_task(task.task_id)
        gateway.close()

        assert substrate.cancelled == [task.task_id]

    def test_cancel_failure_is_logged_not_raised(self, caplog):
        """A substrate that fails to cancel is logged, and the delete still succeeds."""
        store = TaskStore(substrate=BrokenSubstrate())
        task = store.create_task("Add login", "spec")

        with caplog.at_level(logging.WARNING):
            assert store.delete_task(task.task_id) is True

        assert "Failed to cancel task" in caplog.text
        assert "substrate unreachable" in caplog.text
