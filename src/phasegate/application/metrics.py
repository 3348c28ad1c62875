"""Aggregate task and workflow statistics."""

import threading
from collections.abc import Iterable
from statistics import fmean

from phasegate.domain.models import (
    OrchestratorMetrics,
    Task,
    TaskStatus,
    Workflow,
    WorkflowStatus,
)


class ValidationTally:
    """Running counts of gate outcomes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.passed = 0
        self.consensus_achieved = 0

    def record(self, valid: bool, consensus_achieved: bool | None) -> None:
        with self._lock:
            if valid:
                self.passed += 1
            if consensus_achieved:
                self.consensus_achieved += 1


def summarize(
    tasks: Iterable[Task],
    workflows: Iterable[Workflow],
    tally: ValidationTally | None = None,
) -> OrchestratorMetrics:
    tasks = list(tasks)
    workflows = list(workflows)

    completed = [t for t in tasks if t.status is TaskStatus.COMPLETED]
    failed = [t for t in tasks if t.status is TaskStatus.FAILED]
    finished = len(completed) + len(failed)

    durations = [
        (t.completed_at - t.started_at).total_seconds()
        for t in completed
        if t.started_at is not None and t.completed_at is not None
    ]
    qualities = [t.quality for t in tasks if t.quality is not None]

    def count(status: WorkflowStatus) -> int:
        return sum(1 for w in workflows if w.status is status)

    return OrchestratorMetrics(
        total_tasks=len(tasks),
        completed_tasks=len(completed),
        failed_tasks=len(failed),
        success_rate=round(len(completed) / finished, 4) if finished else 0.0,
        average_task_seconds=round(fmean(durations), 4) if durations else 0.0,
        average_quality=round(fmean(qualities), 4) if qualities else None,
        active_workflows=count(WorkflowStatus.ACTIVE),
        completed_workflows=count(WorkflowStatus.COMPLETED),
        failed_workflows=count(WorkflowStatus.FAILED),
        consensus_achieved=tally.consensus_achieved if tally else 0,
        validations_passed=tally.passed if tally else 0,
    )
