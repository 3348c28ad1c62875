"""Lifecycle notification models for tasks, workflows and validations."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class LifecycleEventType(str, Enum):
    """Named lifecycle notifications."""

    TASK_CREATED = "task-created"
    TASK_UPDATED = "task-updated"
    TASK_DELETED = "task-deleted"
    WORKFLOW_CREATED = "workflow-created"
    WORKFLOW_UPDATED = "workflow-updated"
    WORKFLOW_EXECUTING = "workflow-executing"
    WORKFLOW_EXECUTED = "workflow-executed"
    CONTENT_VALIDATED = "content-validated"


# Payload values are scalars only, never full object dumps
PayloadValue = str | int | float | bool | None


@dataclass(frozen=True)
class LifecycleEvent:
    """Single lifecycle notification.

    ``entity_id`` is the affected task or workflow id (empty for
    content-validated events not tied to a task). ``sequence`` gives the
    emission order within one emitter.
    """

    event_id: str
    event_type: LifecycleEventType
    entity_id: str
    payload: Mapping[str, PayloadValue] = field(default_factory=dict)
    sequence: int = 0
    created_at: str = ""  # ISO 8601
