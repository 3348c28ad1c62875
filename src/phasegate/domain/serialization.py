"""
Record <-> mapping conversion for persistence blobs.

Produces plain mappings whose only non-JSON values are datetimes; turning
those into text (and back) is the repository codec's job. ``*_from_dict``
accepts either datetime values or ISO strings in timestamp fields.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from phasegate.domain.models import (
    Task,
    TaskPriority,
    TaskStatus,
    TaskStrategy,
    TaskType,
    ValidationResult,
    Workflow,
    WorkflowStatus,
)


def _as_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "task_id": task.task_id,
        "description": task.description,
        "type": task.task_type.value,
        "priority": task.priority.value,
        "status": task.status.value,
        "strategy": task.strategy.value,
        "dependencies": list(task.dependencies),
        "required_capabilities": list(task.required_capabilities),
        "max_agents": task.max_agents,
        "require_consensus": task.require_consensus,
        "quality": task.quality,
        "metadata": dict(task.metadata),
        "workflow_id": task.workflow_id,
        "created_at": task.created_at,
        "started_at": task.started_at,
        "completed_at": task.completed_at,
    }


def task_from_dict(data: Mapping[str, Any]) -> Task:
    return Task(
        task_id=data["task_id"],
        description=data["description"],
        task_type=TaskType(data["type"]),
        priority=TaskPriority(data["priority"]),
        status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
        strategy=TaskStrategy(data.get("strategy", TaskStrategy.ADAPTIVE.value)),
        dependencies=tuple(data.get("dependencies", ())),
        required_capabilities=tuple(data.get("required_capabilities", ())),
        max_agents=data.get("max_agents", 2),
        require_consensus=data.get("require_consensus", False),
        quality=data.get("quality"),
        metadata=dict(data.get("metadata") or {}),
        workflow_id=data.get("workflow_id"),
        created_at=_as_datetime(data.get("created_at")),
        started_at=_as_datetime(data.get("started_at")),
        completed_at=_as_datetime(data.get("completed_at")),
    )


def workflow_to_dict(
    workflow: Workflow, tasks: list[Task] | tuple[Task, ...] = ()
) -> dict[str, Any]:
    """Workflow blob, with member tasks embedded under ``tasks``."""
    return {
        "workflow_id": workflow.workflow_id,
        "name": workflow.name,
        "description": workflow.description,
        "task_ids": list(workflow.task_ids),
        "status": workflow.status.value,
        "quality": workflow.quality,
        "created_at": workflow.created_at,
        "updated_at": workflow.updated_at,
        "tasks": [task_to_dict(t) for t in tasks],
    }


def workflow_from_dict(data: Mapping[str, Any]) -> tuple[Workflow, list[Task]]:
    workflow = Workflow(
        workflow_id=data["workflow_id"],
        name=data["name"],
        description=data.get("description", ""),
        task_ids=tuple(data.get("task_ids", ())),
        status=WorkflowStatus(data.get("status", WorkflowStatus.PENDING.value)),
        quality=data.get("quality"),
        created_at=_as_datetime(data.get("created_at")),
        updated_at=_as_datetime(data.get("updated_at")),
    )
    tasks = [task_from_dict(t) for t in data.get("tasks", ())]
    return workflow, tasks


def validation_summary(result: ValidationResult) -> dict[str, Any]:
    """JSON-friendly view of a ValidationResult for task metadata."""
    summary: dict[str, Any] = {
        "valid": result.valid,
        "score": result.score,
        "errors": list(result.errors),
        "warnings": list(result.warnings),
        "suggestions": list(result.suggestions),
    }
    if result.consensus_achieved is not None:
        summary["consensus_achieved"] = result.consensus_achieved
        summary["participant_scores"] = dict(result.participant_scores)
    if result.timestamp is not None:
        summary["timestamp"] = result.timestamp.isoformat()
    return summary
