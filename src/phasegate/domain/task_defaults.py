"""
Deterministic task defaults derived from (type, priority).

Pure lookup tables; TaskStore applies them when a task is created.
"""

from phasegate.domain.exceptions import UnsupportedOperation
from phasegate.domain.models import TaskPriority, TaskStrategy, TaskType

DEFAULT_MAX_AGENTS = 2

MAX_AGENTS_BY_TYPE: dict[TaskType, int] = {
    TaskType.SPEC: 2,
    TaskType.DESIGN: 3,
    TaskType.IMPLEMENTATION: 4,
    TaskType.TEST: 2,
    TaskType.REVIEW: 3,
}

CAPABILITIES_BY_TYPE: dict[TaskType, tuple[str, ...]] = {
    TaskType.SPEC: ("requirements_analysis", "user_story_creation"),
    TaskType.DESIGN: ("system_design", "architecture", "technical_writing"),
    TaskType.IMPLEMENTATION: ("code_generation", "debugging", "refactoring"),
    TaskType.TEST: ("test_generation", "quality_assurance"),
    TaskType.REVIEW: ("code_review", "quality_assurance", "standards_enforcement"),
}

# Agent role requested from the content generator for each phase
AGENT_HINTS: dict[TaskType, str] = {
    TaskType.SPEC: "requirements_analyst",
    TaskType.DESIGN: "design_architect",
    TaskType.IMPLEMENTATION: "implementation_coder",
    TaskType.TEST: "quality_reviewer",
    TaskType.REVIEW: "quality_reviewer",
}

CONSENSUS_TYPES = frozenset({TaskType.SPEC, TaskType.DESIGN})


def parse_task_type(value: str | TaskType) -> TaskType:
    """Coerce ``value`` to a TaskType or raise UnsupportedOperation."""
    try:
        return TaskType(value)
    except ValueError as e:
        allowed = ", ".join(t.value for t in TaskType)
        raise UnsupportedOperation(
            f"Unsupported task type '{value}' (expected one of: {allowed})"
        ) from e


def parse_priority(value: str | TaskPriority) -> TaskPriority:
    """Coerce ``value`` to a TaskPriority or raise UnsupportedOperation."""
    try:
        return TaskPriority(value)
    except ValueError as e:
        allowed = ", ".join(p.value for p in TaskPriority)
        raise UnsupportedOperation(
            f"Unsupported priority '{value}' (expected one of: {allowed})"
        ) from e


def determine_strategy(task_type: TaskType, priority: TaskPriority) -> TaskStrategy:
    if priority is TaskPriority.CRITICAL:
        return TaskStrategy.SEQUENTIAL
    if task_type is TaskType.IMPLEMENTATION:
        return TaskStrategy.PARALLEL
    if task_type is TaskType.REVIEW:
        return TaskStrategy.CONSENSUS
    return TaskStrategy.ADAPTIVE


def requires_consensus(
    task_type: TaskType, priority: TaskPriority, consensus_enabled: bool = True
) -> bool:
    if not consensus_enabled:
        return False
    return task_type in CONSENSUS_TYPES or priority is TaskPriority.CRITICAL


def determine_max_agents(task_type: TaskType) -> int:
    return MAX_AGENTS_BY_TYPE.get(task_type, DEFAULT_MAX_AGENTS)


def required_capabilities(task_type: TaskType) -> tuple[str, ...]:
    return CAPABILITIES_BY_TYPE.get(task_type, ())
