"""
Domain models for phase-gated artifact production.

These are pure data structures. Records are immutable (frozen dataclasses);
changes go through explicit update commands and produce new instances.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# =============================================================================
# ENUMERATIONS
# =============================================================================


class TaskType(str, Enum):
    """Kind of artifact a task produces. Doubles as the pipeline phase."""

    SPEC = "spec"
    DESIGN = "design"
    IMPLEMENTATION = "implementation"
    TEST = "test"
    REVIEW = "review"

    @classmethod
    def phases(cls) -> tuple["TaskType", ...]:
        """Pipeline order: spec -> design -> implementation -> test -> review."""
        return (cls.SPEC, cls.DESIGN, cls.IMPLEMENTATION, cls.TEST, cls.REVIEW)


class TaskPriority(str, Enum):
    """Task priority with its sort weight."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
    TaskPriority.CRITICAL: 4,
}


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"  # terminal
    FAILED = "failed"  # terminal

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


# Legal forward moves; re-applying the current status is handled by the store.
TASK_TRANSITIONS: Mapping[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}


class TaskStrategy(str, Enum):
    """Execution strategy hint handed to the agent substrate."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    CONSENSUS = "consensus"
    ADAPTIVE = "adaptive"


class WorkflowStatus(str, Enum):
    """Workflow lifecycle status."""

    PENDING = "pending"  # Created, never executed
    ACTIVE = "active"  # Executing, or tasks still pending
    COMPLETED = "completed"  # Every member task completed
    FAILED = "failed"  # Run finished with at least one failed task


class DocumentType(str, Enum):
    """Steering document taxonomy used by cross-document validation."""

    PRODUCT = "product"
    STRUCTURE = "structure"
    TECH = "tech"

    @property
    def dependencies(self) -> tuple["DocumentType", ...]:
        return _DOCUMENT_DEPENDENCIES[self]


_DOCUMENT_DEPENDENCIES = {
    DocumentType.PRODUCT: (),
    DocumentType.STRUCTURE: (DocumentType.PRODUCT,),
    DocumentType.TECH: (DocumentType.PRODUCT, DocumentType.STRUCTURE),
}


# =============================================================================
# TASK
# =============================================================================


@dataclass(frozen=True)
class Task:
    """A unit of work producing one artifact of ``task_type``."""

    # Identity
    task_id: str
    description: str
    task_type: TaskType
    priority: TaskPriority

    # Lifecycle
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    # Execution requirements (derived at creation)
    strategy: TaskStrategy = TaskStrategy.ADAPTIVE
    dependencies: tuple[str, ...] = ()
    required_capabilities: tuple[str, ...] = ()
    max_agents: int = 2
    require_consensus: bool = False

    # Outcome
    quality: float | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    # Ownership (immutable once set)
    workflow_id: str | None = None


@dataclass(frozen=True)
class TaskUpdate:
    """Restricted patch applied by TaskStore.update_task.

    Fields left as None are untouched. ``metadata`` is merged into the
    existing mapping rather than replacing it.
    """

    description: str | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    quality: float | None = None
    metadata: Mapping[str, Any] | None = None
    dependencies: tuple[str, ...] | None = None


@dataclass(frozen=True)
class TaskFilter:
    """Exact-match filter for TaskStore.get_tasks. Unset fields match anything."""

    task_type: TaskType | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    strategy: TaskStrategy | None = None
    workflow_id: str | None = None
    require_consensus: bool | None = None

    def matches(self, task: Task) -> bool:
        checks = (
            (self.task_type, task.task_type),
            (self.priority, task.priority),
            (self.status, task.status),
            (self.strategy, task.strategy),
            (self.workflow_id, task.workflow_id),
            (self.require_consensus, task.require_consensus),
        )
        return all(wanted is None or wanted == actual for wanted, actual in checks)


# =============================================================================
# WORKFLOW
# =============================================================================


@dataclass(frozen=True)
class Workflow:
    """Ordered grouping of tasks; order is the intended phase order."""

    workflow_id: str
    name: str
    description: str
    task_ids: tuple[str, ...] = ()
    status: WorkflowStatus = WorkflowStatus.PENDING
    quality: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# VALIDATION RESULTS
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of running an artifact through the quality gate."""

    valid: bool
    score: float
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    consensus_achieved: bool | None = None
    participant_scores: Mapping[str, float] = field(default_factory=dict)
    rules_applied: tuple[str, ...] = ()
    passed_rules: tuple[str, ...] = ()
    failed_rules: tuple[str, ...] = ()
    timestamp: datetime | None = None


@dataclass(frozen=True)
class ConsensusResult:
    """Accept/reject decision standing in for multi-reviewer agreement."""

    achieved: bool
    score: float
    threshold: float
    participant_scores: Mapping[str, float] = field(default_factory=dict)
    basis: str = "score-threshold"
    timestamp: datetime | None = None


# =============================================================================
# STEERING DOCUMENTS
# =============================================================================


@dataclass(frozen=True)
class SteeringDocument:
    """Reference document used as a consistency baseline."""

    doc_type: DocumentType
    content: str
    title: str = ""
    version: str = "1.0.0"
    status: str = "active"  # draft / active / archived


@dataclass(frozen=True)
class DocumentAlignment:
    """Per-document axis scores."""

    product: float
    structure: float
    technology: float
    average: float


@dataclass(frozen=True)
class CrossValidationResult:
    """Alignment across a set of steering documents."""

    overall_alignment: float
    document_scores: Mapping[DocumentType, DocumentAlignment]
    issues: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    validated_at: datetime | None = None


@dataclass(frozen=True)
class ComplianceResult:
    """How well a document covers a list of steering requirements."""

    compliant: bool
    score: float
    missing_requirements: tuple[str, ...]
    fulfilled_requirements: tuple[str, ...]
    suggestions: tuple[str, ...]
    required: int
    fulfilled: int
    percentage: float


# =============================================================================
# ENGINE REPORTING
# =============================================================================


@dataclass(frozen=True)
class EngineStatus:
    """Snapshot returned by WorkflowEngine.get_status()."""

    active: bool
    tasks: int
    workflows: int
    session_id: str | None = None


@dataclass(frozen=True)
class OrchestratorMetrics:
    """Aggregate task/workflow statistics."""

    total_tasks: int
    completed_tasks: int
    failed_tasks: int
    success_rate: float
    average_task_seconds: float
    average_quality: float | None
    active_workflows: int
    completed_workflows: int
    failed_workflows: int
    consensus_achieved: int
    validations_passed: int
