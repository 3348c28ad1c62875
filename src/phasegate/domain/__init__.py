"""
Domain layer for phase-gated artifact production.

Contains core business logic with no external dependencies.
"""

from phasegate.domain.config import (
    PRESETS,
    OrchestratorConfig,
    OrchestratorConfigBuilder,
    config_warnings,
)
from phasegate.domain.exceptions import (
    CollaboratorTimeout,
    ConfigurationError,
    InvalidTransition,
    NotFound,
    PhaseGateError,
    TaskNotFound,
    UnsupportedOperation,
    ValidationFailure,
    WorkflowNotFound,
)
from phasegate.domain.interfaces import (
    ContentGeneratorInterface,
    ContentScorerInterface,
    ExecutionSubstrateInterface,
    LifecycleEventStoreInterface,
    WorkflowRepositoryInterface,
)
from phasegate.domain.lifecycle_event import LifecycleEvent, LifecycleEventType
from phasegate.domain.models import (
    ComplianceResult,
    ConsensusResult,
    CrossValidationResult,
    DocumentAlignment,
    DocumentType,
    EngineStatus,
    OrchestratorMetrics,
    SteeringDocument,
    Task,
    TaskFilter,
    TaskPriority,
    TaskStatus,
    TaskStrategy,
    TaskType,
    TaskUpdate,
    ValidationResult,
    Workflow,
    WorkflowStatus,
)

__all__ = [
    # Models
    "Task",
    "TaskUpdate",
    "TaskFilter",
    "TaskType",
    "TaskPriority",
    "TaskStatus",
    "TaskStrategy",
    "Workflow",
    "WorkflowStatus",
    "ValidationResult",
    "ConsensusResult",
    "SteeringDocument",
    "DocumentType",
    "DocumentAlignment",
    "CrossValidationResult",
    "ComplianceResult",
    "EngineStatus",
    "OrchestratorMetrics",
    "LifecycleEvent",
    "LifecycleEventType",
    # Configuration
    "OrchestratorConfig",
    "OrchestratorConfigBuilder",
    "PRESETS",
    "config_warnings",
    # Interfaces
    "ContentGeneratorInterface",
    "ContentScorerInterface",
    "WorkflowRepositoryInterface",
    "LifecycleEventStoreInterface",
    "ExecutionSubstrateInterface",
    # Exceptions
    "PhaseGateError",
    "NotFound",
    "TaskNotFound",
    "WorkflowNotFound",
    "ConfigurationError",
    "ValidationFailure",
    "UnsupportedOperation",
    "InvalidTransition",
    "CollaboratorTimeout",
]
