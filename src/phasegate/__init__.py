"""
PhaseGate: phase-gated, review-scored artifact production.

Coordinates the spec -> design -> implementation -> test -> review pipeline.
Every artifact passes a quality gate (and, where required, a consensus
check) before its task completes.

Example:
    from phasegate import OrchestratorConfig, WorkflowEngine
    from phasegate.infrastructure import TemplateContentGenerator

    engine = WorkflowEngine(OrchestratorConfig(), TemplateContentGenerator())
    workflow = engine.create_workflow("login", "User login feature")
    for phase in ("spec", "design", "implementation", "test", "review"):
        task = engine.create_task(f"Login {phase}", phase, "high")
        engine.add_task_to_workflow(workflow.workflow_id, task.task_id)
    result = engine.execute_workflow(workflow.workflow_id)
"""

# Application layer (orchestration)
from phasegate.application.workflow_engine import WorkflowEngine

# Configuration
from phasegate.domain.config import (
    PRESETS,
    OrchestratorConfig,
    OrchestratorConfigBuilder,
)

# Domain exceptions
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

# Domain interfaces (for type hints and custom implementations)
from phasegate.domain.interfaces import (
    ContentGeneratorInterface,
    ContentScorerInterface,
    ExecutionSubstrateInterface,
    LifecycleEventStoreInterface,
    WorkflowRepositoryInterface,
)
from phasegate.domain.lifecycle_event import LifecycleEvent, LifecycleEventType

# Domain models (most commonly used)
from phasegate.domain.models import (
    ConsensusResult,
    CrossValidationResult,
    DocumentType,
    SteeringDocument,
    Task,
    TaskFilter,
    TaskPriority,
    TaskStatus,
    TaskType,
    TaskUpdate,
    ValidationResult,
    Workflow,
    WorkflowStatus,
)

# Guards
from phasegate.guards import (
    ConsensusEvaluator,
    CrossDocumentValidator,
    HeuristicContentScorer,
    SteeringDocumentValidator,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Domain models
    "Task",
    "TaskUpdate",
    "TaskFilter",
    "TaskType",
    "TaskPriority",
    "TaskStatus",
    "Workflow",
    "WorkflowStatus",
    "ValidationResult",
    "ConsensusResult",
    "SteeringDocument",
    "DocumentType",
    "CrossValidationResult",
    "LifecycleEvent",
    "LifecycleEventType",
    # Configuration
    "OrchestratorConfig",
    "OrchestratorConfigBuilder",
    "PRESETS",
    # Domain interfaces
    "ContentGeneratorInterface",
    "ContentScorerInterface",
    "WorkflowRepositoryInterface",
    "LifecycleEventStoreInterface",
    "ExecutionSubstrateInterface",
    # Domain exceptions
    "PhaseGateError",
    "NotFound",
    "TaskNotFound",
    "WorkflowNotFound",
    "ConfigurationError",
    "ValidationFailure",
    "UnsupportedOperation",
    "InvalidTransition",
    "CollaboratorTimeout",
    # Application layer
    "WorkflowEngine",
    # Guards
    "HeuristicContentScorer",
    "ConsensusEvaluator",
    "CrossDocumentValidator",
    "SteeringDocumentValidator",
]
