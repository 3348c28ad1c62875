"""
Application layer for phase-gated artifact production.

Contains the orchestration use cases that coordinate domain objects.
"""

from phasegate.application.collaborators import CollaboratorGateway
from phasegate.application.lifecycle_emitter import LifecycleEventEmitter
from phasegate.application.locking import KeyedLocks
from phasegate.application.metrics import ValidationTally, summarize
from phasegate.application.task_store import TaskStore
from phasegate.application.workflow_engine import WorkflowEngine, settled_status

__all__ = [
    "CollaboratorGateway",
    "KeyedLocks",
    "LifecycleEventEmitter",
    "TaskStore",
    "ValidationTally",
    "WorkflowEngine",
    "settled_status",
    "summarize",
]
