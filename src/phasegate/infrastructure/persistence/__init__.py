"""
Persistence adapters for workflows, task artifacts and lifecycle events.
"""

from phasegate.infrastructure.persistence.filesystem import (
    FilesystemWorkflowRepository,
)
from phasegate.infrastructure.persistence.lifecycle_events import (
    FilesystemLifecycleEventStore,
    InMemoryLifecycleEventStore,
)
from phasegate.infrastructure.persistence.memory import InMemoryWorkflowRepository

__all__ = [
    "InMemoryWorkflowRepository",
    "FilesystemWorkflowRepository",
    "InMemoryLifecycleEventStore",
    "FilesystemLifecycleEventStore",
]
