"""
Domain interfaces (Ports) for phase-gated orchestration.

These abstract base classes define the contracts that adapters must satisfy.
They have no external dependencies and represent the core domain boundaries.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from phasegate.domain.config import OrchestratorConfig
    from phasegate.domain.lifecycle_event import LifecycleEvent, LifecycleEventType
    from phasegate.domain.models import ValidationResult


class ContentGeneratorInterface(ABC):
    """
    Port for artifact content production.

    Implementations connect to LLMs, agent swarms or templates. The engine
    only consumes the returned text; how it was produced is opaque.

    Note (Retry Safety):
        The engine may call generate_content again for the same task after a
        timeout. Side-effecting generators MUST tolerate that.
    """

    @abstractmethod
    def generate_content(
        self,
        prompt: str,
        content_type: str,
        agent_hint: str | None = None,
    ) -> str:
        """
        Produce artifact text.

        Args:
            prompt: Task description or explicit prompt
            content_type: Artifact type (e.g. "spec", "design")
            agent_hint: Preferred agent role, if any

        Returns:
            The artifact body
        """
        pass


class ContentScorerInterface(ABC):
    """
    Port for the quality gate.

    Scorers must be deterministic and side-effect free: identical
    (content, content_type) always yields an identical score. Any
    model-backed scorer honoring this signature is a drop-in replacement.
    """

    @abstractmethod
    def score(self, content: str, content_type: str) -> float:
        """Return a quality score in [0, 1]."""
        pass

    @abstractmethod
    def evaluate(
        self, content: str, content_type: str, threshold: float
    ) -> "ValidationResult":
        """
        Score ``content`` and report errors, warnings and suggestions.

        Args:
            content: Artifact body
            content_type: Artifact type
            threshold: Minimum acceptable score

        Returns:
            ValidationResult (never raises for poor content)
        """
        pass


class WorkflowRepositoryInterface(ABC):
    """
    Port for workflow and task artifact persistence.

    Blobs are JSON-compatible mappings. On load, timestamp fields are
    decoded back into datetime values; all other strings pass through.
    """

    @abstractmethod
    def save_workflow(self, workflow: dict[str, Any]) -> None:
        """Persist a workflow blob keyed by its ``workflow_id``."""
        pass

    @abstractmethod
    def load_workflow(self, workflow_id: str) -> dict[str, Any] | None:
        """Return the decoded workflow blob, or None when absent."""
        pass

    @abstractmethod
    def archive_workflow(self, workflow_id: str) -> None:
        """Copy the current workflow blob to the archive (original kept)."""
        pass

    @abstractmethod
    def save_task_artifact(self, task_id: str, artifact: dict[str, Any]) -> None:
        """Append an artifact blob for ``task_id``."""
        pass

    @abstractmethod
    def get_task_artifacts(self, task_id: str) -> list[dict[str, Any]]:
        """Return every decoded artifact blob stored for ``task_id``."""
        pass


class LifecycleEventStoreInterface(ABC):
    """Port for lifecycle event persistence."""

    @abstractmethod
    def store_event(self, event: "LifecycleEvent") -> str:
        """Store an event, return its event_id."""
        pass

    @abstractmethod
    def get_events(
        self,
        entity_id: str | None = None,
        event_type: "LifecycleEventType | None" = None,
    ) -> list["LifecycleEvent"]:
        """Return events in emission order, optionally filtered."""
        pass


class ExecutionSubstrateInterface(ABC):
    """
    Port for the agent/swarm substrate that executes tasks.

    The engine only initializes sessions and requests best-effort
    cancellation; everything else about the substrate is out of scope.
    """

    @abstractmethod
    def initialize(self, config: "OrchestratorConfig") -> str:
        """Start a session and return its id."""
        pass

    @abstractmethod
    def cancel_task(self, task_id: str) -> None:
        """Request cancellation of ``task_id``. May raise on failure."""
        pass
