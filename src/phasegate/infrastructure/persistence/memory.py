"""
In-memory workflow repository.

Useful for testing and ephemeral runs. Blobs are held as encoded JSON so a
load behaves exactly like the filesystem adapter (fresh, date-decoded copies).
"""

import threading
from datetime import UTC, datetime
from typing import Any

from phasegate.domain.interfaces import WorkflowRepositoryInterface
from phasegate.infrastructure.persistence import codec


class InMemoryWorkflowRepository(WorkflowRepositoryInterface):
    """Simple in-memory repository for testing."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._workflows: dict[str, str] = {}
        self._archive: dict[str, str] = {}
        self._artifacts: dict[str, list[str]] = {}

    def save_workflow(self, workflow: dict[str, Any]) -> None:
        with self._lock:
            self._workflows[workflow["workflow_id"]] = codec.encode(workflow)

    def load_workflow(self, workflow_id: str) -> dict[str, Any] | None:
        text = self._workflows.get(workflow_id)
        return codec.decode(text) if text is not None else None

    def archive_workflow(self, workflow_id: str) -> None:
        with self._lock:
            if workflow_id not in self._workflows:
                raise KeyError(f"Workflow not found: {workflow_id}")
            stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
            self._archive[f"{workflow_id}_{stamp}"] = self._workflows[workflow_id]

    def archived(self) -> list[str]:
        """Archive keys (``<workflow_id>_<timestamp>``)."""
        return sorted(self._archive)

    def save_task_artifact(self, task_id: str, artifact: dict[str, Any]) -> None:
        with self._lock:
            self._artifacts.setdefault(task_id, []).append(codec.encode(artifact))

    def get_task_artifacts(self, task_id: str) -> list[dict[str, Any]]:
        return [codec.decode(text) for text in self._artifacts.get(task_id, [])]
