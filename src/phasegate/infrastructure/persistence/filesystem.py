"""
Filesystem workflow repository.

Layout under the base directory:

    workflows/<workflow_id>.json
    tasks/<task_id>/artifacts/<uuid>.json
    archive/workflows/<workflow_id>_<timestamp>.json

Every write goes to a temp file first and is renamed into place.
"""

import logging
import shutil
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from phasegate.domain.interfaces import WorkflowRepositoryInterface
from phasegate.infrastructure.persistence import codec

logger = logging.getLogger(__name__)


class FilesystemWorkflowRepository(WorkflowRepositoryInterface):
    """Persistent JSON-file repository."""

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._workflows_dir = self._base_dir / "workflows"
        self._tasks_dir = self._base_dir / "tasks"
        self._archive_dir = self._base_dir / "archive" / "workflows"
        for directory in (self._workflows_dir, self._tasks_dir, self._archive_dir):
            directory.mkdir(parents=True, exist_ok=True)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _write_atomic(self, path: Path, text: str) -> None:
        """Write-to-temp + rename."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")
        temp_path.write_text(text, encoding="utf-8")
        temp_path.replace(path)  # Atomic on POSIX

    def _workflow_path(self, workflow_id: str) -> Path:
        return self._workflows_dir / f"{workflow_id}.json"

    def save_workflow(self, workflow: dict[str, Any]) -> None:
        path = self._workflow_path(workflow["workflow_id"])
        self._write_atomic(path, codec.encode(workflow))
        logger.debug("Saved workflow %s to %s", workflow["workflow_id"], path)

    def load_workflow(self, workflow_id: str) -> dict[str, Any] | None:
        path = self._workflow_path(workflow_id)
        if not path.exists():
            return None
        return codec.decode(path.read_text(encoding="utf-8"))

    def archive_workflow(self, workflow_id: str) -> None:
        """
        Copy the current workflow file into the archive.

        Raises:
            KeyError: If the workflow was never saved
        """
        source = self._workflow_path(workflow_id)
        if not source.exists():
            raise KeyError(f"Workflow not found: {workflow_id}")
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
        target = self._archive_dir / f"{workflow_id}_{stamp}.json"
        shutil.copy2(source, target)
        logger.info("Archived workflow %s to %s", workflow_id, target)

    def archived(self) -> list[Path]:
        return sorted(self._archive_dir.glob("*.json"))

    def _artifacts_dir(self, task_id: str) -> Path:
        return self._tasks_dir / task_id / "artifacts"

    def save_task_artifact(self, task_id: str, artifact: dict[str, Any]) -> None:
        path = self._artifacts_dir(task_id) / f"{uuid.uuid4()}.json"
        self._write_atomic(path, codec.encode(artifact))

    def get_task_artifacts(self, task_id: str) -> list[dict[str, Any]]:
        directory = self._artifacts_dir(task_id)
        if not directory.exists():
            return []
        artifacts = [
            codec.decode(path.read_text(encoding="utf-8"))
            for path in directory.glob("*.json")
        ]
        # uuid file names carry no order; sort on the stored timestamp
        return sorted(artifacts, key=lambda a: str(a.get("created_at", "")))
