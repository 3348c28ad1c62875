"""
WorkflowEngine: drives tasks through the phase pipeline.

spec -> design -> implementation -> test -> review

Each phase forms a batch. Content for a batch is requested through the
collaborator gateway, then every artifact is run through the quality gate in
task order. A failing artifact fails only its own task; siblings continue.
"""

import logging
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import replace
from datetime import UTC, datetime
from functools import partial
from statistics import fmean
from types import TracebackType

from phasegate.application.collaborators import CollaboratorGateway
from phasegate.application.lifecycle_emitter import LifecycleEventEmitter, Listener
from phasegate.application.locking import KeyedLocks
from phasegate.application.metrics import ValidationTally, summarize
from phasegate.application.task_store import TaskStore
from phasegate.domain.config import OrchestratorConfig
from phasegate.domain.exceptions import (
    ConfigurationError,
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
from phasegate.domain.models import (
    EngineStatus,
    OrchestratorMetrics,
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
from phasegate.domain.serialization import (
    validation_summary,
    workflow_from_dict,
    workflow_to_dict,
)
from phasegate.domain.task_defaults import AGENT_HINTS
from phasegate.guards.consensus import ConsensusEvaluator
from phasegate.guards.quality import HeuristicContentScorer

logger = logging.getLogger(__name__)

_UNFINISHED = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def settled_status(tasks: Iterable[Task]) -> WorkflowStatus:
    """
    Workflow status implied by its member tasks after a run.

    completed: every task completed (and there is at least one)
    failed:    some task failed and none is still pending or in progress
    active:    anything else
    """
    statuses = [t.status for t in tasks]
    if statuses and all(s is TaskStatus.COMPLETED for s in statuses):
        return WorkflowStatus.COMPLETED
    if TaskStatus.FAILED in statuses and not any(s in _UNFINISHED for s in statuses):
        return WorkflowStatus.FAILED
    return WorkflowStatus.ACTIVE


class WorkflowEngine:
    """
    Orchestrating state machine for tasks and workflows.

    One engine owns its tasks and workflows; engines share nothing, so several
    can coexist in one process.

    Args:
        config: Orchestrator configuration (defaults if None)
        generator: Content-production collaborator
        scorer: Quality gate (HeuristicContentScorer if None)
        consensus: Consensus evaluator (built over the scorer if None)
        repository: Persistence port, required when persistence is enabled
        substrate: Execution substrate for sessions and cancellation
        event_store: Receives every lifecycle event
        listeners: Lifecycle observers
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        generator: ContentGeneratorInterface | None = None,
        scorer: ContentScorerInterface | None = None,
        consensus: ConsensusEvaluator | None = None,
        repository: WorkflowRepositoryInterface | None = None,
        substrate: ExecutionSubstrateInterface | None = None,
        event_store: LifecycleEventStoreInterface | None = None,
        listeners: Iterable[Listener] = (),
    ):
        self._config = config or OrchestratorConfig()
        if self._config.persistence_enabled and repository is None:
            raise ConfigurationError("persistence_enabled requires a repository")

        self._generator = generator
        self._scorer = scorer or HeuristicContentScorer()
        self._consensus = consensus or ConsensusEvaluator(
            self._scorer, report_participants=self._config.report_participants
        )
        self._repository = repository
        self._substrate = substrate

        self._events = LifecycleEventEmitter(event_store, listeners)
        self._gateway = CollaboratorGateway(self._config.max_concurrency)
        self._tasks = TaskStore(
            self._config, self._events, substrate, self._gateway, clock=_utcnow
        )
        self._workflows: dict[str, Workflow] = {}
        self._workflow_locks = KeyedLocks()
        self._tally = ValidationTally()
        self._session_id: str | None = None
        self._closed = False

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def events(self) -> LifecycleEventEmitter:
        return self._events

    # =========================================================================
    # Tasks
    # =========================================================================

    def create_task(
        self,
        description: str,
        task_type: str | TaskType,
        priority: str | TaskPriority = TaskPriority.MEDIUM,
    ) -> Task:
        return self._tasks.create_task(description, task_type, priority)

    def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        """Patch a task; the owning workflow's status follows status changes."""
        task = self._tasks.update_task(task_id, update)
        if update.status is not None and task.workflow_id is not None:
            self._refresh_workflow(task.workflow_id)
        return task

    def get_task(self, task_id: str) -> Task:
        return self._tasks.get_task(task_id)

    def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        return self._tasks.get_tasks(task_filter)

    def delete_task(self, task_id: str) -> bool:
        """Delete a task and drop it from its workflow. Returns whether it existed."""
        task = self._tasks.find_task(task_id)
        existed = self._tasks.delete_task(task_id)
        if task is not None and task.workflow_id is not None:
            with self._workflow_locks.hold(task.workflow_id):
                workflow = self._workflows.get(task.workflow_id)
                if workflow is not None:
                    workflow = replace(
                        workflow,
                        task_ids=tuple(i for i in workflow.task_ids if i != task_id),
                        updated_at=_utcnow(),
                    )
                    self._workflows[workflow.workflow_id] = workflow
                    self._persist(self._refresh_workflow(workflow.workflow_id))
        return existed

    # =========================================================================
    # Workflows
    # =========================================================================

    def create_workflow(self, name: str, description: str = "") -> Workflow:
        if not name or not name.strip():
            raise ValidationFailure("Workflow name must not be empty")
        now = _utcnow()
        workflow = Workflow(
            workflow_id=str(uuid.uuid4()),
            name=name.strip(),
            description=description,
            created_at=now,
            updated_at=now,
        )
        self._workflows[workflow.workflow_id] = workflow
        self._events.workflow_created(workflow.workflow_id, workflow.name)
        self._persist(workflow)
        return workflow

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        return self._workflows.get(workflow_id)

    def require_workflow(self, workflow_id: str) -> Workflow:
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFound(workflow_id)
        return workflow

    def get_workflows(self) -> list[Workflow]:
        return list(self._workflows.values())

    def workflow_tasks(self, workflow_id: str) -> list[Task]:
        """Member tasks in workflow order (deleted ids are skipped)."""
        workflow = self.require_workflow(workflow_id)
        tasks = (self._tasks.find_task(i) for i in workflow.task_ids)
        return [t for t in tasks if t is not None]

    def add_task_to_workflow(self, workflow_id: str, task_id: str) -> Workflow:
        """
        Append a task to a workflow. Adding a task already present is a no-op.

        Raises:
            WorkflowNotFound: Unknown workflow id
            TaskNotFound: Unknown task id
            UnsupportedOperation: Task belongs to another workflow
        """
        with self._workflow_locks.hold(workflow_id):
            workflow = self.require_workflow(workflow_id)
            self._tasks.get_task(task_id)
            if task_id in workflow.task_ids:
                return workflow

            self._tasks.assign_workflow(task_id, workflow_id)
            workflow = replace(
                workflow,
                task_ids=workflow.task_ids + (task_id,),
                updated_at=_utcnow(),
            )
            self._workflows[workflow_id] = workflow
            workflow = self._refresh_workflow(workflow_id)

        self._events.workflow_updated(workflow_id, task_id, len(workflow.task_ids))
        self._persist(workflow)
        return workflow

    def _refresh_workflow(self, workflow_id: str) -> Workflow:
        """Recompute status and quality outside of a run."""
        with self._workflow_locks.hold(workflow_id):
            workflow = self.require_workflow(workflow_id)
            tasks = self.workflow_tasks(workflow_id)
            status = settled_status(tasks)
            # A never-run workflow stays pending until something settles it
            if (
                status is WorkflowStatus.ACTIVE
                and workflow.status is WorkflowStatus.PENDING
            ):
                status = WorkflowStatus.PENDING
            refreshed = replace(
                workflow, status=status, quality=self._aggregate_quality(tasks)
            )
            self._workflows[workflow_id] = refreshed
            return refreshed

    @staticmethod
    def _aggregate_quality(tasks: Iterable[Task]) -> float | None:
        scores = [t.quality for t in tasks if t.quality is not None]
        return round(fmean(scores), 4) if scores else None

    # =========================================================================
    # Execution
    # =========================================================================

    def execute_workflow(self, workflow_id: str) -> Workflow:
        """
        Run every pending task of the workflow through the pipeline.

        Returns:
            The workflow with its settled status

        Raises:
            WorkflowNotFound: Unknown workflow id
            ConfigurationError: No content generator configured
            CollaboratorTimeout: Content generation exceeded its deadline;
                the interrupted batch is back to pending and the workflow
                status is restored, so the call can be retried
        """
        with self._workflow_locks.hold(workflow_id):
            workflow = self.require_workflow(workflow_id)
            generator = self._require_generator()
            prior_status = workflow.status

            self._events.workflow_executing(workflow_id, len(workflow.task_ids))
            workflow = replace(
                workflow, status=WorkflowStatus.ACTIVE, updated_at=_utcnow()
            )
            self._workflows[workflow_id] = workflow

            for batch in self._batches(workflow):
                try:
                    self._run_batch(generator, batch)
                except Exception:
                    for task in batch:
                        if self._tasks.find_task(task.task_id) is not None:
                            self._tasks.revert_to_pending(task.task_id)
                    self._workflows[workflow_id] = replace(
                        self._workflows[workflow_id], status=prior_status
                    )
                    logger.error(
                        "Workflow %s interrupted; %d task(s) reverted to pending",
                        workflow_id,
                        len(batch),
                    )
                    raise

            tasks = self.workflow_tasks(workflow_id)
            workflow = replace(
                self._workflows[workflow_id],
                status=settled_status(tasks),
                quality=self._aggregate_quality(tasks),
                updated_at=_utcnow(),
            )
            self._workflows[workflow_id] = workflow

        self._persist(workflow)
        self._events.workflow_executed(
            workflow_id, workflow.status.value, workflow.quality
        )
        logger.info(
            "Workflow %s finished: %s (quality=%s)",
            workflow_id,
            workflow.status.value,
            workflow.quality,
        )
        return workflow

    def _batches(self, workflow: Workflow) -> Iterator[list[Task]]:
        """Yield batches lazily so each phase sees the current task states."""
        if self._config.enable_specs_driven:
            for phase in TaskType.phases():
                batch = [
                    t
                    for t in self.workflow_tasks(workflow.workflow_id)
                    if t.task_type is phase and t.status is TaskStatus.PENDING
                ]
                if batch:
                    logger.debug("Phase %s: %d task(s)", phase.value, len(batch))
                    yield batch
        else:
            pending = [
                t
                for t in self.workflow_tasks(workflow.workflow_id)
                if t.status is TaskStatus.PENDING
            ]
            for task in pending:
                yield [task]

    def _run_batch(
        self, generator: ContentGeneratorInterface, batch: list[Task]
    ) -> None:
        started = [
            self._tasks.update_task(
                t.task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS)
            )
            for t in batch
        ]
        calls = [
            partial(
                generator.generate_content,
                t.description,
                t.task_type.value,
                AGENT_HINTS.get(t.task_type),
            )
            for t in started
        ]
        contents = self._gateway.map_ordered(
            "generate_content", calls, timeout=self._config.generation_timeout
        )
        # Gate in task order once the whole batch has returned
        for task, content in zip(started, contents, strict=True):
            self._gate(task, content)

    def _gate(self, task: Task, content: str) -> Task:
        metadata: dict[str, object] = {"generated_content": content}
        status = TaskStatus.COMPLETED
        quality = None

        if self._config.auto_validation:
            result = self.validate(
                content,
                task.task_type.value,
                require_consensus=task.require_consensus,
                task_id=task.task_id,
            )
            metadata["validation"] = validation_summary(result)
            quality = result.score
            if not self._passes_gate(result):
                status = TaskStatus.FAILED
                logger.info(
                    "Task %s failed the quality gate (score=%.2f)",
                    task.task_id,
                    result.score,
                )

        if self._repository is not None and self._config.persistence_enabled:
            self._repository.save_task_artifact(
                task.task_id,
                {
                    "task_id": task.task_id,
                    "type": task.task_type.value,
                    "content": content,
                    "quality": quality,
                    "status": status.value,
                    "created_at": _utcnow(),
                },
            )

        return self._tasks.update_task(
            task.task_id,
            TaskUpdate(status=status, quality=quality, metadata=metadata),
        )

    def _require_generator(self) -> ContentGeneratorInterface:
        if self._generator is None:
            raise ConfigurationError("No content generator configured")
        return self._generator

    # =========================================================================
    # Quality gate
    # =========================================================================

    def validate(
        self,
        content: str,
        content_type: str,
        require_consensus: bool | None = None,
        task_id: str = "",
    ) -> ValidationResult:
        """
        Run content through the quality gate.

        Consensus (when required) only runs for valid content and never
        changes validity; a missed consensus is reported as a warning.
        """
        result = self._scorer.evaluate(
            content, content_type, self._config.quality_threshold
        )

        needs_consensus = (
            self._config.consensus_required
            if require_consensus is None
            else require_consensus
        )
        if needs_consensus and self._config.enable_consensus and result.valid:
            consensus = self._consensus.evaluate(
                content, content_type, self._config.consensus_threshold
            )
            warnings = result.warnings
            if not consensus.achieved:
                warnings += (
                    f"Consensus not achieved: score {consensus.score:.2f} "
                    f"below threshold {consensus.threshold:.2f}",
                )
            result = replace(
                result,
                consensus_achieved=consensus.achieved,
                participant_scores=consensus.participant_scores,
                warnings=warnings,
            )

        self._tally.record(self._passes_gate(result), result.consensus_achieved)
        self._events.content_validated(
            content_type, result.valid, result.score, task_id=task_id
        )
        return result

    def _passes_gate(self, result: ValidationResult) -> bool:
        return result.valid and result.score >= self._config.quality_threshold

    def generate_content(
        self, prompt: str, content_type: str, agent_hint: str | None = None
    ) -> str:
        """Request content from the generator under the generation deadline."""
        generator = self._require_generator()
        return self._gateway.call(
            "generate_content",
            generator.generate_content,
            prompt,
            content_type,
            agent_hint,
            timeout=self._config.generation_timeout,
        )

    # =========================================================================
    # Substrate session
    # =========================================================================

    def initialize_session(self) -> str:
        """
        Start a substrate session under the session deadline.

        The session id is only recorded once initialization succeeded, so a
        timed-out attempt can simply be retried.
        """
        if self._substrate is None:
            raise ConfigurationError("No execution substrate configured")
        session_id = self._gateway.call(
            "initialize_session",
            self._substrate.initialize,
            self._config,
            timeout=self._config.session_timeout,
        )
        self._session_id = session_id
        logger.info("Substrate session %s initialized", session_id)
        return session_id

    @property
    def session_id(self) -> str | None:
        return self._session_id

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist(self, workflow: Workflow) -> None:
        if self._repository is None or not self._config.persistence_enabled:
            return
        tasks = self.workflow_tasks(workflow.workflow_id)
        self._repository.save_workflow(workflow_to_dict(workflow, tasks))

    def restore_workflow(self, workflow_id: str) -> Workflow:
        """
        Re-register a persisted workflow and its tasks.

        Raises:
            ConfigurationError: No repository configured
            WorkflowNotFound: Nothing stored under ``workflow_id``
        """
        if self._repository is None:
            raise ConfigurationError("restore_workflow requires a repository")
        blob = self._repository.load_workflow(workflow_id)
        if blob is None:
            raise WorkflowNotFound(workflow_id)

        workflow, tasks = workflow_from_dict(blob)
        with self._workflow_locks.hold(workflow_id):
            for task in tasks:
                self._tasks.register(task)
            self._workflows[workflow_id] = workflow
        logger.info("Restored workflow %s with %d task(s)", workflow_id, len(tasks))
        return workflow

    def archive_workflow(self, workflow_id: str) -> None:
        """Save the workflow then copy it into the repository archive."""
        if self._repository is None:
            raise ConfigurationError("archive_workflow requires a repository")
        workflow = self.require_workflow(workflow_id)
        self._repository.save_workflow(
            workflow_to_dict(workflow, self.workflow_tasks(workflow_id))
        )
        self._repository.archive_workflow(workflow_id)

    # =========================================================================
    # Reporting and lifecycle
    # =========================================================================

    def get_status(self) -> EngineStatus:
        return EngineStatus(
            active=not self._closed,
            tasks=len(self._tasks),
            workflows=len(self._workflows),
            session_id=self._session_id,
        )

    def get_metrics(self) -> OrchestratorMetrics:
        return summarize(
            self._tasks.get_tasks(), self._workflows.values(), self._tally
        )

    def shutdown(self) -> None:
        """Persist every workflow (when enabled) and release the worker pool."""
        if self._closed:
            return
        for workflow in list(self._workflows.values()):
            self._persist(workflow)
        self._gateway.close()
        self._closed = True
        logger.info("Engine %s shut down", self._config.name)

    def __enter__(self) -> "WorkflowEngine":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()
