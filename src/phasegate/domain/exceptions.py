"""
Domain exceptions for phase-gated orchestration.

A content artifact failing the quality gate is NOT an exception: it is recorded
on the task (status=failed plus a ValidationResult) so siblings keep running.
"""


class PhaseGateError(Exception):
    """Base class for all phasegate errors."""


class NotFound(PhaseGateError, KeyError):
    """Raised when a task or workflow id is unknown."""

    def __init__(self, kind: str, entity_id: str):
        """
        Args:
            kind: Entity kind ("Task", "Workflow")
            entity_id: The id that could not be resolved
        """
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0])


class TaskNotFound(NotFound):
    def __init__(self, task_id: str):
        super().__init__("Task", task_id)


class WorkflowNotFound(NotFound):
    def __init__(self, workflow_id: str):
        super().__init__("Workflow", workflow_id)


class ConfigurationError(PhaseGateError, ValueError):
    """
    Raised when configuration is invalid or a required collaborator is missing.

    Only raised while building or loading configuration (or wiring the
    engine), never while processing tasks.
    """

    def __init__(self, message: str, errors: tuple[str, ...] = ()):
        super().__init__(message)
        self.errors = errors or (message,)


class ValidationFailure(PhaseGateError, ValueError):
    """Raised when task input is rejected at creation time."""


class UnsupportedOperation(ValidationFailure):
    """Raised for an unrecognized phase/type/priority or a forbidden operation."""


class InvalidTransition(UnsupportedOperation):
    """Raised when a task status change is not a legal lifecycle move."""

    def __init__(self, task_id: str, current: str, requested: str):
        super().__init__(
            f"Task {task_id} cannot move from {current} to {requested}"
        )
        self.task_id = task_id
        self.current = current
        self.requested = requested


class CollaboratorTimeout(PhaseGateError, TimeoutError):
    """
    Raised when an external collaborator call exceeds its deadline.

    The engine leaves no partially-applied state behind, so retrying the
    operation that raised this is safe.
    """

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} timed out after {timeout:g}s")
        self.operation = operation
        self.timeout = timeout
