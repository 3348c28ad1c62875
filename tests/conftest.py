"""Shared pytest fixtures for phasegate tests."""

from datetime import UTC, datetime

import pytest

from phasegate.application.workflow_engine import WorkflowEngine
from phasegate.domain.config import OrchestratorConfig
from phasegate.domain.interfaces import ContentScorerInterface
from phasegate.domain.models import ValidationResult
from phasegate.infrastructure.generators.mock import MockContentGenerator
from phasegate.infrastructure.persistence.lifecycle_events import (
    InMemoryLifecycleEventStore,
)
from phasegate.infrastructure.persistence.memory import InMemoryWorkflowRepository

PHASES = ("spec", "design", "implementation", "test", "review")

SPEC_CONTENT = (
    "# Login Specification\n\n"
    "## Requirements\n"
    "- The requirement: users sign in with email and password\n"
    "- Sessions expire after thirty minutes of inactivity\n"
    "- Failed attempts are rate limited\n\n"
    "## Acceptance Criteria\n"
    "- Given valid credentials, when the user signs in, then a session starts\n"
)

GOOD_CONTENT = {
    "spec": SPEC_CONTENT,
    "design": (
        "# Login Design\n\n## Architecture\n- Service layer\n- Token store\n"
        "- Adapter for the identity provider\n\nLayered architecture throughout.\n"
    ),
    "implementation": (
        "# Login Implementation\n\n## Plan\n- Domain objects\n- Service wiring\n"
        "- Adapters and configuration for the identity provider\n"
    ),
    "test": (
        "# Login Tests\n\n## Test Cases\n- Test case: happy path sign in\n"
        "- Test case: wrong password is rejected\n- Test case: lockout\n"
    ),
    "review": (
        "# Login Review\n\n## Checklist\n- Requirements traced to tests\n"
        "- Design followed\n- No blocking findings for the login feature\n"
    ),
}


class FixedScorer(ContentScorerInterface):
    """Scores by content type from a table; unknown types get ``default``."""

    def __init__(self, scores: dict[str, float], default: float = 0.9):
        self.scores = scores
        self.default = default

    def score(self, content: str, content_type: str) -> float:
        return self.scores.get(content_type, self.default)

    def evaluate(
        self, content: str, content_type: str, threshold: float
    ) -> ValidationResult:
        score = self.score(content, content_type)
        return ValidationResult(
            valid=True,
            score=score,
            timestamp=datetime.now(UTC),
        )


@pytest.fixture
def config() -> OrchestratorConfig:
    return OrchestratorConfig()


@pytest.fixture
def good_generator() -> MockContentGenerator:
    """Generator returning well-formed markdown for every phase."""
    return MockContentGenerator(GOOD_CONTENT)


@pytest.fixture
def event_store() -> InMemoryLifecycleEventStore:
    return InMemoryLifecycleEventStore()


@pytest.fixture
def repository() -> InMemoryWorkflowRepository:
    return InMemoryWorkflowRepository()


@pytest.fixture
def engine(config, good_generator, event_store):
    """Engine over the good generator with the default heuristic scorer."""
    with WorkflowEngine(config, good_generator, event_store=event_store) as engine:
        yield engine


@pytest.fixture
def phase_workflow(engine):
    """A workflow holding one medium-priority task per phase, in phase order."""
    workflow = engine.create_workflow("login", "User login feature")
    for phase in PHASES:
        task = engine.create_task(f"Login {phase}", phase)
        engine.add_task_to_workflow(workflow.workflow_id, task.task_id)
    return engine.require_workflow(workflow.workflow_id)


@pytest.fixture
def fixed_scorer() -> type[FixedScorer]:
    """The FixedScorer class, for tests that need a scripted quality gate."""
    return FixedScorer
