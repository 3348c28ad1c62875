"""
Orchestrator configuration values.

OrchestratorConfig validates itself on construction so an invalid
configuration is rejected at build time, never mid-run.
"""

from dataclasses import dataclass, replace
from typing import Any

from phasegate.domain.exceptions import ConfigurationError

MAX_AGENTS_LIMIT = 50


@dataclass(frozen=True)
class OrchestratorConfig:
    """Configuration surface consumed by the WorkflowEngine."""

    name: str = "phasegate"

    # Quality gate
    quality_threshold: float = 0.8
    auto_validation: bool = True

    # Consensus
    consensus_threshold: float = 0.7
    consensus_required: bool = False  # Can be overridden per task
    enable_consensus: bool = True
    report_participants: bool = False  # Synthesized reviewer scores (reporting only)

    # Workflow shape
    enable_specs_driven: bool = True

    # Resources
    max_agents: int = 8
    max_concurrency: int = 1
    generation_timeout: float = 120.0
    session_timeout: float = 60.0

    # Persistence
    persistence_enabled: bool = False
    workflow_directory: str = ".phasegate"

    def __post_init__(self) -> None:
        errors = validate_config_values(self)
        if errors:
            raise ConfigurationError(
                f"Invalid configuration: {', '.join(errors)}", tuple(errors)
            )

    def with_overrides(self, **changes: Any) -> "OrchestratorConfig":
        """Return a validated copy with ``changes`` applied."""
        return replace(self, **changes)


def validate_config_values(config: OrchestratorConfig) -> list[str]:
    """Return every hard error in ``config`` (empty when valid)."""
    errors = []

    if not config.name:
        errors.append("name is required")

    for field_name in ("quality_threshold", "consensus_threshold"):
        value = getattr(config, field_name)
        if not 0.0 <= value <= 1.0:
            errors.append(f"{field_name} must be between 0 and 1")

    if config.max_agents < 1:
        errors.append("max_agents must be at least 1")
    elif config.max_agents > MAX_AGENTS_LIMIT:
        errors.append(f"max_agents must be at most {MAX_AGENTS_LIMIT}")

    if config.max_concurrency < 1:
        errors.append("max_concurrency must be at least 1")

    for field_name in ("generation_timeout", "session_timeout"):
        if getattr(config, field_name) <= 0:
            errors.append(f"{field_name} must be positive")

    return errors


def config_warnings(config: OrchestratorConfig) -> list[str]:
    """Advisory warnings for a valid but questionable configuration."""
    warnings = []
    if config.quality_threshold < 0.5:
        warnings.append("Low quality threshold may reduce output quality")
    if config.consensus_required and config.consensus_threshold > 0.9:
        warnings.append("High consensus threshold may slow decision making")
    if config.max_concurrency > config.max_agents:
        warnings.append("max_concurrency exceeds max_agents")
    return warnings


class OrchestratorConfigBuilder:
    """
    Fluent builder for OrchestratorConfig.

    Example:
        config = (
            OrchestratorConfigBuilder()
            .quality(0.85)
            .consensus(0.8, required=True)
            .concurrency(4)
            .build()
        )
    """

    def __init__(self, base: OrchestratorConfig | None = None, **overrides: Any):
        self._values: dict[str, Any] = dict(vars(base or OrchestratorConfig()))
        self._values.update(overrides)

    def _set(self, **values: Any) -> "OrchestratorConfigBuilder":
        self._values.update(values)
        return self  # Fluent

    def name(self, name: str) -> "OrchestratorConfigBuilder":
        return self._set(name=name)

    def quality(
        self, threshold: float, auto_validation: bool = True
    ) -> "OrchestratorConfigBuilder":
        return self._set(quality_threshold=threshold, auto_validation=auto_validation)

    def consensus(
        self, threshold: float, required: bool = False
    ) -> "OrchestratorConfigBuilder":
        return self._set(
            consensus_threshold=threshold,
            consensus_required=required,
            enable_consensus=True,
        )

    def specs_driven(self, enabled: bool = True) -> "OrchestratorConfigBuilder":
        return self._set(enable_specs_driven=enabled)

    def max_agents(self, count: int) -> "OrchestratorConfigBuilder":
        return self._set(max_agents=count)

    def concurrency(self, workers: int) -> "OrchestratorConfigBuilder":
        return self._set(max_concurrency=workers)

    def timeouts(
        self, generation: float, session: float | None = None
    ) -> "OrchestratorConfigBuilder":
        self._set(generation_timeout=generation)
        if session is not None:
            self._set(session_timeout=session)
        return self

    def persistence(
        self, enabled: bool = True, directory: str | None = None
    ) -> "OrchestratorConfigBuilder":
        self._set(persistence_enabled=enabled)
        if directory is not None:
            self._set(workflow_directory=directory)
        return self

    def working_directory(self, path: str) -> "OrchestratorConfigBuilder":
        return self._set(workflow_directory=path)

    def report_participants(self, enabled: bool = True) -> "OrchestratorConfigBuilder":
        return self._set(report_participants=enabled)

    def build(self) -> OrchestratorConfig:
        """Build and validate. Raises ConfigurationError on invalid values."""
        unknown = set(self._values) - set(OrchestratorConfig.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration fields: {', '.join(sorted(unknown))}"
            )
        return OrchestratorConfig(**self._values)


def _development() -> OrchestratorConfig:
    return (
        OrchestratorConfigBuilder()
        .max_agents(10)
        .quality(0.6)
        .consensus(0.6, required=False)
        .specs_driven(True)
        .build()
    )


def _production() -> OrchestratorConfig:
    return (
        OrchestratorConfigBuilder()
        .max_agents(6)
        .quality(0.85)
        .consensus(0.8, required=True)
        .specs_driven(True)
        .persistence(True)
        .build()
    )


def _research() -> OrchestratorConfig:
    return (
        OrchestratorConfigBuilder()
        .max_agents(12)
        .quality(0.7)
        .consensus(0.7, required=True)
        .specs_driven(False)
        .concurrency(4)
        .build()
    )


def _testing() -> OrchestratorConfig:
    return (
        OrchestratorConfigBuilder()
        .max_agents(4)
        .quality(0.5, auto_validation=False)
        .consensus(0.5, required=False)
        .specs_driven(False)
        .report_participants(True)
        .build()
    )


def _specs_driven() -> OrchestratorConfig:
    return (
        OrchestratorConfigBuilder()
        .max_agents(8)
        .quality(0.8)
        .consensus(0.75, required=True)
        .specs_driven(True)
        .build()
    )


PRESETS = {
    "development": _development,
    "production": _production,
    "research": _research,
    "testing": _testing,
    "specs_driven": _specs_driven,
}
