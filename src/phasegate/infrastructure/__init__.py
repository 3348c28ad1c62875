"""
Infrastructure layer for phase-gated artifact production.

Contains adapters for external concerns (persistence, generators, substrate,
configuration loading, registry, logging).
"""

from phasegate.infrastructure.config_loader import (
    load_config_file,
    load_config_from_env,
    load_plan,
    load_preset,
)
from phasegate.infrastructure.generators import (
    MockContentGenerator,
    OpenAICompatibleGenerator,
    TemplateContentGenerator,
)
from phasegate.infrastructure.logging_setup import setup_logging
from phasegate.infrastructure.persistence import (
    FilesystemLifecycleEventStore,
    FilesystemWorkflowRepository,
    InMemoryLifecycleEventStore,
    InMemoryWorkflowRepository,
)
from phasegate.infrastructure.registry import GeneratorRegistry
from phasegate.infrastructure.substrate import InProcessSubstrate, NullSubstrate

__all__ = [
    # Persistence
    "InMemoryWorkflowRepository",
    "FilesystemWorkflowRepository",
    "InMemoryLifecycleEventStore",
    "FilesystemLifecycleEventStore",
    # Generators
    "TemplateContentGenerator",
    "MockContentGenerator",
    "OpenAICompatibleGenerator",
    # Substrate
    "InProcessSubstrate",
    "NullSubstrate",
    # Registry
    "GeneratorRegistry",
    # Configuration and logging
    "load_config_file",
    "load_config_from_env",
    "load_plan",
    "load_preset",
    "setup_logging",
]
