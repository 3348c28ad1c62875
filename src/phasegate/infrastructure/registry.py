"""
Content generator registry with entry points discovery.

Built-in generators are always available. External packages can add their
own through the ``phasegate.generators`` entry point group:

    [project.entry-points."phasegate.generators"]
    swarm = "mypackage.generators:SwarmGenerator"
"""

import warnings
from importlib.metadata import entry_points
from typing import Any

from phasegate.domain.exceptions import ConfigurationError
from phasegate.domain.interfaces import ContentGeneratorInterface
from phasegate.infrastructure.generators import (
    MockContentGenerator,
    OpenAICompatibleGenerator,
    TemplateContentGenerator,
)

ENTRY_POINT_GROUP = "phasegate.generators"

BUILTIN_GENERATORS: dict[str, type[ContentGeneratorInterface]] = {
    "template": TemplateContentGenerator,
    "mock": MockContentGenerator,
    "openai": OpenAICompatibleGenerator,
}


class GeneratorRegistry:
    """
    Registry for ContentGeneratorInterface implementations.

    Entry points are loaded lazily on first lookup; a generator that fails to
    load is reported with a warning and skipped.

    Example usage:
        generator = GeneratorRegistry.create("openai", model="llama3.1:8b")
    """

    _generators: dict[str, type[ContentGeneratorInterface]] = dict(BUILTIN_GENERATORS)
    _loaded: bool = False

    @classmethod
    def _load_entry_points(cls) -> None:
        if cls._loaded:
            return

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name in cls._generators:
                continue
            try:
                cls._generators[ep.name] = ep.load()
            except Exception as e:
                warnings.warn(
                    f"Failed to load generator '{ep.name}' from entry point: {e}",
                    stacklevel=2,
                )

        cls._loaded = True

    @classmethod
    def register(
        cls, name: str, generator_class: type[ContentGeneratorInterface]
    ) -> None:
        """Manually register a generator class under ``name``."""
        cls._generators[name] = generator_class

    @classmethod
    def get(cls, name: str) -> type[ContentGeneratorInterface]:
        """
        Get a generator class by name.

        Raises:
            ConfigurationError: If no generator is registered under ``name``
        """
        cls._load_entry_points()
        if name not in cls._generators:
            available = ", ".join(sorted(cls._generators)) or "(none)"
            raise ConfigurationError(
                f"Generator '{name}' not found. Available generators: {available}"
            )
        return cls._generators[name]

    @classmethod
    def create(cls, name: str, **config: Any) -> ContentGeneratorInterface:
        """Instantiate the generator registered under ``name``."""
        return cls.get(name)(**config)

    @classmethod
    def available(cls) -> list[str]:
        cls._load_entry_points()
        return sorted(cls._generators)

    @classmethod
    def reset(cls) -> None:
        """Drop manual registrations and forget loaded entry points."""
        cls._generators = dict(BUILTIN_GENERATORS)
        cls._loaded = False
