"""
Content generator adapters.
"""

from phasegate.infrastructure.generators.mock import MockContentGenerator
from phasegate.infrastructure.generators.openai_compat import (
    OpenAICompatibleGenerator,
    OpenAICompatibleGeneratorConfig,
)
from phasegate.infrastructure.generators.template import TemplateContentGenerator

__all__ = [
    "MockContentGenerator",
    "OpenAICompatibleGenerator",
    "OpenAICompatibleGeneratorConfig",
    "TemplateContentGenerator",
]
