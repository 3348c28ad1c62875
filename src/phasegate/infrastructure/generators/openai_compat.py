"""
OpenAI-compatible content generator.

Connects to any endpoint speaking the OpenAI chat completions API
(Ollama, vLLM, OpenAI itself).
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, cast

from openai import OpenAI

from phasegate.domain.interfaces import ContentGeneratorInterface

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434/v1"

AGENT_ROLES: dict[str, str] = {
    "requirements_analyst": "a requirements analyst writing precise specifications",
    "design_architect": "a software architect writing design documents",
    "implementation_coder": "a senior engineer writing implementation plans and code",
    "quality_reviewer": "a quality engineer writing test plans and reviews",
}


@dataclass
class OpenAICompatibleGeneratorConfig:
    """Configuration for OpenAICompatibleGenerator.

    This typed config ensures unknown fields are rejected at construction time.
    """

    model: str = "qwen2.5-coder:7b"
    base_url: str = DEFAULT_BASE_URL
    api_key: str = "ollama"  # required by the client, unused by Ollama
    timeout: float = 120.0
    temperature: float = 0.7


class OpenAICompatibleGenerator(ContentGeneratorInterface):
    """Requests markdown artifacts from an OpenAI-compatible endpoint."""

    config_class = OpenAICompatibleGeneratorConfig

    def __init__(
        self,
        config: OpenAICompatibleGeneratorConfig | None = None,
        client: Any = None,
        **kwargs: Any,
    ):
        """
        Args:
            config: Typed configuration object (preferred)
            client: Pre-built client (tests inject a fake here)
            **kwargs: Fields for OpenAICompatibleGeneratorConfig
        """
        if config is None:
            config = OpenAICompatibleGeneratorConfig(**kwargs)

        self._config = config
        self._client = client or OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
        )

    def generate_content(
        self,
        prompt: str,
        content_type: str,
        agent_hint: str | None = None,
    ) -> str:
        role = AGENT_ROLES.get(agent_hint or "", "a technical writer")
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are {role}. Produce a {content_type} document in "
                    "markdown with headings and bullet lists."
                ),
            },
            {"role": "user", "content": prompt},
        ]

        logger.debug("Requesting %s content from %s", content_type, self._config.model)
        response = self._client.chat.completions.create(
            model=self._config.model,
            messages=cast(Any, messages),
            temperature=self._config.temperature,
        )
        content = response.choices[0].message.content or ""
        return self._strip_fence(content)

    def _strip_fence(self, content: str) -> str:
        """Unwrap a response that arrives inside a single markdown fence."""
        match = re.fullmatch(
            r"\s*```(?:markdown|md)?\n(.*?)\n```\s*", content, re.DOTALL
        )
        if match:
            return match.group(1)
        return content.strip()
