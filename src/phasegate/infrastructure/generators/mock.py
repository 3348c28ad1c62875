"""
Mock generator for testing without a model.

Returns predefined responses, either in sequence or keyed by content type.
"""

import threading
import time
from collections.abc import Mapping, Sequence

from phasegate.domain.interfaces import ContentGeneratorInterface


class MockContentGenerator(ContentGeneratorInterface):
    """Returns predefined responses for testing."""

    def __init__(
        self,
        responses: Sequence[str] | Mapping[str, str],
        delay: float = 0.0,
    ):
        """
        Args:
            responses: Sequence returned in call order, or a mapping from
                content type to response
            delay: Seconds to sleep before answering (for timeout tests)
        """
        self._responses = responses
        self._delay = delay
        self._call_count = 0
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str, str | None]] = []

    def generate_content(
        self,
        prompt: str,
        content_type: str,
        agent_hint: str | None = None,
    ) -> str:
        """Return the next predefined response."""
        with self._lock:
            self.calls.append((prompt, content_type, agent_hint))
            index = self._call_count
            self._call_count += 1

        if self._delay:
            time.sleep(self._delay)

        if isinstance(self._responses, Mapping):
            if content_type not in self._responses:
                raise KeyError(
                    f"MockContentGenerator has no response for {content_type}"
                )
            return self._responses[content_type]

        if index >= len(self._responses):
            raise RuntimeError("MockContentGenerator exhausted responses")
        return self._responses[index]

    @property
    def call_count(self) -> int:
        """Number of times generate_content() has been called."""
        return self._call_count

    def reset(self) -> None:
        """Reset the call counter to reuse responses."""
        with self._lock:
            self._call_count = 0
            self.calls.clear()
