"""
Execution substrate adapters.

The engine only needs session initialization and best-effort cancellation;
distributed agent execution is provided by external substrates implementing
ExecutionSubstrateInterface.
"""

import logging
import threading
import uuid

from phasegate.domain.config import OrchestratorConfig
from phasegate.domain.interfaces import ExecutionSubstrateInterface

logger = logging.getLogger(__name__)


class InProcessSubstrate(ExecutionSubstrateInterface):
    """Records sessions and cancellation requests in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.sessions: list[str] = []
        self.cancelled: list[str] = []

    def initialize(self, config: OrchestratorConfig) -> str:
        session_id = f"session-{uuid.uuid4()}"
        with self._lock:
            self.sessions.append(session_id)
        logger.debug(
            "Started in-process session %s (max_agents=%d)",
            session_id,
            config.max_agents,
        )
        return session_id

    def cancel_task(self, task_id: str) -> None:
        with self._lock:
            self.cancelled.append(task_id)


class NullSubstrate(ExecutionSubstrateInterface):
    """Substrate that accepts every request and does nothing."""

    def initialize(self, config: OrchestratorConfig) -> str:
        return "null-session"

    def cancel_task(self, task_id: str) -> None:
        pass
