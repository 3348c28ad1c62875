"""
Consensus evaluation over a single scorer.

There is no real multi-reviewer mechanism behind this evaluator, so the
accept decision is always the base score against the threshold. Reviewer
scores are only synthesized for reporting when explicitly requested.
"""

import logging
from datetime import UTC, datetime

from phasegate.domain.exceptions import ConfigurationError
from phasegate.domain.interfaces import ContentScorerInterface
from phasegate.domain.models import ConsensusResult

logger = logging.getLogger(__name__)

PARTICIPANT_OFFSETS: tuple[tuple[str, float], ...] = (
    ("agent-1", 0.0),
    ("agent-2", -0.05),
    ("agent-3", 0.05),
)


def _clamp(value: float) -> float:
    return round(min(max(value, 0.0), 1.0), 4)


class ConsensusEvaluator:
    """
    Fail-closed consensus decision.

    Args:
        scorer: Produces the base score
        report_participants: Attach synthesized per-reviewer scores
            (informational; never consulted for the decision)
    """

    def __init__(
        self, scorer: ContentScorerInterface, report_participants: bool = False
    ):
        self._scorer = scorer
        self._report_participants = report_participants

    def evaluate(
        self, content: str, content_type: str, threshold: float
    ) -> ConsensusResult:
        if not 0.0 <= threshold <= 1.0:
            raise ConfigurationError(
                f"consensus threshold must be between 0 and 1, got {threshold}"
            )

        base = self._scorer.score(content, content_type)

        if self._report_participants:
            participants = {
                name: _clamp(base + offset) for name, offset in PARTICIPANT_OFFSETS
            }
        else:
            participants = {}
            logger.warning(
                "No multi-reviewer consensus configured; using score-threshold "
                "fallback for %s content",
                content_type,
            )

        return ConsensusResult(
            achieved=base >= threshold,
            score=base,
            threshold=threshold,
            participant_scores=participants,
            timestamp=datetime.now(UTC),
        )
