"""
Guards for phase-gated artifact production.

Guards are deterministic validators: identical input always yields an
identical score. Only the timestamps on their results read the clock.

Organization:
- quality/: content quality gate (ContentScorerInterface implementations)
- consensus/: accept/reject decision over a scorer
- steering/: steering document rules and cross-document alignment
"""

from phasegate.guards.consensus import ConsensusEvaluator
from phasegate.guards.quality import HeuristicContentScorer
from phasegate.guards.steering import CrossDocumentValidator, SteeringDocumentValidator

__all__ = [
    "HeuristicContentScorer",
    "ConsensusEvaluator",
    "CrossDocumentValidator",
    "SteeringDocumentValidator",
]
