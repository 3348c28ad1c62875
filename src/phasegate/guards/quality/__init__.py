"""Quality gate scorers."""

from phasegate.guards.quality.heuristic import HeuristicContentScorer

__all__ = ["HeuristicContentScorer"]
