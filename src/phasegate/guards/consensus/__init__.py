"""Consensus decision over a content scorer."""

from phasegate.guards.consensus.evaluator import ConsensusEvaluator

__all__ = ["ConsensusEvaluator"]
