"""Tests for ConsensusEvaluator."""

import logging

import pytest

from phasegate.domain.exceptions import ConfigurationError
from phasegate.guards.consensus import ConsensusEvaluator


class TestConsensusDecision:
    """Tests for the consensus accept/reject decision."""

    def test_score_above_threshold_is_achieved(self, fixed_scorer):
        """A base score above the threshold achieves consensus."""
        evaluator = ConsensusEvaluator(fixed_scorer({"spec": 0.72}))

        result = evaluator.evaluate("content", "spec", threshold=0.7)

        assert result.achieved is True
        assert result.score == 0.72
        assert result.threshold == 0.7

    def test_score_below_threshold_is_not_achieved(self, fixed_scorer):
        evaluator = ConsensusEvaluator(fixed_scorer({"spec": 0.65}))

        result = evaluator.evaluate("content", "spec", threshold=0.7)

        assert result.achieved is False

    def test_score_equal_to_threshold_is_achieved(self, fixed_scorer):
        """The threshold itself is enough."""
        evaluator = ConsensusEvaluator(fixed_scorer({"spec": 0.7}))

        assert evaluator.evaluate("content", "spec", threshold=0.7).achieved

    @pytest.mark.parametrize("threshold", [-0.1, 1.1])
    def test_threshold_out_of_range(self, fixed_scorer, threshold: float):
        """A threshold outside [0, 1] is a configuration error."""
        evaluator = ConsensusEvaluator(fixed_scorer({}))

        with pytest.raises(ConfigurationError):
            evaluator.evaluate("content", "spec", threshold=threshold)


class TestParticipantScores:
    """Tests for reported participant scores."""

    def test_no_participants_by_default(self, fixed_scorer, caplog):
        """Without participants the fallback is logged."""
        evaluator = ConsensusEvaluator(fixed_scorer({"design": 0.9}))

        with caplog.at_level(logging.WARNING):
            result = evaluator.evaluate("content", "design", threshold=0.7)

        assert result.participant_scores == {}
        assert result.basis == "score-threshold"
        assert "score-threshold fallback" in caplog.text

    def test_reported_participants_are_clamped(self, fixed_scorer):
        """Participant scores stay within [0, 1]."""
        evaluator = ConsensusEvaluator(
            fixed_scorer({"design": 0.98}), report_participants=True
        )

        result = evaluator.evaluate("content", "design", threshold=0.7)

        assert result.participant_scores == {
            "agent-1": 0.98,
            "agent-2": 0.93,
            "agent-3": 1.0,
        }

    def test_participants_never_change_the_decision(self, fixed_scorer):
        """The decision uses the base score, not the participants."""
        # agent-3 would clear the threshold; the base score does not
        evaluator = ConsensusEvaluator(
            fixed_scorer({"spec": 0.67}), report_participants=True
        )

        result = evaluator.evaluate("content", "spec", threshold=0.7)

        assert result.participant_scores["agent-3"] == 0.72
        assert result.achieved is False
