"""
Heuristic quality gate.

Pure scorer with no I/O - rates artifact text by length, markdown
structure and the presence of the term each artifact type is expected to use.
"""

from datetime import UTC, datetime

from phasegate.domain.interfaces import ContentScorerInterface
from phasegate.domain.models import ValidationResult

MIN_CONTENT_LENGTH = 10
BASE_SCORE = 0.70

# Term each artifact type is expected to mention
TYPE_TERMS: dict[str, str] = {
    "spec": "requirement",
    "design": "architecture",
    "test": "test case",
}


class HeuristicContentScorer(ContentScorerInterface):
    """
    Deterministic markdown heuristic.

    Scoring:
        < 10 chars          -> 0.0
        base                   0.70
        length >= 100          +0.10
        "#", "##", "-"         +0.05 each
        more than 5 lines      +0.05
        type term present      +0.10
    Capped at 1.0, rounded to 4 decimals.
    """

    def score(self, content: str, content_type: str) -> float:
        if len(content) < MIN_CONTENT_LENGTH:
            return 0.0

        score = BASE_SCORE
        if len(content) >= 100:
            score += 0.10
        for marker in ("#", "##", "-"):
            if marker in content:
                score += 0.05
        if len(content.split("\n")) > 5:
            score += 0.05

        term = TYPE_TERMS.get(content_type)
        if term and term in content.lower():
            score += 0.10

        return round(min(score, 1.0), 4)

    def evaluate(
        self, content: str, content_type: str, threshold: float
    ) -> ValidationResult:
        """
        Score content against ``threshold``.

        Returns:
            ValidationResult; valid unless there are errors. A score below
            the threshold only adds a suggestion
        """
        score = self.score(content, content_type)
        errors: list[str] = []
        warnings: list[str] = []
        suggestions: list[str] = []

        if len(content) < MIN_CONTENT_LENGTH:
            errors.append("Content is too short")

        lowered = content.lower()
        if content_type == "spec" and "requirement" not in lowered:
            warnings.append("Specification should include requirements section")
        elif content_type == "design" and "#" not in content:
            warnings.append("Design should include section headings")
        elif content_type == "test" and "test case" not in lowered:
            warnings.append("Test artifact should describe test cases")

        if score < threshold:
            suggestions.append(
                f"Quality score {score:.2f} below threshold {threshold:.2f}"
            )

        return ValidationResult(
            valid=not errors,
            score=score,
            errors=tuple(errors),
            warnings=tuple(warnings),
            suggestions=tuple(suggestions),
            timestamp=datetime.now(UTC),
        )
