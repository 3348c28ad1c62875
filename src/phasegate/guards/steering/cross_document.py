"""
Cross-document alignment for steering documents.

Scores every supplied document against the product, structure and technology
vocabularies and reports dependency gaps between document types. Scores are
deterministic; only ``validated_at`` reads the clock.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from statistics import fmean

from phasegate.domain.models import (
    CrossValidationResult,
    DocumentAlignment,
    DocumentType,
    SteeringDocument,
)

logger = logging.getLogger(__name__)

OVERALL_ALIGNMENT_THRESHOLD = 0.95
DOCUMENT_ALIGNMENT_THRESHOLD = 0.90

VOCABULARIES: dict[str, tuple[str, ...]] = {
    "product": (
        "vision", "mission", "strategy", "objectives", "stakeholder", "user",
        "business",
    ),
    "structure": (
        "architecture", "clean", "solid", "domain", "layer", "component",
        "interface",
    ),
    "technology": (
        "python", "performance", "security", "testing", "quality", "dependency",
    ),
}  # fmt: skip

# Term whose absence earns a targeted recommendation
ANCHOR_TERMS: dict[DocumentType, str] = {
    DocumentType.PRODUCT: "vision",
    DocumentType.STRUCTURE: "architecture",
    DocumentType.TECH: "performance",
}


def axis_score(content: str, axis: str) -> float:
    """Alignment of ``content`` with one vocabulary axis."""
    lowered = content.lower()
    score = 0.7
    for keyword in VOCABULARIES[axis]:
        if keyword in lowered:
            score += 0.05
    for marker in ("##", "###", "-"):
        if marker in content:
            score += 0.05
    return round(min(score, 1.0), 4)


class CrossDocumentValidator:
    """Computes CrossValidationResult over a set of steering documents."""

    def alignment(
        self, documents: Iterable[SteeringDocument]
    ) -> CrossValidationResult:
        # Last document of a given type wins
        by_type: dict[DocumentType, SteeringDocument] = {}
        for document in documents:
            by_type[DocumentType(document.doc_type)] = document

        issues: list[str] = []
        recommendations: list[str] = []

        if not by_type:
            issues.append("No steering documents supplied")
            return CrossValidationResult(
                overall_alignment=0.0,
                document_scores={},
                issues=tuple(issues),
                validated_at=datetime.now(UTC),
            )

        scores: dict[DocumentType, DocumentAlignment] = {}
        for doc_type in DocumentType:
            document = by_type.get(doc_type)
            if document is None:
                continue
            product = axis_score(document.content, "product")
            structure = axis_score(document.content, "structure")
            technology = axis_score(document.content, "technology")
            average = round(fmean((product, structure, technology)), 4)
            scores[doc_type] = DocumentAlignment(
                product=product,
                structure=structure,
                technology=technology,
                average=average,
            )

            if average < DOCUMENT_ALIGNMENT_THRESHOLD:
                recommendations.append(
                    f"Improve {doc_type.value} document alignment - "
                    f"current score: {average * 100:.1f}%"
                )
            anchor = ANCHOR_TERMS[doc_type]
            if anchor not in document.content.lower():
                recommendations.append(
                    f"Add {anchor} coverage to the {doc_type.value} document"
                )

        overall = round(fmean(s.average for s in scores.values()), 4)
        if overall < OVERALL_ALIGNMENT_THRESHOLD:
            issues.append(
                "Cross-document alignment below recommended threshold (95%)"
            )

        issues.extend(self._dependency_issues(set(by_type)))

        logger.info(
            "Cross-document alignment %.1f%% across %d documents (%d issues)",
            overall * 100,
            len(scores),
            len(issues),
        )
        return CrossValidationResult(
            overall_alignment=overall,
            document_scores=scores,
            issues=tuple(issues),
            recommendations=tuple(recommendations),
            validated_at=datetime.now(UTC),
        )

    def _dependency_issues(self, present: set[DocumentType]) -> list[str]:
        issues = []
        for doc_type in DocumentType:
            if doc_type not in present:
                continue
            for required in doc_type.dependencies:
                if required not in present:
                    issues.append(
                        f"{doc_type.value.capitalize()} document requires "
                        f"{required.value.capitalize()} document to be present"
                    )
        return issues
