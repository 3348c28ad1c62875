"""
Per-document steering validation.

Each steering document type carries a small rule table of phrases it must
(error) or should (warning) contain. Compliance checks whether a document
addresses a free-form list of requirements.
"""

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime

from phasegate.domain.models import (
    ComplianceResult,
    DocumentType,
    ValidationResult,
)

logger = logging.getLogger(__name__)

COMPLIANCE_TERM_RATIO = 0.4
MISSING_REQUIREMENT_PENALTY = 0.1

STOP_WORDS = frozenset(
    {
        "must", "be", "present", "required", "needed", "should", "the", "a",
        "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
        "by",
    }
)  # fmt: skip


@dataclass(frozen=True)
class SteeringRule:
    """A required phrase and the severity of its absence."""

    rule_id: str
    phrase: str
    severity: str  # "error" | "warning"
    message: str


RULES: dict[DocumentType, tuple[SteeringRule, ...]] = {
    DocumentType.PRODUCT: (
        SteeringRule(
            "product-vision-required",
            "Vision Statement",
            "error",
            "Product document must include Vision Statement",
        ),
        SteeringRule(
            "product-mission-required",
            "Mission Statement",
            "error",
            "Product document must include Mission Statement",
        ),
        SteeringRule(
            "product-stakeholders-suggested",
            "Stakeholder",
            "warning",
            "Consider identifying stakeholders",
        ),
    ),
    DocumentType.STRUCTURE: (
        SteeringRule(
            "structure-architecture-required",
            "Architecture",
            "error",
            "Structure document must define its Architecture",
        ),
        SteeringRule(
            "structure-layers-suggested",
            "Layer",
            "warning",
            "Consider defining Layer structure",
        ),
        SteeringRule(
            "structure-components-suggested",
            "Component",
            "warning",
            "Consider describing Component boundaries",
        ),
    ),
    DocumentType.TECH: (
        SteeringRule(
            "technology-stack-specified",
            "Technology Stack",
            "warning",
            "Consider specifying technology stack",
        ),
        SteeringRule(
            "performance-standards-defined",
            "Performance Standards",
            "warning",
            "Consider defining performance standards",
        ),
    ),
}

TYPE_KEYWORDS: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.PRODUCT: (
        "vision",
        "mission",
        "strategy",
        "objectives",
        "stakeholder",
    ),
    DocumentType.STRUCTURE: ("architecture", "clean", "solid", "domain", "layer"),
    DocumentType.TECH: ("python", "performance", "security", "testing", "quality"),
}


def document_score(content: str, doc_type: DocumentType) -> float:
    """Structure and keyword heuristic for a steering document."""
    score = 0.7
    if len(content) >= 1000:
        score += 0.1
    if len(content) >= 2000:
        score += 0.05
    if "##" in content:
        score += 0.05
    if "###" in content:
        score += 0.05
    if "-" in content or "*" in content:
        score += 0.05

    lowered = content.lower()
    for keyword in TYPE_KEYWORDS.get(doc_type, ()):
        if keyword in lowered:
            score += 0.02

    return round(min(score, 1.0), 4)


def extract_key_terms(requirement: str) -> list[str]:
    """Words longer than two characters that are not stop words."""
    terms = []
    for word in re.split(r"[\s\-_]+", requirement.lower()):
        if len(word) > 2 and word not in STOP_WORDS:
            terms.append(re.sub(r"[^\w]", "", word))
    return terms


def requirement_fulfilled(content: str, requirement: str) -> bool:
    lowered = content.lower()
    if requirement.lower() in lowered:
        return True
    terms = extract_key_terms(requirement)
    if not terms:
        return False
    matches = sum(1 for term in terms if term in lowered)
    return matches / len(terms) >= COMPLIANCE_TERM_RATIO


class SteeringDocumentValidator:
    """Rule-table validation and requirement compliance for steering docs."""

    def validate_document(
        self, content: str, doc_type: DocumentType
    ) -> ValidationResult:
        """
        Apply the rule table for ``doc_type``.

        A missing error-severity phrase makes the document invalid; missing
        warning-severity phrases are reported but do not.
        """
        doc_type = DocumentType(doc_type)
        rules = RULES.get(doc_type, ())
        errors: list[str] = []
        warnings: list[str] = []
        passed: list[str] = []
        failed: list[str] = []

        for rule in rules:
            if rule.phrase in content:
                passed.append(rule.rule_id)
                continue
            failed.append(rule.rule_id)
            if rule.severity == "error":
                errors.append(rule.message)
            else:
                warnings.append(rule.message)

        result = ValidationResult(
            valid=not errors,
            score=document_score(content, doc_type),
            errors=tuple(errors),
            warnings=tuple(warnings),
            rules_applied=tuple(rule.rule_id for rule in rules),
            passed_rules=tuple(passed),
            failed_rules=tuple(failed),
            timestamp=datetime.now(UTC),
        )
        logger.debug(
            "Validated %s document: valid=%s score=%.2f failed_rules=%d",
            doc_type.value,
            result.valid,
            result.score,
            len(failed),
        )
        return result

    def validate_compliance(
        self, content: str, requirements: list[str] | tuple[str, ...]
    ) -> ComplianceResult:
        """Check which ``requirements`` the content addresses."""
        if not requirements:
            return ComplianceResult(
                compliant=True,
                score=1.0,
                missing_requirements=(),
                fulfilled_requirements=(),
                suggestions=(),
                required=0,
                fulfilled=0,
                percentage=100.0,
            )

        fulfilled: list[str] = []
        missing: list[str] = []
        for requirement in requirements:
            if requirement_fulfilled(content, requirement):
                fulfilled.append(requirement)
            else:
                missing.append(requirement)

        fraction = len(fulfilled) / len(requirements)
        score = max(0.0, fraction - MISSING_REQUIREMENT_PENALTY * len(missing))

        logger.info(
            "Steering compliance: %d/%d requirements fulfilled",
            len(fulfilled),
            len(requirements),
        )
        return ComplianceResult(
            compliant=not missing,
            score=round(score, 4),
            missing_requirements=tuple(missing),
            fulfilled_requirements=tuple(fulfilled),
            suggestions=tuple(f"Add content addressing: {r}" for r in missing),
            required=len(requirements),
            fulfilled=len(fulfilled),
            percentage=round(fraction * 100, 2),
        )
