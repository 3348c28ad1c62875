"""Steering document validation."""

from phasegate.guards.steering.cross_document import CrossDocumentValidator
from phasegate.guards.steering.document import SteeringDocumentValidator

__all__ = ["CrossDocumentValidator", "SteeringDocumentValidator"]
