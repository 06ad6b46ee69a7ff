"""
Prescription Domain Services
"""

from dpms.domains.prescriptions.domain.services.payload_snapshot import PayloadSnapshotBuilder
from dpms.domains.prescriptions.domain.services.visibility_resolver import (
    VisibilityDecision,
    apply_visibility,
    is_fully_priced,
    resolve_visibility,
)

__all__ = [
    "PayloadSnapshotBuilder",
    "VisibilityDecision",
    "apply_visibility",
    "is_fully_priced",
    "resolve_visibility",
]
