"""
Prescription Domain Entities
"""

from dpms.domains.prescriptions.domain.entities.prescription import MedicationLine, Prescription
from dpms.domains.prescriptions.domain.entities.scannable_payload import ScannablePayload
from dpms.domains.prescriptions.domain.entities.user_profile import UserProfile

__all__ = [
    "Prescription",
    "MedicationLine",
    "ScannablePayload",
    "UserProfile",
]
