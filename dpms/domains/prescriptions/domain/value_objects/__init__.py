"""
Prescription Domain Value Objects
"""

from dpms.domains.prescriptions.domain.value_objects.prescription_enums import (
    DiseaseType,
    MedicineInfo,
    TimingSlot,
    ViewerRole,
    ordered_slots,
)

__all__ = [
    "TimingSlot",
    "DiseaseType",
    "ViewerRole",
    "MedicineInfo",
    "ordered_slots",
]
