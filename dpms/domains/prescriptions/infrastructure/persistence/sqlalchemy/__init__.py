from dpms.domains.prescriptions.infrastructure.persistence.sqlalchemy.models import (
    MedicationModel,
    PrescriptionMedicationModel,
    PrescriptionModel,
    ScannablePayloadModel,
    UserModel,
)

__all__ = [
    "UserModel",
    "MedicationModel",
    "PrescriptionModel",
    "PrescriptionMedicationModel",
    "ScannablePayloadModel",
]
