"""
Prescription Repository Implementations
"""

from dpms.domains.prescriptions.infrastructure.repositories.directory_repositories import (
    SQLAlchemyMedicationCatalog,
    SQLAlchemyUserDirectory,
)
from dpms.domains.prescriptions.infrastructure.repositories.payload_repository import (
    SQLAlchemyScannablePayloadRepository,
)
from dpms.domains.prescriptions.infrastructure.repositories.prescription_repository import (
    SQLAlchemyPrescriptionRepository,
)

__all__ = [
    "SQLAlchemyPrescriptionRepository",
    "SQLAlchemyScannablePayloadRepository",
    "SQLAlchemyUserDirectory",
    "SQLAlchemyMedicationCatalog",
]
