"""
Prescription Lifecycle Use Cases

Creation by doctors, soft delete, role-filtered reads and the pharmacist
pricing queue.
"""

import logging

from dpms.core.domain import EntityNotFoundException, ValidationException
from dpms.domains.prescriptions.application.dto import CreatePrescriptionRequest
from dpms.domains.prescriptions.application.ports import (
    IMedicationCatalog,
    IPrescriptionRepository,
    IUserDirectory,
)
from dpms.domains.prescriptions.domain.entities import MedicationLine, Prescription
from dpms.domains.prescriptions.domain.value_objects import TimingSlot, ViewerRole

logger = logging.getLogger(__name__)


class CreatePrescriptionUseCase:
    """
    Create a prescription for an existing patient.

    Every medication must reference a catalog entry and carry at least one
    valid timing slot.
    """

    def __init__(
        self,
        prescription_repository: IPrescriptionRepository,
        user_directory: IUserDirectory,
        medication_catalog: IMedicationCatalog,
    ):
        self.prescription_repo = prescription_repository
        self.users = user_directory
        self.catalog = medication_catalog

    async def execute(self, request: CreatePrescriptionRequest) -> Prescription:
        patient = await self.users.find_by_id(request.patient_id)
        if patient is None:
            raise EntityNotFoundException("Patient", request.patient_id)

        if not request.medications:
            raise ValidationException("At least one medication is required", field="medications")

        medicine_ids = [item.medicine_id for item in request.medications]
        known = await self.catalog.find_by_ids(medicine_ids)
        missing = sorted({medicine_id for medicine_id in medicine_ids if medicine_id not in known})
        if missing:
            raise ValidationException(
                f"Unknown medicine id(s): {', '.join(map(str, missing))}",
                field="medications",
                details={"medicine_ids": missing},
            )

        lines = [
            MedicationLine(
                medicine_id=item.medicine_id,
                timing=TimingSlot.parse_many(item.timing),
                medicine=known[item.medicine_id],
            )
            for item in request.medications
        ]
        prescription = Prescription.create(
            patient_id=request.patient_id,
            doctor_id=request.doctor_id,
            disease=request.disease,
            disease_type=request.disease_type,
            medications=lines,
            issued_at=request.issued_at,
        )

        saved = await self.prescription_repo.save(prescription)
        logger.info(f"Created prescription {saved.id} for patient {request.patient_id} by doctor {request.doctor_id}")
        return saved


class DeactivatePrescriptionUseCase:
    """Soft delete; the record stays but drops out of every active query."""

    def __init__(self, prescription_repository: IPrescriptionRepository):
        self.prescription_repo = prescription_repository

    async def execute(self, prescription_id: int) -> Prescription:
        prescription = await self.prescription_repo.find_by_id(prescription_id)
        if prescription is None:
            raise EntityNotFoundException("Prescription", prescription_id)

        if prescription.is_active:
            prescription.deactivate()
            prescription = await self.prescription_repo.save(prescription)
            logger.info(f"Deactivated prescription {prescription_id}")
        return prescription


class GetPrescriptionUseCase:
    """Prescription as a role sees it; patients never see amounts."""

    def __init__(self, prescription_repository: IPrescriptionRepository):
        self.prescription_repo = prescription_repository

    async def execute(self, prescription_id: int, viewer_role: ViewerRole) -> Prescription:
        prescription = await self.prescription_repo.find_by_id(prescription_id)
        if prescription is None:
            raise EntityNotFoundException("Prescription", prescription_id)
        if viewer_role.can_see_amounts():
            return prescription
        return prescription.without_amounts()


class ListPrescriptionsUseCase:
    """
    Active prescription listings per audience.

    Patients get their own prescriptions without amounts; doctors and
    admins get them as stored.

    Example:
        ```python
        use_case = ListPrescriptionsUseCase(prescriptions)
        mine = await use_case.list_for_patient(viewer.id)
        ```
    """

    def __init__(self, prescription_repository: IPrescriptionRepository):
        self.prescription_repo = prescription_repository

    async def list_for_patient(self, patient_id: int) -> list[Prescription]:
        prescriptions = await self.prescription_repo.find_active(patient_id=patient_id)
        return [prescription.without_amounts() for prescription in prescriptions]

    async def list_by_patient(self, patient_id: int, doctor_id: int | None = None) -> list[Prescription]:
        """Prescriptions of one patient, optionally only those written by ``doctor_id``."""
        return await self.prescription_repo.find_active(patient_id=patient_id, doctor_id=doctor_id)

    async def list_by_doctor(self, doctor_id: int) -> list[Prescription]:
        return await self.prescription_repo.find_active(doctor_id=doctor_id)

    async def list_all(self) -> list[Prescription]:
        return await self.prescription_repo.find_active()


class ListPendingPricingUseCase:
    """Issued prescriptions still waiting for at least one amount."""

    def __init__(self, prescription_repository: IPrescriptionRepository):
        self.prescription_repo = prescription_repository

    async def execute(self) -> list[Prescription]:
        pending = await self.prescription_repo.find_pending_pricing()
        return [prescription for prescription in pending if prescription.unpriced_lines]
