"""
Issue Payload Use Case

Creates the one scannable payload a prescription ever gets.
"""

import asyncio
import logging

from dpms.core.domain import EntityNotFoundException, PayloadAlreadyIssuedException
from dpms.domains.prescriptions.application.ports import (
    IPayloadRenderer,
    IPrescriptionRepository,
    IScannablePayloadRepository,
    IUserDirectory,
)
from dpms.domains.prescriptions.domain.entities import ScannablePayload
from dpms.domains.prescriptions.domain.services import PayloadSnapshotBuilder

logger = logging.getLogger(__name__)


class IssuePayloadUseCase:
    """
    Snapshot a prescription, render it as a QR image and store it.

    Storing the payload and flipping ``payload_issued`` is a single
    repository call so both land in one transaction.
    """

    def __init__(
        self,
        prescription_repository: IPrescriptionRepository,
        payload_repository: IScannablePayloadRepository,
        user_directory: IUserDirectory,
        renderer: IPayloadRenderer,
        snapshot_builder: PayloadSnapshotBuilder | None = None,
    ):
        self.prescription_repo = prescription_repository
        self.payload_repo = payload_repository
        self.users = user_directory
        self.renderer = renderer
        self.snapshot_builder = snapshot_builder or PayloadSnapshotBuilder()

    async def execute(self, prescription_id: int) -> ScannablePayload:
        """
        Issue the payload.

        Raises:
            EntityNotFoundException: Prescription missing or inactive, or a profile is missing
            PayloadAlreadyIssuedException: A payload exists already
            ValidationException: A medication has no catalog entry
        """
        prescription = await self.prescription_repo.find_by_id(prescription_id)
        if prescription is None or not prescription.is_active:
            raise EntityNotFoundException("Prescription", prescription_id)

        existing = await self.payload_repo.find_by_prescription_id(prescription_id)
        if existing is not None or prescription.payload_issued:
            raise PayloadAlreadyIssuedException(prescription_id)

        patient = await self.users.find_by_id(prescription.patient_id)
        if patient is None:
            raise EntityNotFoundException("Patient", prescription.patient_id)
        doctor = await self.users.find_by_id(prescription.doctor_id)
        if doctor is None:
            raise EntityNotFoundException("Doctor", prescription.doctor_id)

        snapshot = self.snapshot_builder.build(prescription, patient, doctor)
        text = PayloadSnapshotBuilder.to_json(snapshot)
        artifact = await asyncio.to_thread(self.renderer.render, text)

        payload = await self.payload_repo.create_issued(
            ScannablePayload(
                prescription_id=prescription_id,
                patient_id=prescription.patient_id,
                doctor_id=prescription.doctor_id,
                artifact=artifact,
            )
        )
        prescription.mark_payload_issued()

        logger.info(f"Issued payload {payload.id} for prescription {prescription_id}")
        return payload
