"""
Payload Query Use Cases

Reads of issued payloads, each passed through the visibility resolver.
"""

import logging

from dpms.core.domain import EntityNotFoundException
from dpms.domains.prescriptions.application.ports import IPrescriptionRepository, IScannablePayloadRepository
from dpms.domains.prescriptions.domain.entities import ScannablePayload
from dpms.domains.prescriptions.domain.services import apply_visibility
from dpms.domains.prescriptions.domain.value_objects import ViewerRole

logger = logging.getLogger(__name__)


class _PayloadReader:
    def __init__(
        self,
        payload_repository: IScannablePayloadRepository,
        prescription_repository: IPrescriptionRepository,
    ):
        self.payload_repo = payload_repository
        self.prescription_repo = prescription_repository

    async def _visible(self, payload: ScannablePayload, viewer_role: ViewerRole) -> ScannablePayload:
        prescription = await self.prescription_repo.find_by_id(payload.prescription_id)
        lines = prescription.medications if prescription else []
        return apply_visibility(payload, lines, viewer_role)


class GetPayloadUseCase(_PayloadReader):
    """Payload of one prescription as the viewer may see it."""

    async def execute(self, prescription_id: int, viewer_role: ViewerRole) -> ScannablePayload:
        payload = await self.payload_repo.find_by_prescription_id(prescription_id)
        if payload is None:
            raise EntityNotFoundException(
                "ScannablePayload",
                prescription_id,
                message=f"No payload issued for prescription {prescription_id}",
            )
        return await self._visible(payload, viewer_role)


class ListPatientPayloadsUseCase(_PayloadReader):
    """A patient's own active payloads, read with the patient role."""

    async def execute(self, patient_id: int) -> list[ScannablePayload]:
        payloads = await self.payload_repo.find_active_by_patient(patient_id)
        return [await self._visible(payload, ViewerRole.PATIENT) for payload in payloads]


class ListAllPayloadsUseCase:
    """Every active payload in the admin view, which is never redacted."""

    def __init__(self, payload_repository: IScannablePayloadRepository):
        self.payload_repo = payload_repository

    async def execute(self) -> list[ScannablePayload]:
        return await self.payload_repo.find_all_active()
