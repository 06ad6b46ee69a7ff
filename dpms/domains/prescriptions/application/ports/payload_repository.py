"""
Scannable Payload Repository Port
"""

from typing import Protocol, runtime_checkable

from dpms.domains.prescriptions.domain.entities import ScannablePayload


@runtime_checkable
class IScannablePayloadRepository(Protocol):
    """Storage of issued payloads, one per prescription."""

    async def find_by_prescription_id(self, prescription_id: int) -> ScannablePayload | None:
        ...

    async def create_issued(self, payload: ScannablePayload) -> ScannablePayload:
        """
        Store the payload and set ``payload_issued`` on its prescription.

        Both writes happen in one transaction.

        Raises:
            PayloadAlreadyIssuedException: A payload already exists for the prescription
        """
        ...

    async def find_active_by_patient(self, patient_id: int) -> list[ScannablePayload]:
        """Active payloads of a patient, newest first."""
        ...

    async def find_all_active(self) -> list[ScannablePayload]:
        """Every active payload, newest first."""
        ...
