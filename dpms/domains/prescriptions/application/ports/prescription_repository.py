"""
Prescription Repository Port
"""

from typing import Protocol, runtime_checkable

from dpms.domains.prescriptions.domain.entities import Prescription
from dpms.domains.prescriptions.domain.value_objects import TimingSlot


@runtime_checkable
class IPrescriptionRepository(Protocol):
    """
    Prescription repository interface.

    Loaded prescriptions carry their lines with ``medicine`` populated from
    the catalog (``None`` when the catalog entry is gone).
    """

    async def find_by_id(self, prescription_id: int) -> Prescription | None:
        """
        Find prescription by ID, active or not.

        Args:
            prescription_id: Prescription identifier

        Returns:
            Prescription if found, None otherwise
        """
        ...

    async def save(self, prescription: Prescription) -> Prescription:
        """
        Insert a new prescription or update an existing one.

        Updates persist ``is_active``, ``payload_issued`` and line amounts.
        Returns the stored prescription with ids assigned.
        """
        ...

    async def find_reminder_candidates(self, slot: TimingSlot) -> list[Prescription]:
        """Active, payload-issued prescriptions with at least one line taken at ``slot``."""
        ...

    async def find_pending_pricing(self) -> list[Prescription]:
        """Active, payload-issued prescriptions with an unpriced line, newest first."""
        ...

    async def find_issued_for_patient(self, patient_id: int) -> list[Prescription]:
        """Active, payload-issued prescriptions of a patient, newest first."""
        ...

    async def find_active(
        self,
        patient_id: int | None = None,
        doctor_id: int | None = None,
    ) -> list[Prescription]:
        """
        Active prescriptions, newest first, issued payload or not.

        Args:
            patient_id: Only prescriptions of this patient
            doctor_id: Only prescriptions written by this doctor
        """
        ...

    async def rollback(self) -> None:
        """Discard the pending transaction so the session can be used again."""
        ...
