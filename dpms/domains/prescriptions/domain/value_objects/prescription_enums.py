"""
Prescription Domain Value Objects

Timing slots, disease categories and viewer roles.
"""

from dataclasses import dataclass
from typing import Iterable

from dpms.core.domain import StatusEnum, ValidationException, ValueObject


class TimingSlot(StatusEnum):
    """
    Daily intake slot of a medication line.

    Each slot has a fixed local trigger hour for reminders:
    - MORNING -> 08:00
    - AFTERNOON -> 14:00
    - NIGHT -> 20:00
    """

    MORNING = "M"
    AFTERNOON = "A"
    NIGHT = "N"

    @property
    def hour(self) -> int:
        return _SLOT_HOURS[self.value]

    @property
    def label(self) -> str:
        """Human-readable label used in reminder messages."""
        return _SLOT_LABELS[self.value]

    @property
    def bucket(self) -> str:
        """Key of the grouped patient reminder view."""
        return self.name.lower()

    @classmethod
    def parse_many(cls, values: Iterable[str]) -> frozenset["TimingSlot"]:
        """
        Parse wire values into a non-empty slot set.

        Raises:
            ValidationException: On unknown values or an empty set
        """
        slots = set()
        for value in values:
            try:
                slots.add(cls(value))
            except ValueError:
                raise ValidationException(
                    f"Invalid timing '{value}'. Allowed: {', '.join(cls.values())}",
                    field="timing",
                ) from None
        if not slots:
            raise ValidationException("At least one timing slot is required", field="timing")
        return frozenset(slots)


_SLOT_HOURS = {"M": 8, "A": 14, "N": 20}

_SLOT_LABELS = {
    "M": "Morning (8:00 AM)",
    "A": "Afternoon (2:00 PM)",
    "N": "Night (8:00 PM)",
}


def ordered_slots(slots: Iterable[TimingSlot]) -> list[TimingSlot]:
    """Slots in day order (M, A, N)."""
    order = list(TimingSlot)
    return sorted(slots, key=order.index)


class DiseaseType(StatusEnum):
    """Disease category of a prescription."""

    GENERAL = "General"
    LONG_TIME = "Long Time"
    CHRONIC = "Chronic"


class ViewerRole(StatusEnum):
    """Role of the user reading or mutating prescription data."""

    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"
    PHARMACIST = "pharmacist"

    def can_see_issued_payload(self) -> bool:
        """Only admins keep seeing an artifact once every line is priced."""
        return self is ViewerRole.ADMIN

    def can_see_amounts(self) -> bool:
        return self is not ViewerRole.PATIENT


@dataclass(frozen=True)
class MedicineInfo(ValueObject):
    """Catalog entry of a medicine as seen by prescriptions."""

    id: int
    name: str
    dosage: str

    def to_snapshot(self) -> dict:
        return {"id": self.id, "name": self.name, "dosage": self.dosage}
