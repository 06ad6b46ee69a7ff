"""
Prescription DTOs

Request and result objects passed between the API and the use cases.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from dpms.domains.prescriptions.domain.entities import Prescription
from dpms.domains.prescriptions.domain.value_objects import DiseaseType, TimingSlot


@dataclass
class MedicationLineInput:
    medicine_id: int
    timing: list[str]


@dataclass
class CreatePrescriptionRequest:
    patient_id: int
    doctor_id: int
    disease: str
    medications: list[MedicationLineInput]
    disease_type: DiseaseType = DiseaseType.GENERAL
    issued_at: datetime | None = None


@dataclass
class ApplyAmountsRequest:
    """Exactly one of ``line_amounts`` and ``total_amount`` must be set."""

    prescription_id: int
    line_amounts: dict[int, Decimal] | None = None
    total_amount: Decimal | None = None


@dataclass
class ApplyAmountsResult:
    prescription: Prescription
    updated_line_ids: list[int]
    all_priced: bool


@dataclass
class ReminderRunResult:
    """Counters of one bucket run."""

    timing: TimingSlot
    matched: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    stale: int = 0

    def to_dict(self) -> dict:
        return {
            "timing": self.timing.value,
            "matched": self.matched,
            "sent": self.sent,
            "skipped": self.skipped,
            "failed": self.failed,
            "stale": self.stale,
        }


@dataclass
class DispatchResult:
    prescription_id: int
    timing: TimingSlot
    recipient: str
    medication_count: int
    message_id: str | None = None


@dataclass
class ReminderEntry:
    prescription_id: int
    disease: str
    medicine_name: str
    dosage: str
    date: datetime


@dataclass
class PatientReminders:
    morning: list[ReminderEntry] = field(default_factory=list)
    afternoon: list[ReminderEntry] = field(default_factory=list)
    night: list[ReminderEntry] = field(default_factory=list)

    def bucket(self, slot: TimingSlot) -> list[ReminderEntry]:
        return getattr(self, slot.bucket)


@dataclass
class ChannelHealth:
    configured: bool
    host: str
    port: int
    username_hint: str | None = None
    connection_status: str = "not_tested"
    error: str | None = None
    error_kind: str | None = None
