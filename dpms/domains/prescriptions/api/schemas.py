"""
Prescription API Schemas

Pydantic schemas for API request/response validation.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from dpms.domains.prescriptions.application.dto import (
    ApplyAmountsResult,
    ChannelHealth,
    DispatchResult,
    PatientReminders,
    ReminderEntry,
    ReminderRunResult,
)
from dpms.domains.prescriptions.domain.entities import Prescription, ScannablePayload
from dpms.domains.prescriptions.domain.services import is_fully_priced
from dpms.domains.prescriptions.domain.value_objects import DiseaseType, TimingSlot, ordered_slots

# ==================== PRESCRIPTIONS ====================


class MedicationLineCreate(BaseModel):
    medicine_id: int
    timing: list[str] = Field(..., min_length=1, description="Slot codes: M, A, N")


class PrescriptionCreate(BaseModel):
    """Prescription creation request; the doctor is the caller."""

    patient_id: int
    disease: str = Field(..., min_length=1)
    disease_type: DiseaseType = DiseaseType.GENERAL
    medications: list[MedicationLineCreate] = Field(..., min_length=1)
    issued_at: datetime | None = None


class MedicineSchema(BaseModel):
    id: int
    name: str
    dosage: str


class MedicationLineResponse(BaseModel):
    id: int | None
    medicine_id: int
    medicine: MedicineSchema | None = None
    timing: list[str]
    amount: Decimal | None = None


class PrescriptionResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    disease: str
    disease_type: str
    issued_at: datetime
    payload_issued: bool
    is_active: bool
    all_priced: bool
    medications: list[MedicationLineResponse]

    @classmethod
    def from_entity(cls, prescription: Prescription) -> "PrescriptionResponse":
        return cls(
            id=prescription.id or 0,
            patient_id=prescription.patient_id,
            doctor_id=prescription.doctor_id,
            disease=prescription.disease,
            disease_type=prescription.disease_type.value,
            issued_at=prescription.issued_at,
            payload_issued=prescription.payload_issued,
            is_active=prescription.is_active,
            all_priced=is_fully_priced(prescription.medications),
            medications=[
                MedicationLineResponse(
                    id=line.id,
                    medicine_id=line.medicine_id,
                    medicine=(
                        MedicineSchema(id=line.medicine.id, name=line.medicine.name, dosage=line.medicine.dosage)
                        if line.medicine
                        else None
                    ),
                    timing=[slot.value for slot in ordered_slots(line.timing)],
                    amount=line.amount,
                )
                for line in prescription.medications
            ],
        )


class AmountsRequest(BaseModel):
    """Either ``line_amounts`` (line id -> amount) or ``total_amount``."""

    line_amounts: dict[int, Decimal] | None = None
    total_amount: Decimal | None = None


class AmountsResponse(BaseModel):
    prescription: PrescriptionResponse
    updated_line_ids: list[int]
    all_priced: bool

    @classmethod
    def from_result(cls, result: ApplyAmountsResult) -> "AmountsResponse":
        return cls(
            prescription=PrescriptionResponse.from_entity(result.prescription),
            updated_line_ids=result.updated_line_ids,
            all_priced=result.all_priced,
        )


# ==================== PAYLOADS ====================


class IssuePayloadRequest(BaseModel):
    prescription_id: int


class PayloadResponse(BaseModel):
    """Issued payload; ``artifact`` is null when redacted for the viewer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    prescription_id: int
    patient_id: int
    doctor_id: int
    artifact: str | None = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, payload: ScannablePayload) -> "PayloadResponse":
        return cls.model_validate(payload)


# ==================== REMINDERS ====================


class ReminderEntrySchema(BaseModel):
    prescription_id: int
    disease: str
    medicine_name: str
    dosage: str
    date: datetime

    @classmethod
    def from_entry(cls, entry: ReminderEntry) -> "ReminderEntrySchema":
        return cls(
            prescription_id=entry.prescription_id,
            disease=entry.disease,
            medicine_name=entry.medicine_name,
            dosage=entry.dosage,
            date=entry.date,
        )


class PatientRemindersResponse(BaseModel):
    morning: list[ReminderEntrySchema]
    afternoon: list[ReminderEntrySchema]
    night: list[ReminderEntrySchema]

    @classmethod
    def from_reminders(cls, reminders: PatientReminders) -> "PatientRemindersResponse":
        return cls(
            morning=[ReminderEntrySchema.from_entry(e) for e in reminders.morning],
            afternoon=[ReminderEntrySchema.from_entry(e) for e in reminders.afternoon],
            night=[ReminderEntrySchema.from_entry(e) for e in reminders.night],
        )


class SendReminderRequest(BaseModel):
    prescription_id: int
    timing: TimingSlot


class DispatchResponse(BaseModel):
    success: bool = True
    message: str
    prescription_id: int
    timing: str
    recipient: str
    medication_count: int
    message_id: str | None = None

    @classmethod
    def from_result(cls, result: DispatchResult) -> "DispatchResponse":
        return cls(
            message="Reminder email sent successfully",
            prescription_id=result.prescription_id,
            timing=result.timing.value,
            recipient=result.recipient,
            medication_count=result.medication_count,
            message_id=result.message_id,
        )


class ReminderRunResponse(BaseModel):
    timing: str
    matched: int
    sent: int
    skipped: int
    failed: int
    stale: int

    @classmethod
    def from_result(cls, result: ReminderRunResult) -> "ReminderRunResponse":
        return cls(**result.to_dict())


class JobInfo(BaseModel):
    id: str
    name: str
    next_run: str | None = None


class SampleEmailRequest(BaseModel):
    email: str = Field(..., min_length=3)


class SampleEmailResponse(BaseModel):
    success: bool
    message: str
    recipient: str | None = None
    message_id: str | None = None


class ChannelHealthResponse(BaseModel):
    configured: bool
    host: str
    port: int
    username_hint: str | None = None
    connection_status: str
    error: str | None = None
    error_kind: str | None = None

    @classmethod
    def from_health(cls, health: ChannelHealth) -> "ChannelHealthResponse":
        return cls(
            configured=health.configured,
            host=health.host,
            port=health.port,
            username_hint=health.username_hint,
            connection_status=health.connection_status,
            error=health.error,
            error_kind=health.error_kind,
        )
