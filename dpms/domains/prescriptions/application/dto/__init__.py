from dpms.domains.prescriptions.application.dto.prescription_dtos import (
    ApplyAmountsRequest,
    ApplyAmountsResult,
    ChannelHealth,
    CreatePrescriptionRequest,
    DispatchResult,
    MedicationLineInput,
    PatientReminders,
    ReminderEntry,
    ReminderRunResult,
)

__all__ = [
    "ApplyAmountsRequest",
    "ApplyAmountsResult",
    "ChannelHealth",
    "CreatePrescriptionRequest",
    "DispatchResult",
    "MedicationLineInput",
    "PatientReminders",
    "ReminderEntry",
    "ReminderRunResult",
]
