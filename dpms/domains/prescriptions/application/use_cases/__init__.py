"""
Prescription Use Cases
"""

from dpms.domains.prescriptions.application.use_cases.apply_amounts import ApplyAmountsUseCase
from dpms.domains.prescriptions.application.use_cases.channel_health import ChannelHealthUseCase
from dpms.domains.prescriptions.application.use_cases.dispatch_reminders import ReminderDispatchUseCase
from dpms.domains.prescriptions.application.use_cases.issue_payload import IssuePayloadUseCase
from dpms.domains.prescriptions.application.use_cases.patient_reminders import GetPatientRemindersUseCase
from dpms.domains.prescriptions.application.use_cases.payload_queries import (
    GetPayloadUseCase,
    ListAllPayloadsUseCase,
    ListPatientPayloadsUseCase,
)
from dpms.domains.prescriptions.application.use_cases.prescription_lifecycle import (
    CreatePrescriptionUseCase,
    DeactivatePrescriptionUseCase,
    GetPrescriptionUseCase,
    ListPendingPricingUseCase,
    ListPrescriptionsUseCase,
)

__all__ = [
    "ApplyAmountsUseCase",
    "ChannelHealthUseCase",
    "CreatePrescriptionUseCase",
    "DeactivatePrescriptionUseCase",
    "GetPatientRemindersUseCase",
    "GetPayloadUseCase",
    "GetPrescriptionUseCase",
    "IssuePayloadUseCase",
    "ListAllPayloadsUseCase",
    "ListPatientPayloadsUseCase",
    "ListPendingPricingUseCase",
    "ListPrescriptionsUseCase",
    "ReminderDispatchUseCase",
]
