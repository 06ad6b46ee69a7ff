"""
Prescription Domain Ports

Interfaces the use cases depend on.
"""

from dpms.domains.prescriptions.application.ports.delivery_channel import (
    DeliveryFailure,
    DeliveryFailureKind,
    DeliveryResult,
    IDeliveryChannel,
    IReminderComposer,
    OutboundMessage,
)
from dpms.domains.prescriptions.application.ports.directory_ports import IMedicationCatalog, IUserDirectory
from dpms.domains.prescriptions.application.ports.payload_renderer import IPayloadRenderer
from dpms.domains.prescriptions.application.ports.payload_repository import IScannablePayloadRepository
from dpms.domains.prescriptions.application.ports.prescription_repository import IPrescriptionRepository

__all__ = [
    "IPrescriptionRepository",
    "IScannablePayloadRepository",
    "IUserDirectory",
    "IMedicationCatalog",
    "IPayloadRenderer",
    "IDeliveryChannel",
    "IReminderComposer",
    "OutboundMessage",
    "DeliveryResult",
    "DeliveryFailure",
    "DeliveryFailureKind",
]
