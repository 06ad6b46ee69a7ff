"""
Outbound delivery: SMTP channel and reminder message layout.
"""

from dpms.domains.prescriptions.infrastructure.delivery.reminder_message import ReminderMessageComposer
from dpms.domains.prescriptions.infrastructure.delivery.smtp_channel import (
    SmtpChannelConfig,
    SmtpDeliveryChannel,
    classify_smtp_error,
)

__all__ = [
    "ReminderMessageComposer",
    "SmtpChannelConfig",
    "SmtpDeliveryChannel",
    "classify_smtp_error",
]
