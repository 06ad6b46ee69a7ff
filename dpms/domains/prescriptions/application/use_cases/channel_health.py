"""
Channel Health Use Case

Configuration check and test e-mail for the delivery channel.
"""

import logging

from dpms.domains.prescriptions.application.dto import ChannelHealth
from dpms.domains.prescriptions.application.ports import (
    DeliveryResult,
    IDeliveryChannel,
    IReminderComposer,
)
from dpms.domains.prescriptions.domain.entities import MedicationLine, UserProfile
from dpms.domains.prescriptions.domain.value_objects import MedicineInfo, TimingSlot, ViewerRole

logger = logging.getLogger(__name__)

TEST_PATIENT_NAME = "Test Patient"
TEST_MEDICINE = MedicineInfo(id=0, name="Test Medicine", dosage="500mg")


def mask_username(username: str | None) -> str | None:
    """Keep the first three characters: ``john@example.com`` -> ``joh***``."""
    if not username:
        return None
    return f"{username[:3]}***"


class ChannelHealthUseCase:
    """Reports whether the channel is configured and reachable; sends test mail."""

    def __init__(self, channel: IDeliveryChannel, composer: IReminderComposer):
        self.channel = channel
        self.composer = composer

    async def check(self) -> ChannelHealth:
        health = ChannelHealth(
            configured=self.channel.is_configured,
            host=self.channel.host,
            port=self.channel.port,
            username_hint=mask_username(self.channel.username),
        )
        if not health.configured:
            health.connection_status = "not_configured"
            return health

        result = await self.channel.verify()
        if result.success:
            health.connection_status = "connected"
        else:
            health.connection_status = "failed"
            health.error = result.failure.message if result.failure else None
            health.error_kind = result.failure.kind.value if result.failure else None
        return health

    async def send_test(self, email: str) -> DeliveryResult:
        """
        Send a sample morning reminder to ``email``.

        Raises:
            ChannelException: Classified delivery failure
        """
        recipient = UserProfile(id=0, name=TEST_PATIENT_NAME, role=ViewerRole.PATIENT, email=email)
        line = MedicationLine(
            medicine_id=TEST_MEDICINE.id,
            timing=frozenset({TimingSlot.MORNING}),
            medicine=TEST_MEDICINE,
        )
        result = await self.channel.send(self.composer.compose(recipient, TimingSlot.MORNING, [line]))
        result.raise_for_failure()
        logger.info(f"Test email sent to {email}")
        return result
