"""
Reminder Dispatch Use Case

Scheduled bucket runs and immediate sends of medication reminders.
"""

from datetime import UTC, datetime
from typing import Callable

from dpms.core.domain import EntityNotFoundException, NoContactAddressException, NoMatchingLinesException
from dpms.core.shared.logger import get_service_logger
from dpms.domains.prescriptions.application.dto import DispatchResult, ReminderRunResult
from dpms.domains.prescriptions.application.ports import (
    IDeliveryChannel,
    IPrescriptionRepository,
    IReminderComposer,
    IUserDirectory,
)
from dpms.domains.prescriptions.domain.entities import UserProfile
from dpms.domains.prescriptions.domain.value_objects import TimingSlot

logger = get_service_logger("reminder_dispatch")

DEFAULT_MAX_AGE_DAYS = 90


class ReminderDispatchUseCase:
    """
    Sends medication reminders through the delivery channel.

    There is no record of what was already sent: a bucket that runs twice
    sends twice.

    Example:
        ```python
        use_case = ReminderDispatchUseCase(prescriptions, users, channel, composer)
        result = await use_case.process_bucket(TimingSlot.MORNING)
        print(f"{result.sent} sent, {result.failed} failed")
        ```
    """

    def __init__(
        self,
        prescription_repository: IPrescriptionRepository,
        user_directory: IUserDirectory,
        channel: IDeliveryChannel,
        composer: IReminderComposer,
        max_age_days: int = DEFAULT_MAX_AGE_DAYS,
        clock: Callable[[], datetime] | None = None,
    ):
        self.prescription_repo = prescription_repository
        self.users = user_directory
        self.channel = channel
        self.composer = composer
        self.max_age_days = max_age_days
        self._clock = clock or (lambda: datetime.now(UTC))

    async def process_bucket(self, timing: TimingSlot) -> ReminderRunResult:
        """
        Run one timing bucket.

        Every candidate is handled on its own: a failed lookup or send is
        counted and logged, and the run goes on.
        """
        now = self._clock()
        result = ReminderRunResult(timing=timing)
        log = logger.bind(timing=timing.value)

        candidates = await self.prescription_repo.find_reminder_candidates(timing)
        result.matched = len(candidates)
        log.info(f"Processing {timing.label} reminders", candidates=len(candidates))

        patients: dict[int, UserProfile | None] = {}
        for prescription in candidates:
            item_log = log.bind(prescription_id=prescription.id, patient_id=prescription.patient_id)
            try:
                if prescription.is_stale(now, self.max_age_days):
                    result.stale += 1
                    result.skipped += 1
                    item_log.debug("Skipping prescription past the reminder window")
                    continue

                if prescription.patient_id not in patients:
                    patients[prescription.patient_id] = await self.users.find_by_id(prescription.patient_id)
                patient = patients[prescription.patient_id]
                if patient is None or not patient.has_email:
                    result.skipped += 1
                    item_log.warning("Skipping prescription, patient has no e-mail address")
                    continue

                lines = prescription.lines_for(timing)
                if not lines:
                    result.skipped += 1
                    continue

                delivery = await self.channel.send(self.composer.compose(patient, timing, lines))
                if delivery.success:
                    result.sent += 1
                    item_log.info("Reminder sent", recipient=delivery.recipient, medications=len(lines))
                else:
                    result.failed += 1
                    failure = delivery.failure
                    item_log.error(
                        "Reminder delivery failed",
                        recipient=delivery.recipient,
                        kind=failure.kind.value if failure else None,
                        error=failure.message if failure else None,
                    )
            except Exception as e:
                result.failed += 1
                item_log.exception(f"Error processing reminder: {e}")
                # A failed query leaves the shared session in an aborted transaction
                await self.prescription_repo.rollback()

        log.info("Reminder run completed", **result.to_dict())
        return result

    async def send_now(self, prescription_id: int, timing: TimingSlot) -> DispatchResult:
        """
        Send one reminder immediately.

        Raises:
            EntityNotFoundException: Unknown prescription
            NoContactAddressException: Patient missing or without e-mail
            NoMatchingLinesException: Nothing is taken at ``timing``
            ChannelException: Classified delivery failure
        """
        prescription = await self.prescription_repo.find_by_id(prescription_id)
        if prescription is None:
            raise EntityNotFoundException("Prescription", prescription_id)

        patient = await self.users.find_by_id(prescription.patient_id)
        if patient is None or not patient.has_email:
            raise NoContactAddressException(prescription_id, prescription.patient_id)

        lines = prescription.lines_for(timing)
        if not lines:
            raise NoMatchingLinesException(prescription_id, timing.value)

        delivery = await self.channel.send(self.composer.compose(patient, timing, lines))
        delivery.raise_for_failure()

        logger.info(
            "Manual reminder sent",
            prescription_id=prescription_id,
            timing=timing.value,
            recipient=delivery.recipient,
        )
        return DispatchResult(
            prescription_id=prescription_id,
            timing=timing,
            recipient=delivery.recipient or patient.email or "",
            medication_count=len(lines),
            message_id=delivery.message_id,
        )
