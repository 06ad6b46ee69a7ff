"""
Dependency Injection Container.

Single Responsibility: wire concrete repositories, adapters and use cases.

Long-lived resources (the SMTP channel with its cached session, the QR
renderer, the reminder scheduler) are singletons. Repositories and use cases
are created per database session.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from dpms.config.settings import Settings, get_settings
from dpms.database.async_db import get_async_db_context
from dpms.domains.prescriptions.application.dto import ReminderRunResult
from dpms.domains.prescriptions.application.use_cases import (
    ApplyAmountsUseCase,
    ChannelHealthUseCase,
    CreatePrescriptionUseCase,
    DeactivatePrescriptionUseCase,
    GetPatientRemindersUseCase,
    GetPayloadUseCase,
    GetPrescriptionUseCase,
    IssuePayloadUseCase,
    ListAllPayloadsUseCase,
    ListPatientPayloadsUseCase,
    ListPendingPricingUseCase,
    ListPrescriptionsUseCase,
    ReminderDispatchUseCase,
)
from dpms.domains.prescriptions.domain.value_objects import TimingSlot
from dpms.domains.prescriptions.infrastructure.delivery import (
    ReminderMessageComposer,
    SmtpChannelConfig,
    SmtpDeliveryChannel,
)
from dpms.domains.prescriptions.infrastructure.rendering.qr_renderer import QrPayloadRenderer
from dpms.domains.prescriptions.infrastructure.repositories import (
    SQLAlchemyMedicationCatalog,
    SQLAlchemyPrescriptionRepository,
    SQLAlchemyScannablePayloadRepository,
    SQLAlchemyUserDirectory,
)
from dpms.domains.prescriptions.infrastructure.scheduler import MedicationReminderScheduler

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container.

    Singleton Pattern: one delivery channel per process so the SMTP session
    is shared by scheduled runs and API requests.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

        self._channel: SmtpDeliveryChannel | None = None
        self._composer: ReminderMessageComposer | None = None
        self._renderer: QrPayloadRenderer | None = None
        self._scheduler: MedicationReminderScheduler | None = None

        logger.info("DependencyContainer initialized")

    # ==================== SINGLETONS ====================

    def get_delivery_channel(self) -> SmtpDeliveryChannel:
        if self._channel is None:
            config = SmtpChannelConfig.from_settings(self.settings)
            logger.info(f"Creating SMTP delivery channel for {config.host}:{config.port}")
            self._channel = SmtpDeliveryChannel(config)
        return self._channel

    def get_reminder_composer(self) -> ReminderMessageComposer:
        if self._composer is None:
            self._composer = ReminderMessageComposer()
        return self._composer

    def get_payload_renderer(self) -> QrPayloadRenderer:
        if self._renderer is None:
            self._renderer = QrPayloadRenderer()
        return self._renderer

    def get_reminder_scheduler(self) -> MedicationReminderScheduler:
        if self._scheduler is None:
            self._scheduler = MedicationReminderScheduler(
                run_bucket=self.run_reminder_bucket,
                timezone_name=self.settings.REMINDER_TIMEZONE,
                enabled=self.settings.REMINDER_SCHEDULER_ENABLED,
            )
        return self._scheduler

    # ==================== REPOSITORIES ====================

    def create_prescription_repository(self, db: AsyncSession) -> SQLAlchemyPrescriptionRepository:
        return SQLAlchemyPrescriptionRepository(session=db)

    def create_payload_repository(self, db: AsyncSession) -> SQLAlchemyScannablePayloadRepository:
        return SQLAlchemyScannablePayloadRepository(session=db)

    def create_user_directory(self, db: AsyncSession) -> SQLAlchemyUserDirectory:
        return SQLAlchemyUserDirectory(session=db)

    def create_medication_catalog(self, db: AsyncSession) -> SQLAlchemyMedicationCatalog:
        return SQLAlchemyMedicationCatalog(session=db)

    # ==================== USE CASES ====================

    def create_create_prescription_use_case(self, db: AsyncSession) -> CreatePrescriptionUseCase:
        return CreatePrescriptionUseCase(
            prescription_repository=self.create_prescription_repository(db),
            user_directory=self.create_user_directory(db),
            medication_catalog=self.create_medication_catalog(db),
        )

    def create_deactivate_prescription_use_case(self, db: AsyncSession) -> DeactivatePrescriptionUseCase:
        return DeactivatePrescriptionUseCase(prescription_repository=self.create_prescription_repository(db))

    def create_get_prescription_use_case(self, db: AsyncSession) -> GetPrescriptionUseCase:
        return GetPrescriptionUseCase(prescription_repository=self.create_prescription_repository(db))

    def create_list_prescriptions_use_case(self, db: AsyncSession) -> ListPrescriptionsUseCase:
        return ListPrescriptionsUseCase(prescription_repository=self.create_prescription_repository(db))

    def create_list_pending_pricing_use_case(self, db: AsyncSession) -> ListPendingPricingUseCase:
        return ListPendingPricingUseCase(prescription_repository=self.create_prescription_repository(db))

    def create_apply_amounts_use_case(self, db: AsyncSession) -> ApplyAmountsUseCase:
        return ApplyAmountsUseCase(prescription_repository=self.create_prescription_repository(db))

    def create_issue_payload_use_case(self, db: AsyncSession) -> IssuePayloadUseCase:
        return IssuePayloadUseCase(
            prescription_repository=self.create_prescription_repository(db),
            payload_repository=self.create_payload_repository(db),
            user_directory=self.create_user_directory(db),
            renderer=self.get_payload_renderer(),
        )

    def create_get_payload_use_case(self, db: AsyncSession) -> GetPayloadUseCase:
        return GetPayloadUseCase(
            payload_repository=self.create_payload_repository(db),
            prescription_repository=self.create_prescription_repository(db),
        )

    def create_list_patient_payloads_use_case(self, db: AsyncSession) -> ListPatientPayloadsUseCase:
        return ListPatientPayloadsUseCase(
            payload_repository=self.create_payload_repository(db),
            prescription_repository=self.create_prescription_repository(db),
        )

    def create_list_all_payloads_use_case(self, db: AsyncSession) -> ListAllPayloadsUseCase:
        return ListAllPayloadsUseCase(payload_repository=self.create_payload_repository(db))

    def create_patient_reminders_use_case(self, db: AsyncSession) -> GetPatientRemindersUseCase:
        return GetPatientRemindersUseCase(prescription_repository=self.create_prescription_repository(db))

    def create_reminder_dispatch_use_case(self, db: AsyncSession) -> ReminderDispatchUseCase:
        return ReminderDispatchUseCase(
            prescription_repository=self.create_prescription_repository(db),
            user_directory=self.create_user_directory(db),
            channel=self.get_delivery_channel(),
            composer=self.get_reminder_composer(),
            max_age_days=self.settings.REMINDER_MAX_AGE_DAYS,
        )

    def create_channel_health_use_case(self) -> ChannelHealthUseCase:
        return ChannelHealthUseCase(
            channel=self.get_delivery_channel(),
            composer=self.get_reminder_composer(),
        )

    # ==================== BACKGROUND WORK ====================

    async def run_reminder_bucket(self, slot: TimingSlot) -> ReminderRunResult:
        """Process one bucket in its own database session."""
        async with get_async_db_context() as db:
            return await self.create_reminder_dispatch_use_case(db).process_bucket(slot)

    async def shutdown(self) -> None:
        """Stop the scheduler (waiting for in-flight runs), then close the channel."""
        if self._scheduler is not None:
            await self._scheduler.stop()
        if self._channel is not None:
            await self._channel.close()
        logger.info("DependencyContainer shut down")


_container: DependencyContainer | None = None


def get_container() -> DependencyContainer:
    """Get or create the process-wide container."""
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def reset_container() -> None:
    """Forget the current container (tests and reloads)."""
    global _container
    _container = None
