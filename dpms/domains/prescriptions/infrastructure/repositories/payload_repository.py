"""
Scannable Payload Repository Implementation
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dpms.core.domain import PayloadAlreadyIssuedException
from dpms.domains.prescriptions.application.ports import IScannablePayloadRepository
from dpms.domains.prescriptions.domain.entities import ScannablePayload
from dpms.domains.prescriptions.infrastructure.persistence.sqlalchemy.models import (
    PrescriptionModel,
    ScannablePayloadModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyScannablePayloadRepository(IScannablePayloadRepository):
    """SQLAlchemy implementation of the payload repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_prescription_id(self, prescription_id: int) -> ScannablePayload | None:
        result = await self.session.execute(
            select(ScannablePayloadModel).where(ScannablePayloadModel.prescription_id == prescription_id)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create_issued(self, payload: ScannablePayload) -> ScannablePayload:
        """
        Insert the payload and flip ``payload_issued`` in one commit.

        The unique constraint on ``prescription_id`` decides concurrent issues.
        """
        model = ScannablePayloadModel(
            prescription_id=payload.prescription_id,
            patient_id=payload.patient_id,
            doctor_id=payload.doctor_id,
            artifact=payload.artifact,
            is_active=payload.is_active,
        )
        self.session.add(model)
        try:
            await self.session.flush()
            await self.session.execute(
                update(PrescriptionModel)
                .where(PrescriptionModel.id == payload.prescription_id)
                .values(payload_issued=True)
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Payload for prescription {payload.prescription_id} already exists: {e.orig}")
            raise PayloadAlreadyIssuedException(payload.prescription_id) from e

        await self.session.refresh(model)
        return self._to_entity(model)

    async def find_active_by_patient(self, patient_id: int) -> list[ScannablePayload]:
        result = await self.session.execute(
            select(ScannablePayloadModel)
            .where(
                ScannablePayloadModel.patient_id == patient_id,
                ScannablePayloadModel.is_active.is_(True),
            )
            .order_by(ScannablePayloadModel.created_at.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_all_active(self) -> list[ScannablePayload]:
        result = await self.session.execute(
            select(ScannablePayloadModel)
            .where(ScannablePayloadModel.is_active.is_(True))
            .order_by(ScannablePayloadModel.created_at.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    def _to_entity(self, model: ScannablePayloadModel) -> ScannablePayload:
        return ScannablePayload(
            id=model.id,
            prescription_id=model.prescription_id,
            patient_id=model.patient_id,
            doctor_id=model.doctor_id,
            artifact=model.artifact,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
