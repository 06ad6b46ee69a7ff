"""
Prescription Repository Implementation

SQLAlchemy implementation of IPrescriptionRepository.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dpms.domains.prescriptions.application.ports import IPrescriptionRepository
from dpms.domains.prescriptions.domain.entities import MedicationLine, Prescription
from dpms.domains.prescriptions.domain.value_objects import DiseaseType, MedicineInfo, TimingSlot, ordered_slots
from dpms.domains.prescriptions.infrastructure.persistence.sqlalchemy.models import (
    PrescriptionMedicationModel,
    PrescriptionModel,
)

logger = logging.getLogger(__name__)


def _with_lines(statement):
    return statement.options(
        selectinload(PrescriptionModel.lines).selectinload(PrescriptionMedicationModel.medicine)
    )


class SQLAlchemyPrescriptionRepository(IPrescriptionRepository):
    """
    SQLAlchemy implementation of the prescription repository.

    Lines and their catalog entries are always loaded eagerly.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, prescription_id: int) -> Prescription | None:
        model = await self._load(prescription_id)
        return self._to_entity(model) if model else None

    async def save(self, prescription: Prescription) -> Prescription:
        """Insert or update, then reload with catalog data."""
        model = await self._load(prescription.id) if prescription.id else None
        if model is None:
            model = self._to_model(prescription)
            self.session.add(model)
        else:
            self._update_model(model, prescription)

        await self.session.commit()
        reloaded = await self._load(model.id)
        return self._to_entity(reloaded)

    async def find_reminder_candidates(self, slot: TimingSlot) -> list[Prescription]:
        result = await self.session.execute(
            _with_lines(
                select(PrescriptionModel)
                .where(
                    PrescriptionModel.is_active.is_(True),
                    PrescriptionModel.payload_issued.is_(True),
                    PrescriptionModel.lines.any(PrescriptionMedicationModel.timing.contains([slot.value])),
                )
                .order_by(PrescriptionModel.id)
            )
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_pending_pricing(self) -> list[Prescription]:
        result = await self.session.execute(
            _with_lines(
                select(PrescriptionModel)
                .where(
                    PrescriptionModel.is_active.is_(True),
                    PrescriptionModel.payload_issued.is_(True),
                    PrescriptionModel.lines.any(PrescriptionMedicationModel.amount.is_(None)),
                )
                .order_by(PrescriptionModel.issued_at.desc())
            )
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_issued_for_patient(self, patient_id: int) -> list[Prescription]:
        result = await self.session.execute(
            _with_lines(
                select(PrescriptionModel)
                .where(
                    PrescriptionModel.patient_id == patient_id,
                    PrescriptionModel.is_active.is_(True),
                    PrescriptionModel.payload_issued.is_(True),
                )
                .order_by(PrescriptionModel.issued_at.desc())
            )
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_active(
        self,
        patient_id: int | None = None,
        doctor_id: int | None = None,
    ) -> list[Prescription]:
        query = select(PrescriptionModel).where(PrescriptionModel.is_active.is_(True))
        if patient_id is not None:
            query = query.where(PrescriptionModel.patient_id == patient_id)
        if doctor_id is not None:
            query = query.where(PrescriptionModel.doctor_id == doctor_id)

        result = await self.session.execute(_with_lines(query.order_by(PrescriptionModel.issued_at.desc())))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def rollback(self) -> None:
        await self.session.rollback()

    async def _load(self, prescription_id: int) -> PrescriptionModel | None:
        result = await self.session.execute(
            _with_lines(select(PrescriptionModel).where(PrescriptionModel.id == prescription_id)).execution_options(
                populate_existing=True
            )
        )
        return result.scalar_one_or_none()

    # Mapping methods

    def _to_entity(self, model: PrescriptionModel) -> Prescription:
        lines = []
        for line in model.lines:
            medicine = None
            if line.medicine is not None:
                medicine = MedicineInfo(id=line.medicine.id, name=line.medicine.medicine_name, dosage=line.medicine.dosage)
            lines.append(
                MedicationLine(
                    id=line.id,
                    medicine_id=line.medicine_id,
                    timing=frozenset(TimingSlot(value) for value in line.timing),
                    amount=line.amount,
                    medicine=medicine,
                )
            )

        return Prescription(
            id=model.id,
            patient_id=model.patient_id,
            doctor_id=model.doctor_id,
            disease=model.disease,
            disease_type=DiseaseType(model.disease_type),
            medications=lines,
            issued_at=model.issued_at,
            payload_issued=model.payload_issued,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, prescription: Prescription) -> PrescriptionModel:
        return PrescriptionModel(
            patient_id=prescription.patient_id,
            doctor_id=prescription.doctor_id,
            disease=prescription.disease,
            disease_type=prescription.disease_type.value,
            issued_at=prescription.issued_at,
            payload_issued=prescription.payload_issued,
            is_active=prescription.is_active,
            lines=[
                PrescriptionMedicationModel(
                    position=position,
                    medicine_id=line.medicine_id,
                    timing=[slot.value for slot in ordered_slots(line.timing)],
                    amount=line.amount,
                )
                for position, line in enumerate(prescription.medications)
            ],
        )

    def _update_model(self, model: PrescriptionModel, prescription: Prescription) -> None:
        """Only the mutable state is written back: flags and line amounts."""
        model.is_active = prescription.is_active
        model.payload_issued = prescription.payload_issued
        amounts = {line.id: line.amount for line in prescription.medications if line.id is not None}
        for line in model.lines:
            if line.id in amounts:
                line.amount = amounts[line.id]
