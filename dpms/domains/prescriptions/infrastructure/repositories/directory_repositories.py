"""
Read-only repositories for users and the medicine catalog.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dpms.domains.prescriptions.application.ports import IMedicationCatalog, IUserDirectory
from dpms.domains.prescriptions.domain.entities import UserProfile
from dpms.domains.prescriptions.domain.value_objects import MedicineInfo, ViewerRole
from dpms.domains.prescriptions.infrastructure.persistence.sqlalchemy.models import MedicationModel, UserModel


class SQLAlchemyUserDirectory(IUserDirectory):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: int) -> UserProfile | None:
        model = await self.session.get(UserModel, user_id)
        if model is None:
            return None
        return UserProfile(
            id=model.id,
            name=model.name,
            role=ViewerRole.from_string(model.role),
            age=model.age,
            gender=model.gender,
            mobile=model.mobile,
            email=model.email,
            is_active=model.is_active,
        )


class SQLAlchemyMedicationCatalog(IMedicationCatalog):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_ids(self, medicine_ids: list[int]) -> dict[int, MedicineInfo]:
        if not medicine_ids:
            return {}
        result = await self.session.execute(
            select(MedicationModel).where(MedicationModel.id.in_(set(medicine_ids)))
        )
        return {
            m.id: MedicineInfo(id=m.id, name=m.medicine_name, dosage=m.dosage)
            for m in result.scalars().all()
        }
