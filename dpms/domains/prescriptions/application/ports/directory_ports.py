"""
Read-only ports onto data owned by other services.
"""

from typing import Protocol, runtime_checkable

from dpms.domains.prescriptions.domain.entities import UserProfile
from dpms.domains.prescriptions.domain.value_objects import MedicineInfo


@runtime_checkable
class IUserDirectory(Protocol):
    """Lookup of user profiles."""

    async def find_by_id(self, user_id: int) -> UserProfile | None:
        ...


@runtime_checkable
class IMedicationCatalog(Protocol):
    """Lookup of medicine catalog entries."""

    async def find_by_ids(self, medicine_ids: list[int]) -> dict[int, MedicineInfo]:
        """
        Resolve catalog entries.

        Returns:
            Mapping of id to entry; unknown ids are absent
        """
        ...
