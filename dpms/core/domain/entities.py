"""
Identity-bearing base classes.

Prescriptions and scannable payloads are tracked by their integer primary
key; two instances with the same key are the same record, even when one of
them is a role-filtered copy.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar

TId = TypeVar("TId")


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Record with an identity and audit timestamps.

    ``id`` stays ``None`` until the repository has stored the entity.
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or type(self) is not type(other):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id)) if self.id is not None else id(self)

    def is_new(self) -> bool:
        return self.id is None

    def touch(self) -> None:
        """Record a state change."""
        self.updated_at = utc_now()


@dataclass
class SoftDeletableEntity(Entity[TId], Generic[TId]):
    """Entity that is deactivated rather than removed; inactive rows drop out of every active query."""

    is_active: bool = field(default=True)

    def soft_delete(self) -> None:
        self.is_active = False
        self.touch()

    def is_deleted(self) -> bool:
        return not self.is_active
