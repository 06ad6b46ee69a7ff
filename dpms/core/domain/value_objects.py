"""
Value object and enum bases.

Value objects are frozen dataclasses compared field by field. Enumerations
that travel over the wire (timing codes, roles, disease types) share a
``str`` base so they serialize as their code.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Self


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable domain value; subclasses validate in ``_validate``."""

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        pass


class StatusEnum(str, Enum):
    """String-valued enum with lookup helpers for wire values."""

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Case-insensitive lookup by value; raises ``ValueError`` when unknown."""
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")
