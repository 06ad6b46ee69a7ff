"""
User Profile

Read-only view of a user owned by the identity service.
"""

from dataclasses import dataclass

from ..value_objects import ViewerRole


@dataclass(frozen=True)
class UserProfile:
    id: int
    name: str
    role: ViewerRole
    age: int | None = None
    gender: str | None = None
    mobile: str | None = None
    email: str | None = None
    is_active: bool = True

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())
