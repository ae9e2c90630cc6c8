"""Domain entity representing a user."""

from dataclasses import dataclass

ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"
ROLE_ADMIN = "admin"


@dataclass
class User:
    """Core attributes describing a marketplace user."""

    id: int | None
    name: str
    email: str
    role: str
    is_active: bool = True

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role matches ``alias``."""

        return self.role.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)
