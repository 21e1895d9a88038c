"""Domain models for the test user registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

DEFAULT_EMAIL_DOMAIN = "example.com"


@dataclass(frozen=True)
class TestUser:
    """Represents a user account on the Drupal site under test."""

    __test__ = False

    name: str
    password: str
    roles: Tuple[str, ...] = ()
    email: Optional[str] = None
    is_root: bool = False

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Test user name must not be empty")
        if isinstance(self.roles, str):
            object.__setattr__(self, "roles", (self.roles,))
        else:
            object.__setattr__(self, "roles", tuple(self.roles))

    def __str__(self) -> str:
        return self.name

    @property
    def role_set(self) -> FrozenSet[str]:
        return frozenset(self.roles)

    @property
    def effective_email(self) -> str:
        """Configured email, or ``<name>@example.com`` when none is set."""

        if self.email:
            return self.email
        return f"{self.name}@{DEFAULT_EMAIL_DOMAIN}"

    def matches(self, other: object, *, check_roles: bool = False) -> bool:
        """Compare by name and password, and optionally by role set."""

        name = getattr(other, "name", None)
        password = getattr(other, "password", None)
        if name != self.name or password != self.password:
            return False
        if check_roles:
            return frozenset(getattr(other, "roles", ())) == self.role_set
        return True


__all__ = ["DEFAULT_EMAIL_DOMAIN", "TestUser"]
