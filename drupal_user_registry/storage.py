"""Storage of configured test users."""
from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .config import RegistryConfig
from .exceptions import ConfigurationError
from .models import TestUser

DEFAULT_USERNAME_PREFIX = "test"
USERNAME_PREFIX_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]{3,}$")


def _apply_prefix(name: str, prefix: Optional[str]) -> str:
    if prefix is None:
        return name
    head = f"{DEFAULT_USERNAME_PREFIX}."
    if name.startswith(head):
        return f"{prefix}.{name[len(head):]}"
    return name


def _user_from_dict(key: str, data: Mapping[str, Any], prefix: Optional[str]) -> TestUser:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"User '{key}' must be a mapping with name and pass settings.")
    missing = {"name", "pass"} - data.keys()
    if missing:
        raise ConfigurationError(f"User '{key}' is missing required fields: {', '.join(sorted(missing))}")

    roles = data.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    if not isinstance(roles, (list, tuple)):
        raise ConfigurationError(f"The roles for user '{key}' must be a list of role names.")

    root = data.get("root", False)
    if not isinstance(root, bool):
        raise ConfigurationError(f"The root flag for user '{key}' must be true or false.")

    email = data.get("email")
    try:
        return TestUser(
            name=_apply_prefix(str(data["name"]), prefix),
            password=str(data["pass"]),
            roles=tuple(str(role) for role in roles),
            email=str(email) if email else None,
            is_root=root,
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid definition for user '{key}': {exc}") from exc


class ModuleConfigStorage:
    """Read-only store of the users defined in the suite configuration."""

    def __init__(self, config: RegistryConfig) -> None:
        prefix = config.username_prefix
        if prefix is not None and not USERNAME_PREFIX_PATTERN.match(prefix):
            raise ConfigurationError(
                f"Invalid username-prefix '{prefix}': it must start with a letter and be at least "
                "4 characters of letters, digits, hyphens or underscores."
            )

        self._users: Dict[str, TestUser] = {}
        for key, data in config.users.items():
            user = _user_from_dict(str(key), data, prefix)
            if user.name in self._users:
                raise ConfigurationError(f"Duplicate test user name '{user.name}'.")
            self._users[user.name] = user

        roots = [user.name for user in self._users.values() if user.is_root]
        if len(roots) > 1:
            raise ConfigurationError(f"Only one root user may be configured, found: {', '.join(roots)}")

    def load(self) -> List[TestUser]:
        return list(self._users.values())

    def get(self, name: str) -> Optional[TestUser]:
        return self._users.get(name)

    def roles(self) -> List[str]:
        seen: Dict[str, None] = {}
        for user in self._users.values():
            for role in user.roles:
                seen.setdefault(role, None)
        return list(seen)

    def __iter__(self) -> Iterator[TestUser]:
        return iter(self._users.values())

    def __len__(self) -> int:
        return len(self._users)


__all__ = [
    "DEFAULT_USERNAME_PREFIX",
    "USERNAME_PREFIX_PATTERN",
    "ModuleConfigStorage",
]
