"""Test-facing registry of configured Drupal test users."""
from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from .config import RegistryConfig, load_suite_config
from .exceptions import InvalidOperationError
from .manager import DrushTestUserManager
from .models import TestUser
from .storage import ModuleConfigStorage

logger = logging.getLogger("drupal_user_registry.registry")


class UserOperation(str, enum.Enum):
    """Lifecycle operations understood by :meth:`DrupalUserRegistry.manage_test_users`."""

    CREATE = "create"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: Union[str, "UserOperation"]) -> "UserOperation":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidOperationError(str(value)) from exc


class DrupalUserRegistry:
    """Looks up configured test users and tracks the logged in one.

    The registry is built once per test session. The logged in user is a
    per-test pointer; the pytest plugin clears it before every test.
    """

    def __init__(
        self,
        config: RegistryConfig,
        *,
        storage: Optional[ModuleConfigStorage] = None,
        manager: Optional[DrushTestUserManager] = None,
    ) -> None:
        self._config = config
        self._storage = storage or ModuleConfigStorage(config)
        self._manager = manager or DrushTestUserManager(config, self._storage)
        self._logged_in_user: Any = None

    @classmethod
    def from_file(cls, config_path: Path) -> "DrupalUserRegistry":
        return cls(load_suite_config(config_path))

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def manager(self) -> DrushTestUserManager:
        return self._manager

    @property
    def users(self) -> List[TestUser]:
        return self._storage.load()

    def get_root_user(self) -> Optional[TestUser]:
        for user in self._storage:
            if user.is_root:
                return user
        return None

    def get_user(self, name: str) -> Optional[TestUser]:
        return self._storage.get(name)

    def get_user_by_role(self, roles: Union[str, Sequence[str]]) -> Optional[TestUser]:
        """Return the user whose roles are exactly ``roles``.

        Users holding a subset or superset of the requested roles do not match.
        """

        wanted = frozenset([roles] if isinstance(roles, str) else roles)
        for user in self._storage:
            if user.role_set == wanted:
                return user
        return None

    def get_roles(self) -> List[str]:
        return self._storage.roles()

    def get_logged_in_user(self) -> Any:
        return self._logged_in_user

    def set_logged_in_user(self, user: Any) -> None:
        self._logged_in_user = user

    def remove_logged_in_user(self) -> None:
        self._logged_in_user = None

    def manage_test_users(self, op: Union[str, UserOperation]) -> List[TestUser]:
        """Create or delete all configured users if the matching flag is enabled.

        Returns the users that could not be handled.
        """

        operation = UserOperation.parse(op)
        if operation is UserOperation.CREATE:
            if not self._config.create:
                logger.debug("User creation is disabled; skipping.")
                return []
            return self._manager.create_users(self.users)
        if operation is UserOperation.DELETE:
            if not self._config.delete:
                logger.debug("User deletion is disabled; skipping.")
                return []
            return self._manager.delete_users(self.users)
        raise InvalidOperationError(str(op))


__all__ = ["UserOperation", "DrupalUserRegistry"]
