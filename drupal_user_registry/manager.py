"""Create and delete test users through drush."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .config import RegistryConfig
from .drush import DrushCommandRunner, escape_shell_arg
from .exceptions import CommandExecutionError, DrupalUserRegistryError, RegistryError
from .models import TestUser
from .storage import ModuleConfigStorage
from .transport import CommandResult

logger = logging.getLogger("drupal_user_registry.manager")

AUTHENTICATED_ROLE = "Authenticated"


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class DrushTestUserManager:
    """Creates and deletes test users on the configured site via drush."""

    def __init__(
        self,
        config: RegistryConfig,
        storage: Optional[ModuleConfigStorage] = None,
        *,
        runner: Optional[DrushCommandRunner] = None,
    ) -> None:
        self._config = config
        self._storage = storage
        self._runner = runner or DrushCommandRunner.from_config(config)

    @property
    def storage(self) -> Optional[ModuleConfigStorage]:
        return self._storage

    @storage.setter
    def storage(self, storage: ModuleConfigStorage) -> None:
        self._storage = storage

    @property
    def runner(self) -> DrushCommandRunner:
        return self._runner

    def create_user(self, user: TestUser) -> None:
        email = user.effective_email
        logger.debug("Trying to create test user '%s' with email '%s'.", user.name, email)

        if self.user_exists(user.name):
            if not user.is_root:
                logger.info("User '%s' already exists, skipping.", user.name)
            return

        if user.is_root:
            logger.warning(
                "The user '%s' specified as 'root' does not exist. "
                "The root user should be the user with UID=1.",
                user.name,
            )
            return

        logger.info("Creating test user '%s'.", user.name)
        result = self._runner.run(
            "user-create {} --mail={} --password={}".format(
                escape_shell_arg(user.name),
                escape_shell_arg(email),
                escape_shell_arg(user.password),
            )
        )
        self._warn_on_failure(result, f"Creating test user '{user.name}'")

        for role in user.roles:
            if role.casefold() == AUTHENTICATED_ROLE.casefold():
                continue
            result = self._runner.run(
                f"user-add-role {escape_shell_arg(role)} --name={escape_shell_arg(user.name)}"
            )
            self._warn_on_failure(result, f"Adding role '{role}' to test user '{user.name}'")

    def create_users(self, users: Iterable[TestUser]) -> List[TestUser]:
        """Create each user in turn; returns the users that could not be handled."""

        failed: List[TestUser] = []
        with self._runner.session():
            for user in users:
                try:
                    self.create_user(user)
                except DrupalUserRegistryError:
                    logger.exception("Failed to create test user '%s'", user.name)
                    failed.append(user)
        return failed

    def delete_user(self, user: TestUser) -> None:
        if user.is_root:
            return

        logger.info("Deleting test user '%s'.", user.name)
        result = self._runner.run(f"user-cancel {escape_shell_arg(user.name)} --delete-content")
        self._warn_on_failure(result, f"Deleting test user '{user.name}'")

    def delete_users(self, users: Iterable[TestUser]) -> List[TestUser]:
        """Delete each user in turn; returns the users that could not be handled."""

        failed: List[TestUser] = []
        with self._runner.session():
            for user in users:
                try:
                    self.delete_user(user)
                except DrupalUserRegistryError:
                    logger.exception("Failed to delete test user '%s'", user.name)
                    failed.append(user)
        return failed

    def user_exists(self, name: str) -> bool:
        """Return ``True`` unless the site reports zero accounts named ``name``.

        Any first output line other than ``0`` counts as an existing user,
        including no output at all.
        """

        query = f"select count(uid) from {self._config.users_table} where name = {_sql_literal(name)}"
        try:
            result = self._runner.run(f"sqlq {escape_shell_arg(query)}")
        except CommandExecutionError as exc:
            raise RegistryError(f"Unable to check whether user '{name}' exists: {exc}") from exc

        if not result.ok:
            raise RegistryError(
                f"Checking whether user '{name}' exists failed with exit status {result.exit_status}."
            )
        return result.first_line != "0"

    @staticmethod
    def _warn_on_failure(result: CommandResult, action: str) -> None:
        if not result.ok:
            logger.warning(
                "%s failed with exit status %s: %s",
                action,
                result.exit_status,
                result.stderr.strip() or "no error output",
            )


__all__ = ["AUTHENTICATED_ROLE", "DrushTestUserManager"]
