"""Assembly and execution of drush commands."""
from __future__ import annotations

import dataclasses
import logging
from typing import ContextManager, Optional, Protocol

from .config import RegistryConfig
from .exceptions import ConfigurationError
from .transport import CommandResult, LocalTransport, executable_name

logger = logging.getLogger("drupal_user_registry.drush")

# Lines drush relays from ssh when a site alias points at a new host.
NOISE_PREFIXES = ("Warning: Permanently added",)

MISSING_ALIAS_MESSAGE = "Please configure the drush-alias setting in your suite configuration."


class Transport(Protocol):
    def session(self) -> ContextManager[None]:
        ...

    def execute(self, command: str, *, executable: str, timeout: float | None = None) -> CommandResult:
        ...


def escape_shell_arg(value: str) -> str:
    """Quote ``value`` for a POSIX shell, always adding single quotes."""

    return "'" + str(value).replace("'", "'\\''") + "'"


def build_transport(config: RegistryConfig) -> Transport:
    if config.ssh is not None:
        from .ssh import SSHTransport

        return SSHTransport.from_config(config.ssh)
    return LocalTransport()


class DrushCommandRunner:
    """Runs drush commands against the configured site alias."""

    def __init__(
        self,
        drush: str = "drush",
        alias: Optional[str] = None,
        *,
        require_alias: bool = True,
        timeout: float | None = None,
        transport: Transport | None = None,
    ) -> None:
        if not alias and require_alias:
            raise ConfigurationError(MISSING_ALIAS_MESSAGE)
        self._drush = drush
        self._alias = alias or None
        self._timeout = timeout
        self._transport = transport or LocalTransport()

    @classmethod
    def from_config(cls, config: RegistryConfig, transport: Transport | None = None) -> "DrushCommandRunner":
        # Validate the alias before any SSH client is built.
        if not config.drush_alias and config.require_alias:
            raise ConfigurationError(MISSING_ALIAS_MESSAGE)
        return cls(
            config.drush,
            config.drush_alias,
            require_alias=config.require_alias,
            timeout=config.timeout,
            transport=transport or build_transport(config),
        )

    @property
    def alias(self) -> Optional[str]:
        return self._alias

    def prepare(self, tail: str) -> str:
        """Prefix ``tail`` with the executable, ``-y`` and the escaped alias.

        ``tail`` must already have its arguments escaped.
        """

        base = f"{self._drush} -y"
        if self._alias is not None:
            base += f" {escape_shell_arg(self._alias)}"
        return f"{base} {tail}"

    def session(self) -> ContextManager[None]:
        """Share one transport connection across the commands run in the block."""

        return self._transport.session()

    def run(self, tail: str) -> CommandResult:
        command = self.prepare(tail)
        logger.debug("Running %s", command)
        result = self._transport.execute(
            command,
            executable=executable_name(self._drush),
            timeout=self._timeout,
        )
        lines = [line for line in result.lines if not line.startswith(NOISE_PREFIXES)]
        if result.exit_status != 0:
            logger.debug("Command exited with status %s: %s", result.exit_status, result.stderr.strip())
        return dataclasses.replace(result, lines=lines)


__all__ = [
    "NOISE_PREFIXES",
    "MISSING_ALIAS_MESSAGE",
    "Transport",
    "escape_shell_arg",
    "build_transport",
    "DrushCommandRunner",
]
