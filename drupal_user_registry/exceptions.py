"""Error types raised by the test user registry."""
from __future__ import annotations


class DrupalUserRegistryError(RuntimeError):
    """Base class for all registry errors."""


class ConfigurationError(DrupalUserRegistryError, ValueError):
    """Raised when the suite configuration is missing or invalid."""


class InvalidOperationError(DrupalUserRegistryError):
    """Raised when an unknown lifecycle operation is requested."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Invalid operation {operation} when managing users.")
        self.operation = operation


class RegistryError(DrupalUserRegistryError):
    """Raised when the remote user store cannot be queried."""


class CommandExecutionError(DrupalUserRegistryError):
    """Raised when a drush command cannot be started."""


__all__ = [
    "DrupalUserRegistryError",
    "ConfigurationError",
    "InvalidOperationError",
    "RegistryError",
    "CommandExecutionError",
]
