"""Provision and track Drupal test users for pytest suites."""

from __future__ import annotations

from .config import RegistryConfig, SSHConfig, load_suite_config
from .drush import DrushCommandRunner, escape_shell_arg
from .exceptions import (
    CommandExecutionError,
    ConfigurationError,
    DrupalUserRegistryError,
    InvalidOperationError,
    RegistryError,
)
from .manager import DrushTestUserManager
from .models import TestUser
from .registry import DrupalUserRegistry, UserOperation
from .storage import ModuleConfigStorage
from .transport import CommandResult

__all__ = [
    "CommandExecutionError",
    "CommandResult",
    "ConfigurationError",
    "DrupalUserRegistry",
    "DrupalUserRegistryError",
    "DrushCommandRunner",
    "DrushTestUserManager",
    "InvalidOperationError",
    "ModuleConfigStorage",
    "RegistryConfig",
    "RegistryError",
    "SSHConfig",
    "TestUser",
    "UserOperation",
    "escape_shell_arg",
    "load_suite_config",
]
