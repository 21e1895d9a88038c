"""Command-line interface for managing the configured test users."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import Sequence

from .config import CONFIG_ENV_VAR, RegistryConfig, load_suite_config, resolve_config_path
from .exceptions import ConfigurationError, DrupalUserRegistryError
from .registry import DrupalUserRegistry, UserOperation

logger = logging.getLogger("drupal_user_registry.cli")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision Drupal test users with drush")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help=f"Path to the suite configuration YAML (defaults to ${CONFIG_ENV_VAR})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show the drush commands being run")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("create", help="Create every configured test user")
    subparsers.add_parser("delete", help="Delete every configured test user")
    subparsers.add_parser("users", help="List the configured test users")
    subparsers.add_parser("roles", help="List the roles held by configured test users")

    return parser.parse_args(argv)


def _load_registry(config_path: str | None, operation: UserOperation | None) -> DrupalUserRegistry:
    path = resolve_config_path(config_path or os.getenv(CONFIG_ENV_VAR))
    if path is None:
        raise ConfigurationError(f"No configuration given. Pass --config or set {CONFIG_ENV_VAR}.")

    logger.debug("Loading configuration from %s", path)
    config = load_suite_config(path)
    if operation is UserOperation.CREATE:
        config = _with_flags(config, create=True)
    elif operation is UserOperation.DELETE:
        config = _with_flags(config, delete=True)
    return DrupalUserRegistry(config)


def _with_flags(config: RegistryConfig, **flags: bool) -> RegistryConfig:
    return replace(config, **flags)


def _list_users(registry: DrupalUserRegistry) -> None:
    users = registry.users
    if not users:
        print("No test users are configured.")
        return

    for user in users:
        roles = ", ".join(user.roles) or "-"
        marker = " (root)" if user.is_root else ""
        print(f"{user.name}{marker} <{user.effective_email}> [{roles}]")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    operation = UserOperation.parse(args.command) if args.command in ("create", "delete") else None
    try:
        registry = _load_registry(args.config_path, operation)
        if operation is not None:
            failed = registry.manage_test_users(operation)
            if failed:
                names = ", ".join(user.name for user in failed)
                print(f"Error: could not {operation.value} {names}", file=sys.stderr)
                return 1
        elif args.command == "users":
            _list_users(registry)
        elif args.command == "roles":
            for role in registry.get_roles():
                print(role)
    except DrupalUserRegistryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
