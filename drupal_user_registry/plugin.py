"""pytest plugin that provisions the configured test users for a session."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator, Optional

import pytest

from .config import CONFIG_ENV_VAR, resolve_config_path
from .exceptions import DrupalUserRegistryError
from .registry import DrupalUserRegistry, UserOperation

logger = logging.getLogger("drupal_user_registry.plugin")

registry_key = pytest.StashKey[DrupalUserRegistry]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("user-registry", "Drupal test user registry")
    group.addoption(
        "--user-registry-config",
        dest="user_registry_config",
        default=None,
        help=f"YAML file describing the test users (defaults to ${CONFIG_ENV_VAR})",
    )
    parser.addini(
        "user_registry_config",
        help="YAML file describing the test users, relative to the rootdir",
        default=None,
    )


def _configured_path(config: pytest.Config) -> Optional[Path]:
    option = config.getoption("user_registry_config")
    if option:
        return resolve_config_path(option)
    ini_value = config.getini("user_registry_config")
    if ini_value:
        return resolve_config_path(str(config.rootpath / ini_value))
    return resolve_config_path(os.getenv(CONFIG_ENV_VAR))


def _is_xdist_worker(config: pytest.Config) -> bool:
    return hasattr(config, "workerinput")


def get_registry(config: pytest.Config) -> Optional[DrupalUserRegistry]:
    return config.stash.get(registry_key, None)


def pytest_configure(config: pytest.Config) -> None:
    config_path = _configured_path(config)
    if config_path is None:
        return
    try:
        registry = DrupalUserRegistry.from_file(config_path)
    except DrupalUserRegistryError as exc:
        raise pytest.UsageError(str(exc)) from exc
    config.stash[registry_key] = registry
    logger.debug("Loaded %d test users from %s", len(registry.users), config_path)


def pytest_sessionstart(session: pytest.Session) -> None:
    registry = get_registry(session.config)
    if registry is not None and not _is_xdist_worker(session.config):
        registry.manage_test_users(UserOperation.CREATE)


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    registry = get_registry(session.config)
    if registry is not None and not _is_xdist_worker(session.config):
        registry.manage_test_users(UserOperation.DELETE)


@pytest.fixture(scope="session")
def user_registry(pytestconfig: pytest.Config) -> DrupalUserRegistry:
    """The session's :class:`DrupalUserRegistry`."""
    registry = get_registry(pytestconfig)
    if registry is None:
        pytest.skip("No user registry configured; pass --user-registry-config")
    return registry


@pytest.fixture(autouse=True)
def _reset_logged_in_user(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    registry = get_registry(request.config)
    if registry is not None:
        registry.remove_logged_in_user()
    yield
