"""Suite configuration for the test user registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

CONFIG_ENV_VAR = "DRUPAL_USER_REGISTRY_CONFIG"
DEFAULT_DRUSH = "drush"
DEFAULT_USERS_TABLE = "users_field_data"


def _resolve_path(raw: object, base_path: Path | None) -> Path:
    candidate = Path(str(raw)).expanduser()
    if candidate.is_absolute() or base_path is None:
        return candidate.resolve(strict=False)
    return (base_path / candidate).resolve(strict=False)


def _as_bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"The {key} setting must be true or false, got {value!r}.")


@dataclass(frozen=True)
class SSHConfig:
    """Connection settings used when drush runs on a remote host."""

    hostname: str
    username: str
    private_key_path: Path
    port: int = 22
    passphrase: Optional[str] = None
    allow_unknown_hosts: bool = False
    known_hosts_file: Optional[Path] = None

    @staticmethod
    def from_dict(data: Mapping[str, Any], base_path: Path | None = None) -> "SSHConfig":
        """Create an :class:`SSHConfig` from raw dictionary data."""
        if not isinstance(data, Mapping):
            raise ConfigurationError("The ssh setting must be a mapping.")
        required_fields = {"hostname", "username", "private_key_path"}
        missing = required_fields - data.keys()
        if missing:
            raise ConfigurationError(f"Missing required ssh configuration fields: {', '.join(sorted(missing))}")

        known_hosts = data.get("known_hosts_file")
        try:
            port = int(data.get("port", 22))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid ssh port: {data.get('port')!r}") from exc

        return SSHConfig(
            hostname=str(data["hostname"]),
            username=str(data["username"]),
            private_key_path=_resolve_path(data["private_key_path"], base_path),
            port=port,
            passphrase=str(data["passphrase"]) if data.get("passphrase") is not None else None,
            allow_unknown_hosts=_as_bool(data, "allow_unknown_hosts", False),
            known_hosts_file=_resolve_path(known_hosts, base_path) if known_hosts else None,
        )


@dataclass(frozen=True)
class RegistryConfig:
    """Parsed module configuration.

    ``users`` keeps the raw per-user records; turning them into
    :class:`~drupal_user_registry.models.TestUser` objects is the job of
    :class:`~drupal_user_registry.storage.ModuleConfigStorage`.
    """

    users: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    create: bool = False
    delete: bool = False
    drush_alias: Optional[str] = None
    require_alias: bool = True
    drush: str = DEFAULT_DRUSH
    username_prefix: Optional[str] = None
    users_table: str = DEFAULT_USERS_TABLE
    timeout: Optional[float] = None
    ssh: Optional[SSHConfig] = None

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None, base_path: Path | None = None) -> "RegistryConfig":
        """Create a :class:`RegistryConfig` from the suite's module settings."""
        data = data or {}
        if not isinstance(data, Mapping):
            raise ConfigurationError("The user registry configuration must be a mapping.")

        users = data.get("users") or {}
        if not isinstance(users, Mapping):
            raise ConfigurationError("The users setting must map keys to user definitions.")

        alias = data.get("drush-alias")
        prefix = data.get("username-prefix")
        timeout = data.get("timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid timeout setting: {timeout!r}") from exc

        ssh_raw = data.get("ssh")

        return RegistryConfig(
            users=dict(users),
            create=_as_bool(data, "create", False),
            delete=_as_bool(data, "delete", False),
            drush_alias=str(alias) if alias else None,
            require_alias=_as_bool(data, "require-alias", True),
            drush=str(data.get("drush") or DEFAULT_DRUSH),
            username_prefix=str(prefix) if prefix is not None else None,
            users_table=str(data.get("users-table") or DEFAULT_USERS_TABLE),
            timeout=timeout,
            ssh=SSHConfig.from_dict(ssh_raw, base_path=base_path) if ssh_raw else None,
        )


def load_suite_config(config_path: Path) -> RegistryConfig:
    """Load the registry configuration from a YAML file."""
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    return RegistryConfig.from_dict(raw, base_path=config_path.parent)


def resolve_config_path(value: Optional[str]) -> Optional[Path]:
    """Resolve the path to the configuration file, if one was given."""
    if not value:
        return None
    return Path(value).expanduser().resolve(strict=False)


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_DRUSH",
    "DEFAULT_USERS_TABLE",
    "SSHConfig",
    "RegistryConfig",
    "load_suite_config",
    "resolve_config_path",
]
