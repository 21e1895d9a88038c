from __future__ import annotations

from pathlib import Path

import pytest

from drupal_user_registry.config import (
    DEFAULT_USERS_TABLE,
    RegistryConfig,
    SSHConfig,
    load_suite_config,
    resolve_config_path,
)
from drupal_user_registry.exceptions import ConfigurationError


def test_defaults_for_empty_configuration() -> None:
    config = RegistryConfig.from_dict({})

    assert config.create is False
    assert config.delete is False
    assert config.drush_alias is None
    assert config.require_alias is True
    assert config.drush == "drush"
    assert config.users_table == DEFAULT_USERS_TABLE
    assert config.ssh is None


def test_from_dict_reads_suite_keys(valid_config) -> None:
    valid_config.update({"create": True, "username-prefix": "custom", "drush": "vendor/bin/drush", "timeout": "30"})

    config = RegistryConfig.from_dict(valid_config)

    assert config.create is True
    assert config.drush_alias == "@d7.local"
    assert config.username_prefix == "custom"
    assert config.drush == "vendor/bin/drush"
    assert config.timeout == 30.0
    assert list(config.users) == ["administrator", "editor", "moderator"]


def test_non_boolean_flag_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        RegistryConfig.from_dict({"create": "yes"})


def test_users_must_be_a_mapping() -> None:
    with pytest.raises(ConfigurationError):
        RegistryConfig.from_dict({"users": ["test.editor"]})


def test_ssh_key_path_is_relative_to_config(tmp_path: Path) -> None:
    ssh = SSHConfig.from_dict(
        {"hostname": "web01", "username": "deploy", "private_key_path": "keys/id_ed25519", "port": "2222"},
        base_path=tmp_path,
    )

    assert ssh.private_key_path == (tmp_path / "keys" / "id_ed25519").resolve()
    assert ssh.port == 2222
    assert ssh.known_hosts_file is None


def test_ssh_requires_connection_fields() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        SSHConfig.from_dict({"hostname": "web01"})

    assert "private_key_path, username" in str(excinfo.value)


def test_load_suite_config(tmp_path: Path) -> None:
    config_path = tmp_path / "suite.yml"
    config_path.write_text(
        "drush-alias: '@d7.local'\n"
        "create: true\n"
        "users:\n"
        "  editor:\n"
        "    name: test.editor\n"
        "    pass: foo\n"
        "    roles: [editor]\n",
        encoding="utf-8",
    )

    config = load_suite_config(config_path)

    assert config.create is True
    assert config.drush_alias == "@d7.local"
    assert config.users["editor"]["roles"] == ["editor"]


def test_load_empty_file_gives_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "suite.yml"
    config_path.write_text("", encoding="utf-8")

    assert load_suite_config(config_path) == RegistryConfig()


@pytest.mark.parametrize("content", ["- a\n- b\n", "users: [\n"])
def test_load_rejects_invalid_documents(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "suite.yml"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_suite_config(config_path)


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_suite_config(tmp_path / "missing.yml")


def test_resolve_config_path(tmp_path: Path) -> None:
    assert resolve_config_path(None) is None
    assert resolve_config_path("") is None
    assert resolve_config_path(str(tmp_path / "suite.yml")) == (tmp_path / "suite.yml").resolve()
