"""SSH transport for running drush on a remote host."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

import socket

import paramiko

from .config import SSHConfig
from .exceptions import CommandExecutionError
from .transport import CommandResult


class SSHError(CommandExecutionError):
    """Raised when an SSH operation fails."""


class HostKeyVerificationError(SSHError):
    """Raised when host key verification fails for a remote host."""

    def __init__(self, hostname: str, *, port: int | None = None, suggestion: str | None = None) -> None:
        base = f"Host key verification failed for {hostname}"
        if port is not None:
            base += f":{port}"
        base += "."
        if suggestion:
            base = f"{base} {suggestion}".strip()
        super().__init__(base)
        self.hostname = hostname
        self.port = port
        self.suggestion = suggestion


def _load_private_key(path: Path, passphrase: Optional[str]) -> paramiko.PKey:
    key_classes = (
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
        paramiko.RSAKey,
    )
    for key_cls in key_classes:
        try:
            return key_cls.from_private_key_file(str(path), password=passphrase)
        except FileNotFoundError as exc:
            raise SSHError(f"Private key file not found: {path}") from exc
        except paramiko.PasswordRequiredException as exc:
            raise SSHError("The private key is encrypted and requires a passphrase") from exc
        except paramiko.SSHException:
            continue
    raise SSHError("Unable to load private key - unsupported format or invalid passphrase")


class SSHClientFactory:
    """Factory that builds SSH clients from the ``ssh`` suite setting."""

    def __init__(self, target: SSHConfig) -> None:
        self._target = target

    @contextmanager
    def connect(self) -> Generator[paramiko.SSHClient, None, None]:
        client = paramiko.SSHClient()
        if self._target.known_hosts_file:
            client.load_host_keys(str(self._target.known_hosts_file))
        else:
            client.load_system_host_keys()

        if self._target.allow_unknown_hosts:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.RejectPolicy())

        pkey = _load_private_key(self._target.private_key_path, self._target.passphrase)
        try:
            client.connect(
                hostname=self._target.hostname,
                port=self._target.port,
                username=self._target.username,
                pkey=pkey,
                timeout=20,
                look_for_keys=False,
                allow_agent=False,
            )
            yield client
        except paramiko.AuthenticationException as exc:
            raise SSHError("Authentication with the remote host failed") from exc
        except paramiko.BadHostKeyException as exc:
            suggestion = (
                "The host key differs from the entry stored in the known hosts file. "
                "Update the stored key or set allow_unknown_hosts in the ssh setting."
            )
            raise HostKeyVerificationError(
                exc.hostname,
                port=self._target.port,
                suggestion=suggestion,
            ) from exc
        except paramiko.SSHException as exc:
            message = str(exc)
            if "not found in known_hosts" in message:
                raise HostKeyVerificationError(
                    self._target.hostname,
                    port=self._target.port,
                    suggestion=(
                        "Add the host to the configured known hosts file or set "
                        "allow_unknown_hosts in the ssh setting."
                    ),
                ) from exc
            raise SSHError(f"SSH connection failed: {message}") from exc
        except OSError as exc:
            raise SSHError(f"Unable to reach {self._target.hostname}:{self._target.port}: {exc}") from exc
        finally:
            client.close()


class SSHTransport:
    """Runs prepared drush command lines on a remote host over SSH."""

    def __init__(self, factory: SSHClientFactory) -> None:
        self._factory = factory
        self._client: Optional[paramiko.SSHClient] = None

    @classmethod
    def from_config(cls, target: SSHConfig) -> "SSHTransport":
        return cls(SSHClientFactory(target))

    @contextmanager
    def session(self) -> Generator[None, None, None]:
        """Keep one connection open for every command run inside the block."""

        if self._client is not None:
            yield
            return
        with self._factory.connect() as client:
            self._client = client
            try:
                yield
            finally:
                self._client = None

    def execute(self, command: str, *, executable: str, timeout: float | None = None) -> CommandResult:
        if self._client is not None:
            return self._execute(self._client, command, timeout)
        with self._factory.connect() as client:
            return self._execute(client, command, timeout)

    @staticmethod
    def _execute(client: paramiko.SSHClient, command: str, timeout: float | None) -> CommandResult:
        try:
            _stdin, stdout, stderr = client.exec_command(command, timeout=timeout)
            stdout_text = stdout.read().decode("utf-8", errors="replace")
            stderr_text = stderr.read().decode("utf-8", errors="replace")
            exit_status = stdout.channel.recv_exit_status()
        except socket.timeout as exc:
            raise SSHError(f"Remote command '{command}' timed out after {timeout} seconds") from exc
        except paramiko.SSHException as exc:
            raise SSHError(f"Failed to execute remote command '{command}': {exc}") from exc

        return CommandResult(
            command=command,
            exit_status=exit_status,
            lines=stdout_text.splitlines(),
            stderr=stderr_text,
        )


__all__ = [
    "SSHError",
    "HostKeyVerificationError",
    "SSHClientFactory",
    "SSHTransport",
]
