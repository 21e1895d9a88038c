"""Execution of drush command lines on the local machine."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Generator, List, Optional

import shlex
import shutil
import subprocess

from .exceptions import CommandExecutionError


@dataclass
class CommandResult:
    """Result of an executed drush command."""

    command: str
    exit_status: int
    lines: List[str] = field(default_factory=list)
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    @property
    def first_line(self) -> Optional[str]:
        return self.lines[0] if self.lines else None


class LocalTransport:
    """Runs prepared command lines through the local shell."""

    @contextmanager
    def session(self) -> Generator[None, None, None]:
        # Every command is its own process.
        yield

    def execute(self, command: str, *, executable: str, timeout: float | None = None) -> CommandResult:
        if shutil.which(executable) is None:
            raise CommandExecutionError(f"Unable to locate the drush executable '{executable}'")

        try:
            completed = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandExecutionError(f"Command '{command}' timed out after {timeout} seconds") from exc
        except OSError as exc:
            raise CommandExecutionError(f"Failed to execute command '{command}': {exc}") from exc

        return CommandResult(
            command=command,
            exit_status=completed.returncode,
            lines=completed.stdout.splitlines(),
            stderr=completed.stderr,
        )


def executable_name(drush: str) -> str:
    """Return the program part of a configured drush command."""

    try:
        parts = shlex.split(drush)
    except ValueError:
        parts = drush.split()
    return parts[0] if parts else drush


__all__ = ["CommandResult", "LocalTransport", "executable_name"]
