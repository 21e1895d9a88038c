"""Shared fakes and fixtures data for the test suite."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Generator, List, Optional

from drupal_user_registry.transport import CommandResult


VALID_CONFIG = {
    "create": False,
    "delete": False,
    "users": {
        "administrator": {
            "name": "test.administrator",
            "email": "test.administrator@example.com",
            "pass": "foo",
            "roles": ["administrator", "editor"],
            "root": True,
        },
        "editor": {
            "name": "test.editor",
            "email": "test.editor@example.com",
            "pass": "foo",
            "roles": ["editor", "moderator"],
        },
        "moderator": {
            "name": "test.moderator",
            "email": "test.moderator@example.com",
            "pass": "foo",
            "roles": ["moderator"],
        },
    },
    "drush-alias": "@d7.local",
}


class DummyTransport:
    """Records executed commands and answers from a responder callback."""

    def __init__(self, responder: Optional[Callable[[str], CommandResult]] = None) -> None:
        self.commands: List[str] = []
        self.sessions = 0
        self._responder = responder

    @contextmanager
    def session(self) -> Generator[None, None, None]:
        self.sessions += 1
        yield

    def execute(self, command: str, *, executable: str, timeout: float | None = None) -> CommandResult:
        self.commands.append(command)
        if self._responder is not None:
            return self._responder(command)
        return CommandResult(command=command, exit_status=0, lines=[])

    @property
    def mutating_commands(self) -> List[str]:
        return [command for command in self.commands if " sqlq " not in command]


def existing_users_responder(existing: set[str]) -> Callable[[str], CommandResult]:
    """Answer existence queries with ``1`` for names in ``existing``."""

    def respond(command: str) -> CommandResult:
        if " sqlq " in command:
            found = any(f"name = '\\''{name}'\\''" in command for name in existing)
            return CommandResult(command=command, exit_status=0, lines=["1" if found else "0"])
        return CommandResult(command=command, exit_status=0, lines=[])

    return respond
