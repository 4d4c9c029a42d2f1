"""Messages passed through the interface loop and the commands that produce them.

A command is a zero-argument callable returning a message (or None).
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

Command = Callable[[], Any]


@dataclass(frozen=True)
class KeyPress:
    """A key pressed by the user, named like "enter", "up" or "a"."""

    key: str


@dataclass(frozen=True)
class QuitRequested:
    """Asks the loop to stop; the class itself serves as a command."""


@dataclass(frozen=True)
class NotificationReceived:
    text: str


@dataclass(frozen=True)
class CommandStarted:
    """A long-running system command has begun."""


@dataclass(frozen=True)
class CommandFinished:
    output: str


@dataclass(frozen=True)
class Batch:
    """Several commands to run independently."""

    commands: tuple[Command, ...]

    def __iter__(self):
        return iter(self.commands)


@dataclass(frozen=True)
class Tick:
    """A command that delivers ``message`` after ``seconds``."""

    seconds: float
    message: Any

    def __call__(self) -> Any:
        time.sleep(self.seconds)
        return self.message


def batch(*args: Optional[Command]) -> Optional[Command]:
    """Combine commands, dropping None; a lone command is returned as is."""
    commands = tuple(cmd for cmd in args if cmd is not None)
    if not commands:
        return None
    if len(commands) == 1:
        return commands[0]
    return Batch(commands)


def notify(text: str) -> Command:
    """A command that yields a notification with ``text``."""
    return lambda: NotificationReceived(text)


def run_and_then(command: Callable[[], str], result_msg: Callable[[str], Any]) -> Batch:
    """Signal the start of ``command``, run it and wrap its output with ``result_msg``."""
    return Batch((CommandStarted, lambda: result_msg(command())))


def command_finished(output: str) -> Command:
    """A command that reports the output of a finished system command."""
    return lambda: CommandFinished(output)