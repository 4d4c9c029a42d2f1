"""The form for writing a new application profile."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .focuslist import FocusableList
from .messages import Command, KeyPress, batch, notify
from .profile import PROFILES_DIR, ProfileError, UfwProfile, create_profile

HELP = "↑↓ to navigate, type to edit, Enter to submit, Esc to cancel"

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ProfileField(str, Enum):
    NAME = "name"
    TITLE = "Title"
    PORTS = "Ports"


_ATTRIBUTES = {
    ProfileField.NAME: "name",
    ProfileField.TITLE: "title",
    ProfileField.PORTS: "ports",
}


@dataclass(frozen=True)
class ProfileCreated:
    """A profile file was written and loaded."""


@dataclass(frozen=True)
class ProfileFormEscaped:
    """The user left the form without submitting."""


def _parse_port(text: str) -> Optional[int]:
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    return value if 1 <= value <= 65535 else None


def validate_ports(text: str) -> None:
    """Check a ufw ports specification such as ``80,443/tcp|53/udp``.

    Raises ValueError describing the first problem found.
    """
    if not text.strip():
        raise ValueError("ports cannot be empty")

    for group in text.split("|"):
        parts = group.split("/")
        if len(parts) > 2:
            raise ValueError(f"too many '/' in group: {group}")
        has_protocol = len(parts) == 2
        if has_protocol and parts[1] not in ("tcp", "udp"):
            raise ValueError(f"invalid protocol: {parts[1]}")

        for port in parts[0].split(","):
            if ":" in port:
                if not has_protocol:
                    raise ValueError(f"port range must specify protocol: {port}")
                bounds = port.split(":")
                if len(bounds) != 2:
                    raise ValueError(f"invalid port range: {port}")
                start_text, end_text = (bound.strip() for bound in bounds)
                start = _parse_port(start_text)
                if start is None:
                    raise ValueError(f"invalid start port: {start_text}")
                end = _parse_port(end_text)
                if end is None:
                    raise ValueError(f"invalid end port: {end_text}")
                if start > end:
                    raise ValueError(
                        f"start port cannot be greater than end port in range: {port}"
                    )
            else:
                port = port.strip()
                if _parse_port(port) is None:
                    raise ValueError(f"invalid port: {port}")


class ProfileForm:
    """Name, title and ports of a profile to be created."""

    directory = PROFILES_DIR

    def __init__(self) -> None:
        self.name = ""
        self.title = ""
        self.ports = ""
        self.fields = FocusableList(list(ProfileField))

    def update(self, msg: Any) -> Optional[Command]:
        """Apply a key press and return the command to run next, if any."""
        if not isinstance(msg, KeyPress):
            return None
        key = msg.key
        attribute = _ATTRIBUTES[self.fields.focused()]

        if key == "up":
            self.fields.prev()
        elif key == "down":
            self.fields.next()
        elif key == "backspace":
            setattr(self, attribute, getattr(self, attribute)[:-1])
        elif key == "enter":
            try:
                profile = self.build_profile()
            except ValueError as exc:
                return notify(str(exc))
            try:
                message = create_profile(profile, self.directory)
            except ProfileError as exc:
                return notify(str(exc))
            return batch(notify(message), ProfileCreated)
        elif key == "esc":
            return ProfileFormEscaped
        else:
            setattr(self, attribute, getattr(self, attribute) + key)
        return None

    def view(self) -> str:
        focused = self.fields.focused()
        lines = [
            f"{'> ' if field == focused else '  '}{field.value}: {getattr(self, _ATTRIBUTES[field])}"
            for field in self.fields
        ]
        return "\n".join(lines) + "\n\n" + HELP

    def build_profile(self) -> UfwProfile:
        """Return the profile the form describes; raises ValueError when invalid."""
        name = self.name.strip()
        if not name:
            raise ValueError("name cannot be empty")
        try:
            validate_ports(self.ports)
        except ValueError as exc:
            raise ValueError(f"invalid ports: {exc}") from exc
        return UfwProfile(
            name=name,
            title=self.title.strip(),
            ports=tuple(self.ports.strip().split("|")),
        )