"""The form for composing a single ufw rule."""

from __future__ import annotations

import ipaddress
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from . import ufw
from .focuslist import FocusableList
from .messages import Command, KeyPress, batch, notify

SYS_NET = Path("/sys/class/net")

_IFF_UP = 0x1
_IFF_LOOPBACK = 0x8
_INTEGER = re.compile(r"[+-]?[0-9]+")


class Protocol(str, Enum):
    BOTH = "tcp/udp"
    TCP = "tcp"
    UDP = "udp"


class Action(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    REJECT = "reject"


class Direction(str, Enum):
    IN = "in"
    OUT = "out"


class Field(str, Enum):
    PORT = "Port"
    PROTOCOL = "Protocol"
    ACTION = "Action"
    DIRECTION = "Direction"
    SOURCE_IP = "SourceIP"
    DESTINATION_IP = "DestinationIP"
    INTERFACE = "Interface"
    COMMENT = "Comment"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Field.PORT: "Port",
    Field.PROTOCOL: "Protocol",
    Field.ACTION: "Action",
    Field.DIRECTION: "Direction",
    Field.COMMENT: "Comment (Optional)",
    Field.SOURCE_IP: "Source IP (Optional)",
    Field.DESTINATION_IP: "Destination IP (Optional)",
    Field.INTERFACE: "Interface (Optional)",
}

_TEXT_FIELDS = {
    Field.PORT: "port",
    Field.COMMENT: "comment",
    Field.SOURCE_IP: "source_ip",
    Field.DESTINATION_IP: "destination_ip",
}

HELP = "↑↓ to navigate, ←→ to change selection, type to edit, Enter to submit, Esc to cancel"


class RuleError(ValueError):
    """The form does not describe a valid rule."""


@dataclass(frozen=True)
class RuleCreated:
    """A rule was submitted to ufw."""


@dataclass(frozen=True)
class RuleFormEscaped:
    """The user left the form without submitting."""


def trim_last_char(text: str) -> str:
    return text[:-1]


def fields_for_direction(direction: Direction) -> list[Field]:
    """The form fields shown for a rule in ``direction``."""
    fields = [Field.PORT, Field.PROTOCOL, Field.ACTION, Field.DIRECTION, Field.COMMENT]
    if direction == Direction.IN:
        return fields + [Field.SOURCE_IP, Field.INTERFACE]
    if direction == Direction.OUT:
        return fields + [Field.DESTINATION_IP]
    return fields


def _read_int(path: Path, base: int) -> Optional[int]:
    try:
        return int(path.read_text().strip(), base)
    except (OSError, ValueError):
        return None


def active_interfaces(sys_net: str | os.PathLike[str] = SYS_NET) -> list[str]:
    """Names of interfaces that are up and not loopback, after an empty choice.

    Raises OSError when the interface directory cannot be listed.
    """
    found = []
    for entry in Path(sys_net).iterdir():
        flags = _read_int(entry / "flags", 16)
        if flags is None or not flags & _IFF_UP or flags & _IFF_LOOPBACK:
            continue
        index = _read_int(entry / "ifindex", 10)
        found.append((index if index is not None else 1 << 31, entry.name))
    return [""] + [name for _, name in sorted(found)]


def _parse_port(text: str) -> Optional[int]:
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    return value if 1 <= value <= 65535 else None


def _is_ip_or_cidr(text: str) -> bool:
    if "%" in text:
        return False
    try:
        ipaddress.ip_address(text)
        return True
    except ValueError:
        pass
    if "/" not in text:
        return False
    try:
        ipaddress.ip_network(text, strict=False)
        return True
    except ValueError:
        return False


class RuleForm:
    """Editable fields of a rule and the ufw command they produce."""

    def __init__(self, interfaces: Optional[Iterable[str]] = None) -> None:
        if interfaces is None:
            try:
                interfaces = active_interfaces()
            except OSError:
                interfaces = [""]
        self.port = ""
        self.comment = ""
        self.source_ip = ""
        self.destination_ip = ""
        self.protocol = FocusableList(list(Protocol))
        self.action = FocusableList(list(Action))
        self.direction = FocusableList(list(Direction))
        self.interface = FocusableList(interfaces)
        self.fields = FocusableList(fields_for_direction(Direction.IN))

    def _choice(self, field: Field) -> Optional[FocusableList[Any]]:
        return {
            Field.PROTOCOL: self.protocol,
            Field.ACTION: self.action,
            Field.DIRECTION: self.direction,
            Field.INTERFACE: self.interface,
        }.get(field)

    def update(self, msg: Any) -> Optional[Command]:
        """Apply a key press and return the command to run next, if any."""
        if not isinstance(msg, KeyPress):
            return None
        key = msg.key
        field = self.fields.focused()

        if key == "up":
            self.fields.prev()
        elif key == "down":
            self.fields.next()
        elif key in ("left", "right"):
            choice = self._choice(field)
            if choice is not None:
                choice.prev() if key == "left" else choice.next()
                if field == Field.DIRECTION:
                    self.fields.set_items(fields_for_direction(self.direction.focused()))
        elif key == "backspace":
            attribute = _TEXT_FIELDS.get(field)
            if attribute:
                setattr(self, attribute, trim_last_char(getattr(self, attribute)))
        elif key == "enter":
            try:
                command = self.build_command()
            except RuleError as exc:
                return notify(str(exc))
            output = ufw.run_command(command)
            return batch(notify(output), RuleCreated)
        elif key == "esc":
            return RuleFormEscaped
        else:
            attribute = _TEXT_FIELDS.get(field)
            if attribute:
                setattr(self, attribute, getattr(self, attribute) + key)
        return None

    def _value(self, field: Field) -> str:
        attribute = _TEXT_FIELDS.get(field)
        if attribute:
            return getattr(self, attribute)
        focused = self._choice(field).focused()
        return focused.value if isinstance(focused, Enum) else focused

    def view(self) -> str:
        focused = self.fields.focused()
        lines = [
            f"{'> ' if field == focused else '  '}{field.label}: {self._value(field)}"
            for field in self.fields
        ]
        return "\n".join(lines) + "\n\n" + HELP

    def _validate_port(self) -> None:
        protocol = self.protocol.focused()
        if ":" in self.port:
            if protocol == Protocol.BOTH:
                raise RuleError(
                    f"invalid protocol for port range: {self.port}. Must be either TCP or UDP only"
                )
            start_text, end_text = self.port.split(":")[:2]
            start = _parse_port(start_text)
            if start is None:
                raise RuleError(f"invalid port: {start_text}")
            end = _parse_port(end_text)
            if end is None:
                raise RuleError(f"invalid port: {end_text}")
            if start > end:
                raise RuleError(f"invalid port range: {self.port}")
        elif _parse_port(self.port) is None:
            raise RuleError(f"invalid port: {self.port}")

    def build_command(self) -> str:
        """Return the ufw command line for the form; raises RuleError when invalid."""
        self._validate_port()
        parts = ["sudo", "ufw", self.action.focused().value]

        direction = self.direction.focused()
        if direction == Direction.IN:
            interface = self.interface.focused()
            if interface:
                parts += ["in", "on", interface]
            if self.source_ip:
                if not _is_ip_or_cidr(self.source_ip):
                    raise RuleError(f"invalid source IP: {self.source_ip}")
                parts += ["from", self.source_ip]
            else:
                parts += ["from", "any"]
            parts += ["to", "any"]
        elif direction == Direction.OUT:
            parts += ["from", "any"]
            if self.destination_ip:
                if not _is_ip_or_cidr(self.destination_ip):
                    raise RuleError(f"invalid destination IP: {self.destination_ip}")
                parts += ["to", self.destination_ip]
            else:
                parts += ["to", "any"]
        else:
            raise RuleError("invalid direction")

        protocol = self.protocol.focused()
        parts += ["port", self.port]
        if protocol != Protocol.BOTH:
            parts += ["proto", protocol.value]

        if self.comment:
            sanitized = self.comment.replace("'", "'\\''")
            parts += ["comment", f"'{sanitized}'"]

        return " ".join(parts)