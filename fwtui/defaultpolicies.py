"""Reading and editing the default ufw policies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from . import ufw
from .focuslist import FocusableList
from .messages import Command, KeyPress, run_and_then

HELP = "↑↓ to navigate, ←→ to change selection, Enter to submit, Esc to cancel"


class PolicyDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    ROUTED = "routed"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PolicyAction(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    REJECT = "reject"


@dataclass(frozen=True)
class DefaultPolicies:
    """Policy words as ufw reports them, e.g. "deny" or "disabled"."""

    incoming: str = ""
    outgoing: str = ""
    routed: str = ""

    def for_direction(self, direction: PolicyDirection) -> str:
        return {
            PolicyDirection.INCOMING: self.incoming,
            PolicyDirection.OUTGOING: self.outgoing,
            PolicyDirection.ROUTED: self.routed,
        }[direction]


class DefaultsNotFoundError(ValueError):
    """The status output holds no line with the default policies."""


@dataclass(frozen=True)
class DefaultPoliciesUpdated:
    output: str


@dataclass(frozen=True)
class DefaultsEscaped:
    """The user left the defaults form without submitting."""


def parse_ufw_defaults(status: str) -> DefaultPolicies:
    """Extract the default policies from ``ufw status verbose`` output.

    Raises DefaultsNotFoundError when no ``Default:`` line is present.
    """
    for raw in status.split("\n"):
        line = raw.strip()
        if not line.startswith("Default:"):
            continue
        # e.g. "Default: deny (incoming), allow (outgoing), disabled (routed)"
        values: dict[PolicyDirection, str] = {}
        for part in line[len("Default:"):].split(","):
            part = part.strip()
            for direction in PolicyDirection:
                if direction.value in part:
                    values[direction] = part.split(" ")[0]
                    break
        return DefaultPolicies(
            incoming=values.get(PolicyDirection.INCOMING, ""),
            outgoing=values.get(PolicyDirection.OUTGOING, ""),
            routed=values.get(PolicyDirection.ROUTED, ""),
        )
    raise DefaultsNotFoundError("default policy line not found in ufw output")


class DefaultsForm:
    """One action choice per direction, starting from the current policies."""

    def __init__(self, policies: DefaultPolicies) -> None:
        self.fields = FocusableList(list(PolicyDirection))
        self.actions = {
            direction: FocusableList(list(PolicyAction)).focus(policies.for_direction(direction))
            for direction in PolicyDirection
        }

    def update(self, msg: Any) -> Optional[Command]:
        """Apply a key press and return the command to run next, if any."""
        if not isinstance(msg, KeyPress):
            return None
        key = msg.key
        if key == "up":
            self.fields.prev()
        elif key == "down":
            self.fields.next()
        elif key == "left":
            self.actions[self.fields.focused()].prev()
        elif key == "right":
            self.actions[self.fields.focused()].next()
        elif key == "enter":
            chosen = {direction: choice.focused().value for direction, choice in self.actions.items()}

            def apply() -> str:
                return "\n".join(
                    ufw.set_default_policy(direction.value, action)
                    for direction, action in chosen.items()
                )

            return run_and_then(apply, DefaultPoliciesUpdated)
        elif key == "esc":
            return DefaultsEscaped
        return None

    def view(self) -> str:
        focused = self.fields.focused()
        lines = ["Default Rules:"]
        lines.extend(
            f"{'> ' if direction == focused else '  '}{direction.label}: "
            f"{self.actions[direction].focused().value}"
            for direction in self.fields
        )
        return "\n".join(lines) + "\n\n" + HELP