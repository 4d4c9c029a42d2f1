"""A Yes/No confirmation dialog."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from .focuslist import FocusableList
from .messages import KeyPress


class DialogOutcome(str, Enum):
    YES = "yes"
    NO = "no"
    ESC = "esc"


class ConfirmDialog:
    """Prompt with "Yes" and "No" options; "Yes" is focused first."""

    def __init__(self, prompt: str) -> None:
        self.prompt = prompt
        self.options = FocusableList(["Yes", "No"])

    def update(self, msg: Any) -> Optional[DialogOutcome]:
        """Handle a message; return the outcome once the user decides."""
        if not isinstance(msg, KeyPress):
            return None
        if msg.key == "up":
            self.options.prev()
        elif msg.key == "down":
            self.options.next()
        elif msg.key == "enter":
            return DialogOutcome.YES if self.options.focused() == "Yes" else DialogOutcome.NO
        elif msg.key == "esc":
            return DialogOutcome.ESC
        return None

    def view(self) -> str:
        lines = "".join(
            f"{'> ' if focused else '  '}{option}\n" for option, focused in self.options.entries()
        )
        return f"{self.prompt}\n\n{lines}"