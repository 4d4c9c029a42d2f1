"""The top-level firewall screen: menu, status, rule deletion and sub-screens."""

from __future__ import annotations

import argparse
import curses
import os
import queue
import subprocess
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from . import ufw
from .confirmation import ConfirmDialog, DialogOutcome
from .createrule import RuleCreated, RuleForm, RuleFormEscaped
from .defaultpolicies import (
    DefaultPoliciesUpdated,
    DefaultsEscaped,
    DefaultsForm,
    DefaultsNotFoundError,
    parse_ufw_defaults,
)
from .focuslist import FocusableList
from .messages import (
    Batch,
    Command,
    CommandFinished,
    CommandStarted,
    KeyPress,
    NotificationReceived,
    QuitRequested,
    Tick,
    command_finished,
    run_and_then,
)
from .multiselect import MultiSelectList
from .profiles import ProfilesEscaped, ProfilesModule

NOTIFICATION_SECONDS = 10
EXPORT_FILE = "ufw_import.sh"
EXPORT_DONE = (
    "Rules exported to ufw_import.sh.\n"
    "Careful!!! This file is executable and will reset your current UFW state when run.\n"
    "Please review it before executing."
)
DELETE_HELP = "↑↓ to navigate, d to delete, Space to select, Esc to cancel"
RUNNING = "Running command, please wait..."
QUIT_KEYS = ("ctrl+c", "ctrl+d", "ctrl+q")


class View(str, Enum):
    HOME = "viewStateHome"
    PROFILES = "profiles"
    CREATE_RULE = "create_rule"
    DELETE_RULE = "delete_rule"
    SET_DEFAULT = "set_default"


class MenuAction(str, Enum):
    RESET = "RESET_UFW"
    QUIT = "QUIT"
    DISABLE = "DISABLE"
    ENABLE = "ENABLE"
    CREATE_RULE = "CREATE_RULE"
    DELETE_RULE = "DELETE_RULE"
    EXPORT_RULES = "EXPORT_RULES"
    DISABLE_LOGGING = "DISABLE_LOGGING"
    ENABLE_LOGGING = "ENABLE_LOGGING"
    SET_DEFAULT = "SET_DEFAULT"
    PROFILES = "PROFILES"


@dataclass(frozen=True)
class MenuItem:
    title: str
    action: MenuAction


@dataclass(frozen=True)
class _NotificationExpired:
    """The display time of a notification has run out."""


@dataclass(frozen=True)
class _RulesDeleted:
    output: str


def firewall_status(status: str) -> tuple[bool, bool]:
    """Return whether ufw is active and whether logging is on, from verbose status."""
    enabled = False
    logging_on = False
    for line in status.split("\n"):
        if line.startswith("Status: active"):
            enabled = True
        if line.startswith("Logging:") and "on" in line:
            logging_on = True
    return enabled, logging_on


def build_menu(status: str) -> list[MenuItem]:
    """The home menu entries that fit the firewall state in ``status``."""
    enabled, logging_on = firewall_status(status)
    items: list[MenuItem] = []
    if enabled:
        items += [
            MenuItem("Disable", MenuAction.DISABLE),
            MenuItem("Set defaults", MenuAction.SET_DEFAULT),
            MenuItem("Profiles", MenuAction.PROFILES),
            MenuItem("Create rule", MenuAction.CREATE_RULE),
            MenuItem("Delete rule", MenuAction.DELETE_RULE),
            MenuItem("Export rules", MenuAction.EXPORT_RULES),
        ]
        if logging_on:
            items.append(MenuItem("Disable logging", MenuAction.DISABLE_LOGGING))
        else:
            items.append(MenuItem("Enable logging", MenuAction.ENABLE_LOGGING))
    else:
        items.append(MenuItem("Enable", MenuAction.ENABLE))
    items += [
        MenuItem("Reset UFW", MenuAction.RESET),
        MenuItem("Quit", MenuAction.QUIT),
    ]
    return items


def parse_rules(numbered: str) -> list[str]:
    """The rule lines of ``ufw status numbered`` output, without header and trailer."""
    lines = numbered.split("\n")
    if len(lines) < 6:
        return []
    return lines[4:-2]


def render_two_columns(left: list[str], right: list[str]) -> str:
    """Lay two line lists side by side, the left column 30 characters wide."""
    rows = max(len(left), len(right))
    padded_left = left + [""] * (rows - len(left))
    padded_right = right + [""] * (rows - len(right))
    return "".join(f"{lhs:<30} | {rhs}\n" for lhs, rhs in zip(padded_left, padded_right))


def _render_menu(menu: FocusableList[MenuItem]) -> list[str]:
    lines = ["", "UFW Firewall Menu:", ""]
    lines.extend(f"{'>' if focused else ' '} {item.title}" for item, focused in menu.entries())
    return lines


def _export_rules() -> Optional[NotificationReceived]:
    try:
        cwd = os.getcwd()
    except OSError:
        return None
    try:
        ufw.export_current_state(os.path.join(cwd, EXPORT_FILE))
    except OSError as exc:
        return NotificationReceived(f"Error exporting rules: {exc}")
    return NotificationReceived(EXPORT_DONE)


class App:
    """State of the whole interface; ``update`` handles messages, ``view`` renders."""

    def __init__(
        self,
        status: Optional[str] = None,
        numbered: Optional[str] = None,
        profiles_module: Optional[ProfilesModule] = None,
    ) -> None:
        if status is None:
            status = ufw.status_verbose()
        if numbered is None:
            numbered = ufw.status_numbered()
        if profiles_module is None:
            profiles_module = ProfilesModule()
        self.status = status
        self.menu = FocusableList(build_menu(status))
        self.view_state = View.HOME
        self.notification = ""
        self.running_notifications = 0
        self.cmd_is_running = False
        self.reset_dialog: Optional[ConfirmDialog] = None
        self.delete_dialog: Optional[ConfirmDialog] = None
        self.rules: MultiSelectList[str] = MultiSelectList(parse_rules(numbered))
        self.rule_form: Optional[RuleForm] = None
        self.profiles_module = profiles_module
        self.defaults_form: Optional[DefaultsForm] = None

    # state refreshes

    def _reload_status(self) -> None:
        self.status = ufw.status_verbose()

    def _reload_rules(self) -> None:
        self.rules.set_items(parse_rules(ufw.status_numbered()))

    def _reset_menu(self) -> None:
        self.menu.set_items(build_menu(ufw.status_verbose()))
        self._reload_status()

    def _set_notification(self, text: str) -> Command:
        self.notification = text
        self.running_notifications += 1
        return Tick(NOTIFICATION_SECONDS, _NotificationExpired())

    # message handling

    def update(self, msg: Any) -> Optional[Command]:
        """Handle a message and return the command to run next, if any."""
        if isinstance(msg, KeyPress) and msg.key in QUIT_KEYS:
            return QuitRequested
        if isinstance(msg, _NotificationExpired):
            self.running_notifications -= 1
            if self.running_notifications == 0:
                self.notification = ""
            return None
        if isinstance(msg, CommandStarted):
            self.cmd_is_running = True
            return None
        if isinstance(msg, CommandFinished):
            self.cmd_is_running = False
            return self._set_notification(msg.output)
        if isinstance(msg, NotificationReceived):
            return self._set_notification(msg.text)

        handler = {
            View.HOME: self._update_home,
            View.CREATE_RULE: self._update_create_rule,
            View.DELETE_RULE: self._update_delete_rule,
            View.PROFILES: self._update_profiles,
            View.SET_DEFAULT: self._update_set_default,
        }[self.view_state]
        return handler(msg)

    def _update_home(self, msg: Any) -> Optional[Command]:
        if self.reset_dialog is not None:
            outcome = self.reset_dialog.update(msg)
            if outcome == DialogOutcome.YES:
                self.reset_dialog = None
                output = ufw.reset()
                self._reset_menu()
                self._reload_status()
                self._reload_rules()
                return self._set_notification(output)
            if outcome in (DialogOutcome.NO, DialogOutcome.ESC):
                self.reset_dialog = None
            return None

        if not isinstance(msg, KeyPress):
            return None
        key = msg.key
        if key in ("up", "k"):
            self.menu.prev()
        elif key in ("down", "j"):
            self.menu.next()
        elif key == "enter":
            return self._activate(self.menu.focused().action)
        return None

    def _activate(self, action: MenuAction) -> Optional[Command]:
        if action == MenuAction.RESET:
            self.reset_dialog = ConfirmDialog("Are you sure you want to reset UFW?")
        elif action == MenuAction.DISABLE:
            ufw.disable()
            self._reset_menu()
            self.menu.focus_first()
        elif action == MenuAction.ENABLE:
            ufw.enable()
            self._reset_menu()
        elif action == MenuAction.ENABLE_LOGGING:
            ufw.enable_logging()
            self._reset_menu()
        elif action == MenuAction.DISABLE_LOGGING:
            ufw.disable_logging()
            self._reset_menu()
        elif action == MenuAction.CREATE_RULE:
            self.rule_form = RuleForm()
            self.view_state = View.CREATE_RULE
        elif action == MenuAction.DELETE_RULE:
            self.view_state = View.DELETE_RULE
        elif action == MenuAction.EXPORT_RULES:
            return _export_rules
        elif action == MenuAction.SET_DEFAULT:
            try:
                policies = parse_ufw_defaults(self.status)
            except DefaultsNotFoundError as exc:
                return self._set_notification(str(exc))
            self.defaults_form = DefaultsForm(policies)
            self.view_state = View.SET_DEFAULT
        elif action == MenuAction.PROFILES:
            self.view_state = View.PROFILES
        elif action == MenuAction.QUIT:
            return QuitRequested
        return None

    def _update_create_rule(self, msg: Any) -> Optional[Command]:
        if isinstance(msg, RuleCreated):
            self._reload_status()
            self._reload_rules()
            self.view_state = View.HOME
            return None
        if isinstance(msg, RuleFormEscaped):
            self.view_state = View.HOME
            return None
        return self.rule_form.update(msg) if self.rule_form is not None else None

    def _update_delete_rule(self, msg: Any) -> Optional[Command]:
        if self.delete_dialog is not None:
            outcome = self.delete_dialog.update(msg)
            if outcome == DialogOutcome.YES:
                self.delete_dialog = None
                if self.rules.none_selected():
                    number = self.rules.focused_index + 1

                    def delete() -> str:
                        return ufw.delete_rule_by_number(number)
                else:
                    # Highest first, so the numbers of the remaining rules stay valid.
                    numbers = [index + 1 for index in reversed(self.rules.selected_indexes())]

                    def delete() -> str:
                        for rule_number in numbers:
                            ufw.delete_rule_by_number(rule_number)
                        return ""

                return run_and_then(delete, _RulesDeleted)
            if outcome in (DialogOutcome.NO, DialogOutcome.ESC):
                self.delete_dialog = None
            return None

        if isinstance(msg, _RulesDeleted):
            self.rules.focus_first()
            self._reload_rules()
            return command_finished(msg.output)
        if not isinstance(msg, KeyPress):
            return None

        key = msg.key
        if key in ("up", "k"):
            self.rules.prev()
        elif key in ("down", "j"):
            self.rules.next()
        elif key == "d":
            prompt = (
                "Are you sure you want to delete this rule?"
                if self.rules.none_selected()
                else "Are you sure you want to delete selected rules?"
            )
            self.delete_dialog = ConfirmDialog(prompt)
        elif key == "esc":
            self.view_state = View.HOME
            self._reload_status()
        elif key == " ":
            self.rules.toggle()
        return None

    def _update_profiles(self, msg: Any) -> Optional[Command]:
        if isinstance(msg, ProfilesEscaped):
            self.view_state = View.HOME
            self._reload_status()
            self._reload_rules()
            return None
        return self.profiles_module.update(msg)

    def _update_set_default(self, msg: Any) -> Optional[Command]:
        if isinstance(msg, DefaultsEscaped):
            self.view_state = View.HOME
            return None
        if isinstance(msg, DefaultPoliciesUpdated):
            self._reload_status()
            return command_finished(msg.output)
        return self.defaults_form.update(msg) if self.defaults_form is not None else None

    # rendering

    def view(self) -> str:
        if self.cmd_is_running:
            return RUNNING

        output = ""
        if self.view_state == View.HOME:
            if self.reset_dialog is not None:
                return self.reset_dialog.view()
            output = render_two_columns(_render_menu(self.menu), self.status.split("\n"))
        elif self.view_state == View.CREATE_RULE:
            output = self.rule_form.view() if self.rule_form is not None else ""
        elif self.view_state == View.DELETE_RULE:
            if self.delete_dialog is not None:
                return self.delete_dialog.view()
            lines = ["Focus rule to delete:"]
            lines.extend(
                f"{'>' if focused else ' '}{'*' if selected else ' '} {line}"
                for line, focused, selected in self.rules.entries()
            )
            output = "\n".join(lines) + "\n\n" + DELETE_HELP
        elif self.view_state == View.PROFILES:
            output = self.profiles_module.view()
        elif self.view_state == View.SET_DEFAULT:
            output = self.defaults_form.view() if self.defaults_form is not None else ""

        return output + "\n\n" + self.notification


# terminal loop

_SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_ENTER: "enter",
}

_CHARACTER_KEYS = {
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\t": "tab",
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x11": "ctrl+q",
}


def _key_name(code: Any) -> Optional[str]:
    if isinstance(code, int):
        return _SPECIAL_KEYS.get(code)
    if code in _CHARACTER_KEYS:
        return _CHARACTER_KEYS[code]
    if code.isprintable():
        return code
    return None


def _deliver(command: Command, inbox: queue.Queue) -> None:
    message = command()
    if message is not None:
        inbox.put(message)


def _dispatch(command: Optional[Command], inbox: queue.Queue) -> None:
    if command is None:
        return
    if isinstance(command, Batch):
        for inner in command:
            _dispatch(inner, inbox)
        return
    threading.Thread(target=_deliver, args=(command, inbox), daemon=True).start()


def _draw(screen: Any, text: str) -> None:
    screen.erase()
    height, width = screen.getmaxyx()
    for row, line in enumerate(text.split("\n")):
        if row >= height:
            break
        try:
            screen.addnstr(row, 0, line, max(width - 1, 0))
        except curses.error:
            pass
    screen.refresh()


def _loop(screen: Any, app: App) -> None:
    curses.raw()
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    screen.keypad(True)
    screen.timeout(100)
    inbox: queue.Queue = queue.Queue()

    while True:
        _draw(screen, app.view())
        try:
            code = screen.get_wch()
        except curses.error:
            code = None
        if code is not None:
            key = _key_name(code)
            if key is not None:
                inbox.put(KeyPress(key))
        while True:
            try:
                message = inbox.get_nowait()
            except queue.Empty:
                break
            if isinstance(message, QuitRequested):
                return
            _dispatch(app.update(message), inbox)


def run(app: App) -> None:
    """Drive ``app`` in the terminal until it asks to quit."""
    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(_loop, app)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="fwtui", description="Terminal interface for ufw.")
    parser.parse_args(argv)

    if os.geteuid() != 0:
        print("This action requires root. Please run with sudo.")
        return 1
    try:
        subprocess.run(
            ["sudo", "ufw", "status"],
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        print(f"ufw is not available or sudo failed: {exc}", file=sys.stderr)
        return 1

    app = App()
    try:
        run(app)
    except Exception as exc:  # noqa: BLE001 - report any failure of the interface
        print("Error running program:", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())