"""Managing application profiles: listing, enabling, installing and deleting them."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from . import ufw
from .confirmation import ConfirmDialog, DialogOutcome
from .createprofile import ProfileCreated, ProfileForm, ProfileFormEscaped
from .focuslist import FocusableList
from .messages import Command, KeyPress, command_finished, run_and_then
from .multiselect import MultiSelectList
from .profile import (
    PROFILES_DIR,
    ProfileError,
    UfwProfile,
    create_profile,
    delete_profile,
    installable_profiles,
    load_installed_profiles,
)

LIST_HELP = "↑↓ to navigate, d to delete, Space to select, Enter to enable profile, Esc to cancel"
INSTALL_HELP = "↑↓ to navigate, Space to select, Enter to create profile, Esc to cancel"


class ProfilesView(str, Enum):
    HOME = "home"
    LIST = "profiles_list"
    CREATE_FROM_LIST = "create_profile_from_list"
    CREATE = "create_profile"


class _MenuItem(str, Enum):
    LIST = "INSTALLED_PROFILES"
    CREATE_FROM_LIST = "CREATE_PROFILE_FROM_LIST"
    CREATE = "CREATE_PROFILE"

    @property
    def label(self) -> str:
        return {
            _MenuItem.LIST: "List",
            _MenuItem.CREATE_FROM_LIST: "Create (from list)",
            _MenuItem.CREATE: "Create",
        }[self]


@dataclass(frozen=True)
class ProfilesEscaped:
    """The user left the profiles screen."""


@dataclass(frozen=True)
class _ProfilesDeleted:
    output: str


@dataclass(frozen=True)
class _ProfilesApplied:
    output: str


@dataclass(frozen=True)
class _ProfilesCreated:
    output: str


def format_profile_row(profile: UfwProfile, focused: bool, selected: bool) -> str:
    """One line of a profile table with focus and selection markers."""
    prefix = (">" if focused else " ") + ("*" if selected else " ")
    ports = ", ".join(profile.ports)
    return f"{prefix} {profile.name:<20} | {profile.title:<45} | {ports:<45}"


class ProfilesModule:
    """The profiles screen with its menu, tables and creation form."""

    directory: str | os.PathLike[str] = PROFILES_DIR

    def __init__(
        self,
        installed: Optional[list[UfwProfile]] = None,
        installable: Optional[list[UfwProfile]] = None,
    ) -> None:
        if installed is None:
            installed = load_installed_profiles()
        if installable is None:
            installable = installable_profiles(profile.name for profile in installed)
        self.view_state = ProfilesView.HOME
        self.menu = FocusableList(list(_MenuItem))
        self.installed: MultiSelectList[UfwProfile] = MultiSelectList(installed)
        self.installable: MultiSelectList[UfwProfile] = MultiSelectList(installable)
        self.delete_dialog: Optional[ConfirmDialog] = None
        self.profile_form = ProfileForm()

    def _reload_installed(self) -> None:
        self.installed = MultiSelectList(load_installed_profiles())

    def _reload_installable(self) -> None:
        names = [profile.name for profile in load_installed_profiles()]
        self.installable = MultiSelectList(installable_profiles(names))

    def update(self, msg: Any) -> Optional[Command]:
        """Handle a message and return the command to run next, if any."""
        handler = {
            ProfilesView.HOME: self._update_home,
            ProfilesView.LIST: self._update_list,
            ProfilesView.CREATE_FROM_LIST: self._update_create_from_list,
            ProfilesView.CREATE: self._update_create,
        }[self.view_state]
        return handler(msg)

    def _update_home(self, msg: Any) -> Optional[Command]:
        if not isinstance(msg, KeyPress):
            return None
        key = msg.key
        if key in ("up", "k"):
            self.menu.prev()
        elif key in ("down", "j"):
            self.menu.next()
        elif key == "esc":
            return ProfilesEscaped
        elif key == "enter":
            item = self.menu.focused()
            if item == _MenuItem.LIST:
                self.view_state = ProfilesView.LIST
                self.installed.clear_selection()
                self.installed.focus_first()
            elif item == _MenuItem.CREATE_FROM_LIST:
                self.view_state = ProfilesView.CREATE_FROM_LIST
                self.installable.clear_selection()
                self.installable.focus_first()
            elif item == _MenuItem.CREATE:
                self.view_state = ProfilesView.CREATE
                self.profile_form = ProfileForm()
        return None

    def _delete_one(self, profile: UfwProfile) -> str:
        try:
            return delete_profile(profile, self.directory)
        except ProfileError as exc:
            return str(exc)

    def _create_one(self, profile: UfwProfile) -> str:
        try:
            return create_profile(profile, self.directory)
        except ProfileError as exc:
            return str(exc)

    def _update_list(self, msg: Any) -> Optional[Command]:
        if self.delete_dialog is not None:
            outcome = self.delete_dialog.update(msg)
            if outcome == DialogOutcome.YES:
                self.delete_dialog = None
                if self.installed.none_selected():
                    target = self.installed.focused_item()

                    def delete() -> str:
                        return self._delete_one(target)
                else:
                    targets = self.installed.selected_items()

                    def delete() -> str:
                        return "".join("\n" + self._delete_one(profile) for profile in targets)

                return run_and_then(delete, _ProfilesDeleted)
            if outcome in (DialogOutcome.NO, DialogOutcome.ESC):
                self.delete_dialog = None
            return None

        if isinstance(msg, _ProfilesApplied):
            self.installed.clear_selection()
            self.installed.focus_first()
            return command_finished(msg.output)
        if isinstance(msg, _ProfilesDeleted):
            self._reload_installed()
            self._reload_installable()
            self.installed.clear_selection()
            return command_finished(msg.output)
        if not isinstance(msg, KeyPress):
            return None

        key = msg.key
        if key in ("up", "k"):
            self.installed.prev()
        elif key in ("down", "j"):
            self.installed.next()
        elif key in ("delete", "d"):
            prompt = (
                "Are you sure you want to delete this profile?"
                if self.installed.none_selected()
                else "Are you sure you want to delete selected profiles?"
            )
            self.delete_dialog = ConfirmDialog(prompt)
        elif key == "esc":
            self.view_state = ProfilesView.HOME
            self.menu.focus_first()
        elif key == " ":
            self.installed.toggle()
        elif key == "enter":
            if self.installed.none_selected():
                target = self.installed.focused_item()

                def allow() -> str:
                    return ufw.allow_profile(target.name)
            else:
                targets = self.installed.selected_items()

                def allow() -> str:
                    return "".join("\n" + ufw.allow_profile(profile.name) for profile in targets)

            return run_and_then(allow, _ProfilesApplied)
        return None

    def _update_create_from_list(self, msg: Any) -> Optional[Command]:
        if isinstance(msg, _ProfilesCreated):
            self._reload_installed()
            self._reload_installable()
            return command_finished(msg.output)
        if not isinstance(msg, KeyPress):
            return None

        key = msg.key
        if key in ("up", "k"):
            self.installable.prev()
        elif key in ("down", "j"):
            self.installable.next()
        elif key == "esc":
            self.view_state = ProfilesView.HOME
        elif key == " ":
            self.installable.toggle()
        elif key == "enter":
            if self.installable.none_selected():
                target = self.installable.focused_item()

                def create() -> str:
                    return self._create_one(target)
            else:
                targets = self.installable.selected_items()

                def create() -> str:
                    return "".join("\n" + self._create_one(profile) for profile in targets)

            return run_and_then(create, _ProfilesCreated)
        return None

    def _update_create(self, msg: Any) -> Optional[Command]:
        if isinstance(msg, ProfileCreated):
            self._reload_installed()
            self.view_state = ProfilesView.HOME
            return None
        if isinstance(msg, ProfileFormEscaped):
            self.view_state = ProfilesView.HOME
            return None
        return self.profile_form.update(msg)

    def view(self) -> str:
        if self.view_state == ProfilesView.HOME:
            lines = ["Focus profile action:"]
            lines.extend(
                f"{'>' if focused else ' '} {item.label}" for item, focused in self.menu.entries()
            )
            return "\n".join(lines)
        if self.view_state == ProfilesView.LIST:
            if self.delete_dialog is not None:
                return self.delete_dialog.view()
            lines = ["Focus profile:"]
            lines.extend(format_profile_row(*entry) for entry in self.installed.entries())
            return "\n".join(lines) + "\n\n" + LIST_HELP
        if self.view_state == ProfilesView.CREATE_FROM_LIST:
            lines = ["Focus profile to install:"]
            lines.extend(format_profile_row(*entry) for entry in self.installable.entries())
            return "\n".join(lines) + "\n\n" + INSTALL_HELP
        return self.profile_form.view()