import pytest

from fwtui.createprofile import ProfileForm, ProfileFormEscaped
from fwtui.messages import Batch, CommandFinished, CommandStarted, KeyPress
from fwtui.profile import UfwProfile, profile_file_content
from fwtui.profiles import (
    ProfilesEscaped,
    ProfilesModule,
    ProfilesView,
    _ProfilesApplied,
    _ProfilesDeleted,
    format_profile_row,
)

SSH = UfwProfile(name="OpenSSH", title="Secure shell access (SSH)", ports=("22/tcp",), installed=True)
WEB = UfwProfile(name="HTTP", title="Generic HTTP service", ports=("80/tcp",), installed=True)
DNS = UfwProfile(name="DNS", title="Domain name System", ports=("53/tcp", "53/udp"))


def press(module, *keys):
    result = None
    for key in keys:
        result = module.update(KeyPress(key))
    return result


@pytest.fixture
def module():
    return ProfilesModule(installed=[SSH, WEB], installable=[DNS])


def test_home_view_lists_menu(module):
    assert module.view() == "Focus profile action:\n> List\n  Create (from list)\n  Create"


def test_home_navigation_wraps(module):
    press(module, "k")
    assert module.view().endswith("> Create")
    press(module, "j")
    assert module.view().splitlines()[1] == "> List"


def test_home_escape_returns_escaped_command(module):
    command = press(module, "esc")
    assert command() == ProfilesEscaped()


def test_format_profile_row_columns():
    row = format_profile_row(DNS, True, False)
    assert row.startswith(">  DNS")
    cells = [cell.strip() for cell in row[3:].split(" | ")]
    assert cells == ["DNS", "Domain name System", "53/tcp, 53/udp"]


def test_format_profile_row_markers_and_width():
    focused = format_profile_row(SSH, True, True)
    plain = format_profile_row(SSH, False, False)
    assert focused[:2] == ">*"
    assert plain[:2] == "  "
    assert len(focused) == len(plain)
    assert focused[2:] == plain[2:]


def test_enter_list_shows_installed(module):
    press(module, "enter")
    assert module.view_state == ProfilesView.LIST
    lines = module.view().split("\n")
    assert lines[0] == "Focus profile:"
    assert lines[1] == format_profile_row(SSH, True, False)
    assert lines[2] == format_profile_row(WEB, False, False)
    assert module.view().endswith(
        "↑↓ to navigate, d to delete, Space to select, Enter to enable profile, Esc to cancel"
    )


def test_list_toggle_selection(module):
    press(module, "enter", "j", " ")
    assert module.installed.selected_items() == [WEB]
    assert format_profile_row(WEB, True, True) in module.view()


def test_list_escape_returns_home_with_first_menu_item(module):
    press(module, "enter", "esc")
    assert module.view_state == ProfilesView.HOME
    assert module.menu.current == 0


def test_delete_prompt_single(module):
    press(module, "enter", "d")
    assert module.view() == "Are you sure you want to delete this profile?\n\n> Yes\n  No\n"


def test_delete_prompt_multiple(module):
    press(module, "enter", " ", "delete")
    assert module.view().startswith("Are you sure you want to delete selected profiles?")


@pytest.mark.parametrize("keys", [("down", "enter"), ("esc",)])
def test_delete_dialog_dismissed(module, keys):
    press(module, "enter", "d")
    assert press(module, *keys) is None
    assert module.delete_dialog is None
    assert module.view().startswith("Focus profile:")


def test_delete_confirmed_removes_file(module, tmp_path):
    path = tmp_path / "OpenSSH.profile"
    path.write_text(profile_file_content(SSH))
    module.directory = tmp_path
    press(module, "enter", "d")
    command = press(module, "enter")
    assert isinstance(command, Batch)
    started, work = command.commands
    assert started() == CommandStarted()
    assert work() == _ProfilesDeleted(output="Profile with title 'OpenSSH' deleted")
    assert not path.exists()
    assert module.delete_dialog is None


def test_delete_selected_collects_outputs(module, tmp_path):
    (tmp_path / "HTTP.profile").write_text(profile_file_content(WEB))
    module.directory = tmp_path
    press(module, "enter", " ", "j", " ", "d")
    _, work = press(module, "enter").commands
    result = work()
    assert result.output == (
        "\nProfile with title 'Secure shell access (SSH)' not found"
        "\nProfile with title 'HTTP' deleted"
    )


def test_enter_on_list_starts_command(module):
    press(module, "enter")
    command = press(module, "enter")
    assert isinstance(command, Batch)
    assert command.commands[0]() == CommandStarted()


def test_applied_message_resets_selection(module):
    press(module, "enter", "j", " ")
    command = module.update(_ProfilesApplied(output="done"))
    assert command() == CommandFinished("done")
    assert module.installed.none_selected()
    assert module.installed.focused_index == 0


def test_create_from_list_view_and_escape(module):
    press(module, "down", "enter")
    assert module.view_state == ProfilesView.CREATE_FROM_LIST
    lines = module.view().split("\n")
    assert lines[0] == "Focus profile to install:"
    assert lines[1] == format_profile_row(DNS, True, False)
    press(module, " ")
    assert module.installable.selected_items() == [DNS]
    press(module, "esc")
    assert module.view_state == ProfilesView.HOME


def test_create_view_delegates_to_form(module):
    press(module, "up", "enter")
    assert module.view_state == ProfilesView.CREATE
    assert module.view() == ProfileForm().view()
    press(module, "w", "e", "b")
    assert module.profile_form.name == "web"
    assert press(module, "esc") is ProfileFormEscaped


def test_create_form_escaped_message_returns_home(module):
    press(module, "up", "enter")
    assert module.update(ProfileFormEscaped()) is None
    assert module.view_state == ProfilesView.HOME
    assert module.view().startswith("Focus profile action:")