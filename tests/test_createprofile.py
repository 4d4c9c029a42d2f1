import re
import subprocess
from unittest.mock import patch

import pytest

from fwtui.createprofile import (
    ProfileCreated,
    ProfileField,
    ProfileForm,
    ProfileFormEscaped,
    validate_ports,
)
from fwtui.messages import Batch, KeyPress, NotificationReceived
from fwtui.profile import UfwProfile, profile_file_content


def type_text(form, text):
    for char in text:
        form.update(KeyPress(char))


def filled_form(name, title, ports):
    form = ProfileForm()
    type_text(form, name)
    form.update(KeyPress("down"))
    type_text(form, title)
    form.update(KeyPress("down"))
    type_text(form, ports)
    return form


@pytest.mark.parametrize(
    "ports, message",
    [
        ("", "ports cannot be empty"),
        ("   ", "ports cannot be empty"),
        ("22/tcp/udp", "too many '/' in group: 22/tcp/udp"),
        ("22/icmp", "invalid protocol: icmp"),
        ("6000:6007", "port range must specify protocol: 6000:6007"),
        ("1:2:3/tcp", "invalid port range: 1:2:3"),
        ("0/tcp", "invalid port: 0"),
        ("70000", "invalid port: 70000"),
        ("abc:5/tcp", "invalid start port: abc"),
        ("5:abc/tcp", "invalid end port: abc"),
        ("10:5/tcp", "start port cannot be greater than end port in range: 10:5"),
        ("80,x/tcp", "invalid port: x"),
    ],
)
def test_validate_ports_errors(ports, message):
    with pytest.raises(ValueError, match=re.escape(message)):
        validate_ports(ports)


@pytest.mark.parametrize(
    "ports, expected",
    [
        ("22/tcp", ("22/tcp",)),
        ("80,443/tcp", ("80,443/tcp",)),
        ("6000:6007/udp", ("6000:6007/udp",)),
        ("53/tcp|53/udp", ("53/tcp", "53/udp")),
        (" 8080 ", ("8080",)),
    ],
)
def test_build_profile_valid_ports(ports, expected):
    form = filled_form("web", "Web", ports)
    assert form.build_profile() == UfwProfile(name="web", title="Web", ports=expected)


def test_build_profile_trims_name_and_title():
    form = filled_form("  web ", " Web app ", "80/tcp")
    profile = form.build_profile()
    assert profile.name == "web"
    assert profile.title == "Web app"


def test_build_profile_requires_name():
    form = filled_form("   ", "Web", "80/tcp")
    with pytest.raises(ValueError, match="name cannot be empty"):
        form.build_profile()


def test_build_profile_wraps_port_error():
    form = filled_form("web", "Web", "99999")
    with pytest.raises(ValueError, match=re.escape("invalid ports: invalid port: 99999")):
        form.build_profile()


def test_typing_and_backspace_edit_focused_field():
    form = filled_form("webx", "Web", "80")
    form.update(KeyPress("up"))
    form.update(KeyPress("up"))
    form.update(KeyPress("backspace"))
    assert form.name == "web"
    assert form.title == "Web"
    assert form.ports == "80"


def test_backspace_on_empty_field_keeps_it_empty():
    form = ProfileForm()
    form.update(KeyPress("backspace"))
    assert form.name == ""


def test_navigation_wraps():
    form = ProfileForm()
    form.update(KeyPress("up"))
    assert form.fields.focused() == ProfileField.PORTS
    form.update(KeyPress("down"))
    assert form.fields.focused() == ProfileField.NAME


def test_view_layout():
    form = filled_form("web", "Web", "80/tcp")
    lines = form.view().split("\n")
    assert lines[:3] == ["  name: web", "  Title: Web", "> Ports: 80/tcp"]
    assert lines[-1].startswith("↑↓ to navigate")


def test_enter_with_invalid_form_notifies():
    form = ProfileForm()
    command = form.update(KeyPress("enter"))
    assert command() == NotificationReceived("name cannot be empty")


def test_esc_returns_escape_command():
    form = ProfileForm()
    assert form.update(KeyPress("esc"))() == ProfileFormEscaped()


def test_enter_writes_profile(tmp_path):
    form = filled_form("web", "Web", "80,443/tcp")
    form.directory = tmp_path
    completed = subprocess.CompletedProcess([], 0, stdout=b"")
    with patch("subprocess.run", return_value=completed) as run:
        command = form.update(KeyPress("enter"))
    assert isinstance(command, Batch)
    results = [cmd() for cmd in command]
    assert results == [NotificationReceived("Profile web created"), ProfileCreated()]
    written = (tmp_path / "web.profile").read_text()
    assert written == profile_file_content(form.build_profile())
    assert run.call_args.args[0][2] == 'sudo ufw app update "web"'


def test_enter_with_existing_profile_notifies(tmp_path):
    (tmp_path / "web.profile").write_text("[web]\n")
    form = filled_form("web", "Web", "80/tcp")
    form.directory = tmp_path
    command = form.update(KeyPress("enter"))
    assert command() == NotificationReceived("profile web already exists")