import subprocess
from unittest import mock

import pytest

from fwtui.profile import (
    ProfileError,
    UfwProfile,
    create_profile,
    delete_profile,
    installable_profiles,
    load_installed_profiles,
    parse_profile_info,
    parse_profile_list,
    profile_file_content,
)


def _completed(stdout: bytes = b"", code: int = 0):
    return subprocess.CompletedProcess(args=[], returncode=code, stdout=stdout)


WEB = UfwProfile(name="Web", title="Web server", ports=("80/tcp", "443/tcp"))


def test_profile_file_content_format():
    assert profile_file_content(WEB) == (
        "[Web]\ntitle=Web\ndescription=Web server\nports=80/tcp|443/tcp\n"
    )


def test_create_profile_writes_file_and_loads_it(tmp_path):
    with mock.patch("subprocess.run", return_value=_completed(b"ok\n")) as run:
        message = create_profile(WEB, tmp_path)
    assert message == "Profile Web created"
    assert (tmp_path / "Web.profile").read_text() == profile_file_content(WEB)
    run.assert_called_once()
    assert run.call_args.args[0] == ["bash", "-c", 'sudo ufw app update "Web"']


def test_create_profile_refuses_existing(tmp_path):
    (tmp_path / "Web.profile").write_text("old")
    with pytest.raises(ProfileError, match="profile Web already exists"):
        create_profile(WEB, tmp_path)
    assert (tmp_path / "Web.profile").read_text() == "old"


def test_create_profile_missing_directory(tmp_path):
    with pytest.raises(ProfileError, match="error creating profile"):
        create_profile(WEB, tmp_path / "missing")


def test_delete_profile_removes_matching_file(tmp_path):
    (tmp_path / "other.profile").write_text("[Other]\n")
    (tmp_path / "web.profile").write_text(profile_file_content(WEB))
    assert delete_profile(WEB, tmp_path) == "Profile with title 'Web' deleted"
    assert not (tmp_path / "web.profile").exists()
    assert (tmp_path / "other.profile").exists()


def test_delete_profile_not_found_reports_title(tmp_path):
    (tmp_path / "other.profile").write_text("[Other]\n")
    assert delete_profile(WEB, tmp_path) == "Profile with title 'Web server' not found"


def test_delete_profile_skips_directories(tmp_path):
    (tmp_path / "[Web]").mkdir()
    assert delete_profile(WEB, tmp_path).endswith("not found")
    assert (tmp_path / "[Web]").is_dir()


def test_delete_profile_unreadable_directory(tmp_path):
    with pytest.raises(ProfileError, match="Error reading profiles directory"):
        delete_profile(WEB, tmp_path / "missing")


def test_parse_profile_list_skips_header_and_blanks():
    text = "Available applications:\n  OpenSSH\n\n  Nginx Full\n"
    assert parse_profile_list(text) == ["OpenSSH", "Nginx Full"]


def test_parse_profile_list_header_only():
    assert parse_profile_list("Available applications:\n") == []


def test_parse_profile_info_single_port():
    text = (
        "Profile: OpenSSH\n"
        "Title: Secure shell server\n"
        "Description: remote access\n"
        "\n"
        "Port:\n"
        "  22/tcp\n"
    )
    profile = parse_profile_info("ignored", text)
    assert profile.name == "OpenSSH"
    assert profile.title == "Secure shell server"
    assert profile.ports == ("22/tcp",)
    assert profile.installed is True


def test_parse_profile_info_multiple_ports_stop_at_blank():
    text = "Title: DNS\n\nPorts:\n  53/tcp\n  53/udp\n\n  trailing\n"
    profile = parse_profile_info("DNS", text)
    assert profile.name == "DNS"
    assert profile.ports == ("53/tcp", "53/udp")


def test_load_installed_profiles_queries_each_name():
    def fake_run(args, **kwargs):
        command = args[2]
        if command == "sudo ufw app list":
            return _completed(b"Available applications:\n  Alpha\n")
        if command == 'sudo ufw app info "Alpha"':
            return _completed(b"Profile: Alpha\nTitle: First\n\nPort:\n  1/tcp\n")
        return _completed(b"", 1)

    with mock.patch("subprocess.run", side_effect=fake_run):
        profiles = load_installed_profiles()
    assert profiles == [UfwProfile("Alpha", "First", ("1/tcp",), True)]


def test_installable_profiles_excludes_installed():
    everything = installable_profiles([])
    remaining = installable_profiles(["OpenSSH", "HTTP"])
    names = [p.name for p in remaining]
    assert "OpenSSH" not in names and "HTTP" not in names
    assert len(everything) - len(remaining) == 2
    assert all(not p.installed for p in everything)


def test_installable_profiles_catalog_entries():
    catalog = {p.name: p for p in installable_profiles(set())}
    assert len(catalog) == len(installable_profiles(set()))
    assert catalog["OpenSSH"].ports == ("22/tcp",)
    assert catalog["Docker Swarm"].ports == ("2377,7946/tcp", "7946,4789/udp")