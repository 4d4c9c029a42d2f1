"""Application profiles: files under the ufw applications directory."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from . import ufw

PROFILES_DIR = Path("/etc/ufw/applications.d")


class ProfileError(Exception):
    """A profile could not be created or deleted."""


@dataclass(frozen=True)
class UfwProfile:
    name: str
    title: str = ""
    ports: tuple[str, ...] = field(default_factory=tuple)
    installed: bool = False


def profile_file_content(profile: UfwProfile) -> str:
    """Return the text of the profile file ufw reads for ``profile``."""
    return (
        f"[{profile.name}]\n"
        f"title={profile.name}\n"
        f"description={profile.title}\n"
        f"ports={'|'.join(profile.ports)}\n"
    )


def create_profile(profile: UfwProfile, directory: str | os.PathLike[str] = PROFILES_DIR) -> str:
    """Write the profile file, let ufw load it and return a status message.

    Raises ProfileError when the file exists already or cannot be written.
    """
    path = Path(directory) / f"{profile.name}.profile"
    if path.exists():
        raise ProfileError(f"profile {profile.name} already exists")
    try:
        path.write_text(profile_file_content(profile))
        path.chmod(0o644)
    except OSError as exc:
        raise ProfileError(f"error creating profile: {exc}") from exc
    ufw.load_profile(profile.name)
    return f"Profile {profile.name} created"


def delete_profile(profile: UfwProfile, directory: str | os.PathLike[str] = PROFILES_DIR) -> str:
    """Remove the first file declaring the profile's section and return a status message.

    Raises ProfileError when the directory cannot be read or the file cannot be removed.
    """
    base = Path(directory)
    try:
        entries = sorted(base.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise ProfileError(f"Error reading profiles directory: {exc}") from exc

    marker = f"[{profile.name}]"
    for entry in entries:
        if entry.is_dir():
            continue
        try:
            content = entry.read_text(errors="replace")
        except OSError:
            continue
        if marker in content:
            try:
                entry.unlink()
            except OSError as exc:
                raise ProfileError(f"Error deleting profile: {exc}") from exc
            return f"Profile with title '{profile.name}' deleted"

    return f"Profile with title '{profile.title}' not found"


def parse_profile_list(text: str) -> list[str]:
    """Extract profile names from ``ufw app list`` output."""
    names = (line.strip() for line in text.strip().split("\n")[1:])
    return [name for name in names if name]


def parse_profile_info(name: str, text: str) -> UfwProfile:
    """Build an installed profile from ``ufw app info`` output."""
    lines = text.split("\n")
    title = ""
    ports: list[str] = []
    for position, raw in enumerate(lines):
        line = raw.strip()
        if line.startswith("Profile:"):
            name = line[len("Profile:"):].strip()
        elif line.startswith("Title:"):
            title = line[len("Title:"):].strip()
        elif line.startswith("Ports:") or line.startswith("Port:"):
            for following in lines[position + 1:]:
                port = following.strip()
                if not port:
                    break
                ports.append(port)
    return UfwProfile(name=name, title=title, ports=tuple(ports), installed=True)


def load_installed_profiles() -> list[UfwProfile]:
    """Ask ufw for every known profile and its details."""
    return [
        parse_profile_info(name, ufw.get_profile_info(name))
        for name in parse_profile_list(ufw.get_profile_list())
    ]


_CATALOG: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    # Common access
    ("OpenSSH", "Secure shell access (SSH)", ("22/tcp",)),
    ("HTTP", "Generic HTTP service", ("80/tcp",)),
    ("HTTPS", "Generic HTTPS service", ("443/tcp",)),
    # Web servers
    ("Nginx HTTP", "Nginx web server (HTTP only)", ("80/tcp",)),
    ("Nginx HTTPS", "Nginx web server (HTTPS only)", ("443/tcp",)),
    ("Nginx Full", "Nginx web server (HTTP and HTTPS)", ("80,443/tcp",)),
    ("Apache", "Apache web server (HTTP only)", ("80/tcp",)),
    ("Apache Secure", "Apache web server (HTTPS only)", ("443/tcp",)),
    ("Apache Full", "Apache web server (HTTP and HTTPS)", ("80,443/tcp",)),
    # Databases
    ("PostgreSQL", "PostgreSQL database server", ("5432/tcp",)),
    ("MySQL", "MySQL database server", ("3306/tcp",)),
    ("MongoDB", "MongoDB database", ("27017/tcp",)),
    ("Redis", "Redis key-value store", ("6379/tcp",)),
    ("InfluxDB", "InfluxDB time series database", ("8086/tcp",)),
    ("Elasticsearch", "Elasticsearch search engine", ("9200,9300/tcp",)),
    # DevOps / containers
    ("Docker Remote API", "Docker remote API", ("2375,2376/tcp",)),
    ("Kubernetes API", "Kubernetes API server", ("6443/tcp",)),
    ("Docker Swarm", "Docker Swarm cluster communication", ("2377,7946/tcp", "7946,4789/udp")),
    # VPN
    ("WireGuard", "WireGuard VPN", ("51820/udp",)),
    ("OpenVPN", "OpenVPN", ("1194/udp",)),
    # Email
    ("SMTP", "Simple Mail Transfer Protocol", ("25/tcp",)),
    ("SMTPS", "SMTP over SSL", ("465/tcp",)),
    ("Submission", "Mail Submission Agent", ("587/tcp",)),
    ("IMAPS", "IMAP over SSL", ("993/tcp",)),
    ("POP3S", "POP3 over SSL", ("995/tcp",)),
    # DNS
    ("DNS", "Domain name System", ("53/tcp", "53/udp")),
    # File sharing
    ("Samba", "Windows file/printer sharing (Samba)", ("137,138/udp", "139,445/tcp")),
    ("NFS", "Network File System", ("111,2049/tcp", "111,2049/udp")),
    # Misc
    ("CUPS", "Common Unix Printing System", ("631/tcp",)),
    ("VNC", "Virtual Network Computing (remote desktop)", ("5900/tcp",)),
    ("Deluge", "Deluge BitTorrent client", ("6881/tcp", "6881/udp")),
    ("Prometheus", "Prometheus monitoring", ("9090/tcp",)),
    ("Grafana", "Grafana dashboards", ("3000/tcp",)),
    ("RabbitMQ", "RabbitMQ message broker", ("5672,15672/tcp",)),
    ("Mosquitto", "Mosquitto MQTT broker", ("1883,8883/tcp",)),
)


def installable_profiles(installed_names: Iterable[str]) -> list[UfwProfile]:
    """Built-in profiles whose names are not among ``installed_names``."""
    installed = set(installed_names)
    return [
        UfwProfile(name=name, title=title, ports=ports)
        for name, title, ports in _CATALOG
        if name not in installed
    ]