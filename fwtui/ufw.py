"""Running shell commands and the ufw invocations built on them."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

RULES_DIR = Path("/etc/ufw")


def run_command(command: str) -> str:
    """Run ``command`` through bash and return its combined output.

    On failure the output is prefixed with an ``Error:`` line.
    """
    try:
        completed = subprocess.run(
            ["bash", "-c", command],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as exc:
        return f"Error: {exc}\n"
    output = (completed.stdout or b"").decode(errors="replace")
    code = completed.returncode
    if code != 0:
        reason = f"exit status {code}" if code > 0 else f"signal: {-code}"
        return f"Error: {reason}\n{output}"
    return output


def status_verbose() -> str:
    return run_command("sudo ufw status verbose")


def status_numbered() -> str:
    return run_command("sudo ufw status numbered")


def reset() -> str:
    return run_command("yes | sudo ufw reset")


def enable() -> str:
    return run_command("sudo ufw enable")


def disable() -> str:
    return run_command("sudo ufw disable")


def enable_logging() -> str:
    return run_command("sudo ufw logging on")


def disable_logging() -> str:
    return run_command("sudo ufw logging off")


def delete_rule_by_number(number: int) -> str:
    return run_command(f"yes | sudo ufw delete {number}")


def load_profile(name: str) -> str:
    return run_command(f'sudo ufw app update "{name}"')


def get_profile_info(name: str) -> str:
    return run_command(f'sudo ufw app info "{name}"')


def get_profile_list() -> str:
    return run_command("sudo ufw app list")


def allow_profile(name: str) -> str:
    return run_command(f'sudo ufw allow "{name}"')


def set_default_policy(direction: str, action: str) -> str:
    return run_command(f"sudo ufw default {action} {direction}")


def build_export_script(rules_v4: str, rules_v6: str) -> str:
    """Return a bash script that restores the given rule files and reloads ufw."""
    return (
        "#!/bin/bash\n"
        "set -e\n"
        "\n"
        'echo "Restoring UFW rules..."\n'
        "\n"
        "cat <<'EOF' > /etc/ufw/user.rules\n"
        f"{rules_v4}\n"
        "EOF\n"
        "\n"
        "cat <<'EOF' > /etc/ufw/user6.rules\n"
        f"{rules_v6}\n"
        "EOF\n"
        "\n"
        "ufw --force reload\n"
        'echo "UFW rules restored."\n'
    )


def export_current_state(script_path: str | os.PathLike[str], rules_dir: str | os.PathLike[str] = RULES_DIR) -> None:
    """Write an executable restore script for the rules found in ``rules_dir``.

    Raises OSError when a rules file cannot be read or the script cannot be written.
    """
    rules_path = Path(rules_dir)
    contents = []
    for name in ("user.rules", "user6.rules"):
        try:
            contents.append((rules_path / name).read_text())
        except OSError as exc:
            raise OSError(f"reading {name}: {exc}") from exc

    script = build_export_script(*contents)
    target = Path(script_path)
    try:
        target.write_text(script)
        target.chmod(0o755)
    except OSError as exc:
        raise OSError(f"writing export script: {exc}") from exc