[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fwtui"
version = "0.1.0"
description = "A terminal user interface for managing the UFW firewall"
requires-python = ">=3.10"
dependencies = []
keywords = ["ufw", "firewall", "tui", "terminal", "curses"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Firewalls",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fwtui = "fwtui.app:main"

[tool.hatch.build.targets.wheel]
packages = ["fwtui"]

[tool.pytest.ini_options]
addopts = "-ra"
