# fwtui

A keyboard-driven terminal interface for the UFW firewall on Linux, built on
the standard library's `curses`.

From a single menu you can:

- enable or disable the firewall, and turn logging on or off;
- set the default policies for incoming, outgoing and routed traffic;
- create a rule: port or port range, protocol (`tcp/udp`, `tcp`, `udp`),
  action (`allow`, `deny`, `reject`), direction (`in`, `out`), an optional
  source address and interface for incoming rules or destination address for
  outgoing ones, and an optional comment;
- delete the focused rule, or several selected rules at once;
- manage application profiles: list installed profiles and allow them, install
  profiles from a built-in catalogue (OpenSSH, HTTP, PostgreSQL, WireGuard,
  Samba, ...), delete them, or write your own;
- export the current rule set to an executable `ufw_import.sh` restore script
  in the working directory;
- reset UFW to its initial state (after a confirmation).

All changes are made by running `ufw` through `sudo` in `bash`.

## Requirements

- Linux with `ufw`, `sudo` and `bash` installed
- root privileges: the program prints a message and exits otherwise
- Python 3.10 or later

## Installation

```
pip install .
```

## Usage

```
sudo fwtui
```

`fwtui` takes no options besides `--help`. Before starting it checks that
`sudo ufw status` succeeds.

### Keys

| Key                    | Action                                                  |
|------------------------|---------------------------------------------------------|
| Up / Down              | move the focus                                          |
| k / j                  | move the focus in menus and lists (not in forms)        |
| Left / Right           | change the value of a choice field                      |
| Enter                  | choose, submit or apply                                 |
| Space                  | select or deselect an entry in a list                   |
| d                      | delete the focused or selected rules or profiles        |
| Delete                 | delete profiles in the installed-profiles list          |
| Backspace              | remove the last character of a text field               |
| Esc                    | go back                                                 |
| Ctrl+C, Ctrl+D, Ctrl+Q | quit                                                    |

Output from `ufw` and error messages appear beneath the current screen for ten
seconds.

### Profiles

Profiles are written as `<name>.profile` files in `/etc/ufw/applications.d/`
and loaded with `ufw app update`. A port specification such as
`80,443/tcp|53/udp` is checked before writing: groups are separated by `|`,
ports by `,`, an optional protocol (`tcp` or `udp`) follows `/`, and a range
`start:end` needs a protocol.

### Exported rules

The export writes `ufw_import.sh`, a script that overwrites
`/etc/ufw/user.rules` and `/etc/ufw/user6.rules` with their current contents
and runs `ufw --force reload`. Running it replaces your firewall state at that
time, so read it before you run it.

## Using it from Python

The screens are plain objects that take messages and return commands, so they
can be driven without a terminal:

- `fwtui.app.App` with `update(msg)` and `view()`, and `fwtui.app.run(app)` to
  drive it in the terminal;
- `fwtui.createrule.RuleForm.build_command()` returns the `ufw` command line
  for a form, or raises `RuleError`;
- `fwtui.defaultpolicies.parse_ufw_defaults(status)` reads the default
  policies from `ufw status verbose` output;
- `fwtui.createprofile.validate_ports(text)` checks a port specification;
- `fwtui.ufw` holds one function per `ufw` invocation, plus
  `build_export_script` and `export_current_state`.

## What it does not do

- It does not edit or reorder existing rules; they can only be deleted.
- Deleting several rules at once does not show `ufw`'s output.
- There is no import command: the exported script is run by hand.

## Development

```
pip install -e ".[test]"
pytest
```