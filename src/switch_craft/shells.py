"""Shell dialect adapter.

Every function here is pure: it takes semantic values and returns one line of text in
the target dialect. Dialects are a tag (:class:`Dialect`) dispatched through the
:data:`SYNTAX` table, so each dialect's quoting, colour and guard rules live together
in one block of small functions.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict
import re

SAFE_VALUE = re.compile(r"^[a-zA-Z0-9_/.-]+$")

ESC = "\x1b"
RESET = f"{ESC}[0m"
BOLD = f"{ESC}[1m"
DIM = f"{ESC}[2m"
WHITE = f"{ESC}[97m"

# Shared by the posix banner, posix colour names and the interactive selector.
PALETTE: Dict[str, str] = {
    "red": "#FF3232",
    "orange": "#FF9600",
    "yellow": "#FFFF00",
    "green": "#32FF64",
    "cyan": "#00FFFF",
    "blue": "#5096FF",
    "purple": "#B464FF",
    "magenta": "#FF64FF",
}
RAINBOW = tuple(PALETTE.values())


class Dialect(str, Enum):
    SH = "sh"
    FISH = "fish"
    PWSH = "pwsh"

    @classmethod
    def parse(cls, value: str) -> "Dialect":
        key = value.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise ValueError(f'Invalid shell type "{value}". Must be one of: {choices}') from None


_ALIASES = {"bash": "sh", "zsh": "sh", "powershell": "pwsh"}


def hex_to_ansi(hex_color: str) -> str:
    """``#RRGGBB`` -> 24-bit foreground escape sequence."""
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    return f"{ESC}[38;2;{r};{g};{b}m"


@dataclass(frozen=True)
class ShellSyntax:
    dialect: Dialect
    escape: Callable[[str], str]
    echo: Callable[[str], str]
    echo_colored: Callable[[str, str], str]
    set_env: Callable[[str, str], str]
    unset_env: Callable[[str], str]
    cd: Callable[[str], str]
    if_command_exists: Callable[[str, str], str]
    source_file: Callable[[str], str]
    file_exists: Callable[[str, str], str]
    silence: Callable[..., str]


# ---------- posix (bash/zsh) ----------
_SH_COLORS = {
    "bold": BOLD,
    "dim": DIM,
    "white": WHITE,
    **{name: hex_to_ansi(value) for name, value in PALETTE.items()},
}


def _sh_escape(value: str) -> str:
    if SAFE_VALUE.fullmatch(value):
        return value
    return "'" + value.replace("'", "'\\''") + "'"


def _sh_echo_text(text: str) -> str:
    # Inside "..." for `echo -e`: backslashes survive both the shell and echo -e.
    out = text.replace("\\", "\\\\\\\\")
    for ch in ('"', "$", "`"):
        out = out.replace(ch, "\\" + ch)
    return out.replace(ESC, "\\033")


def _sh_echo(text: str) -> str:
    return f'echo -e "{_sh_echo_text(text)}"'


def _sh_echo_colored(text: str, color: str) -> str:
    return _sh_echo(f"{_SH_COLORS.get(color, '')}{text}{RESET}")


def _sh_silence(command: str, stdout: bool = True, stderr: bool = True) -> str:
    if stdout and stderr:
        return f"{command} >/dev/null 2>&1"
    if stdout:
        return f"{command} >/dev/null"
    if stderr:
        return f"{command} 2>/dev/null"
    return command


SH = ShellSyntax(
    dialect=Dialect.SH,
    escape=_sh_escape,
    echo=_sh_echo,
    echo_colored=_sh_echo_colored,
    set_env=lambda key, value: f"export {key}={_sh_escape(value)}",
    unset_env=lambda key: f"unset {key}",
    cd=lambda path: f"cd {_sh_escape(path)}",
    if_command_exists=lambda cmd, then: f"command -v {cmd} >/dev/null 2>&1 && {then}",
    source_file=lambda path: f"source {_sh_escape(path)}",
    file_exists=lambda path, then: f"[ -f {_sh_escape(path)} ] && {then}",
    silence=_sh_silence,
)


# ---------- fish ----------
_FISH_COLORS = {
    "red": "red",
    "yellow": "yellow",
    "green": "green",
    "cyan": "cyan",
    "blue": "blue",
    "magenta": "magenta",
    "white": "white",
    "dim": "brblack",
}


def _fish_escape(value: str) -> str:
    if SAFE_VALUE.fullmatch(value):
        return value
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _fish_echo_colored(text: str, color: str) -> str:
    c = _FISH_COLORS.get(color, "normal")
    return f"set_color {c}; echo {_fish_escape(text)}; set_color normal"


FISH = ShellSyntax(
    dialect=Dialect.FISH,
    escape=_fish_escape,
    echo=lambda text: f"echo {_fish_escape(text)}",
    echo_colored=_fish_echo_colored,
    set_env=lambda key, value: f"set -gx {key} {_fish_escape(value)}",
    unset_env=lambda key: f"set -e {key} 2>/dev/null",
    cd=lambda path: f"cd {_fish_escape(path)}",
    if_command_exists=lambda cmd, then: f"command -q {cmd}; and {then}",
    source_file=lambda path: f"source {_fish_escape(path)}",
    file_exists=lambda path, then: f"test -f {_fish_escape(path)}; and {then}",
    silence=_sh_silence,
)


# ---------- PowerShell ----------
_PWSH_COLORS = {
    "red": "Red",
    "yellow": "Yellow",
    "green": "Green",
    "cyan": "Cyan",
    "blue": "Blue",
    "magenta": "Magenta",
    "white": "White",
    "dim": "DarkGray",
}
# PowerShell also closes single-quoted strings on the typographic quotes.
_PWSH_QUOTES = re.compile("(['‘’‚‛])")


def _pwsh_escape(value: str) -> str:
    # Always quoted: a bare word after `$env:X =` would be run as a command.
    return "'" + _PWSH_QUOTES.sub(r"\1\1", value) + "'"


def _pwsh_echo_colored(text: str, color: str) -> str:
    c = _PWSH_COLORS.get(color, "White")
    return f"Write-Host {_pwsh_escape(text)} -ForegroundColor {c}"


def _pwsh_silence(command: str, stdout: bool = True, stderr: bool = True) -> str:
    if stdout and stderr:
        return f"{command} *> $null"
    if stdout:
        return f"{command} > $null"
    if stderr:
        return f"{command} 2> $null"
    return command


PWSH = ShellSyntax(
    dialect=Dialect.PWSH,
    escape=_pwsh_escape,
    echo=lambda text: f"Write-Host {_pwsh_escape(text)}",
    echo_colored=_pwsh_echo_colored,
    set_env=lambda key, value: f"$env:{key} = {_pwsh_escape(value)}",
    unset_env=lambda key: f"Remove-Item Env:{key} -ErrorAction SilentlyContinue",
    cd=lambda path: f"Set-Location -LiteralPath {_pwsh_escape(path)}",
    if_command_exists=lambda cmd, then: (
        f"if (Get-Command {cmd} -ErrorAction SilentlyContinue) {{ {then} }}"
    ),
    source_file=lambda path: f". {_pwsh_escape(path)}",
    file_exists=lambda path, then: f"if (Test-Path {_pwsh_escape(path)}) {{ {then} }}",
    silence=_pwsh_silence,
)


SYNTAX: Dict[Dialect, ShellSyntax] = {
    Dialect.SH: SH,
    Dialect.FISH: FISH,
    Dialect.PWSH: PWSH,
}


def syntax_for(dialect: Dialect | str) -> ShellSyntax:
    if not isinstance(dialect, Dialect):
        dialect = Dialect.parse(dialect)
    return SYNTAX[dialect]
