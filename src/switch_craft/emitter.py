"""Project emitter: turns a selected project into a shell script body.

The output is a newline-joined list of commands for the calling shell to evaluate.
Order matters and is fixed:

1. banner and info table
2. venv deactivate (so the previous interpreter never leaks)
3. kubernetes, gcloud, aws: activate when configured, otherwise deactivate
4. azure clear (there is no activate)
5. custom env vars in declared order
6. venv activate, last of the environment actions
7. ``cd`` to the project, always the final line

Steps 2-6 are skipped with ``no_env``.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, NamedTuple
import logging

from .core import EmitRequest
from .integrations import IntegrationRegistry
from .shells import BOLD, DIM, RAINBOW, RESET, WHITE, Dialect, hex_to_ansi, syntax_for

logger = logging.getLogger(__name__)

TOGGLED = ("k8s", "gcp", "aws")
RESET_ORDER = ("venv", "k8s", "gcp", "aws", "azure")


class TableRow(NamedTuple):
    label: str
    value: str
    color_key: str


class ProjectEmitter:
    def __init__(self, dialect: Dialect, registry: IntegrationRegistry):
        self.dialect = dialect
        self.shell = syntax_for(dialect)
        self.registry = registry

    def emit(self, request: EmitRequest) -> str:
        project = request.project
        lines: List[str] = []
        lines.extend(self._banner(project.name))
        lines.extend(self._table(request))

        if not request.no_env:
            venv = self.registry["venv"]
            lines.extend(venv.deactivate(self.shell))

            for key in TOGGLED:
                integration = self.registry[key]
                value = getattr(project, integration.field)
                if value:
                    lines.extend(integration.activate(self.shell, value))
                else:
                    lines.extend(integration.deactivate(self.shell))

            lines.extend(self.registry["azure"].deactivate(self.shell))

            for key, value in project.env.items():
                lines.append(self.shell.set_env(key, value))

            if project.venv:
                lines.extend(venv.activate(self.shell, project.venv))

        lines.extend(self.registry["path"].activate(self.shell, str(request.full_path)))
        logger.debug(f"Emitted {len(lines)} {self.dialect.value} lines for {project.name}")
        return "\n".join(lines)

    def emit_reset(self, projects_dir: Path | str) -> str:
        lines = [
            self.shell.echo(""),
            self.shell.echo_colored("  RESET", "yellow"),
            self.shell.echo(""),
        ]
        for key in RESET_ORDER:
            lines.extend(self.registry[key].deactivate(self.shell))
        lines.extend(self.registry["path"].activate(self.shell, str(projects_dir)))
        return "\n".join(lines)

    # ---------- banner ----------
    def _banner(self, name: str) -> List[str]:
        if self.dialect is Dialect.SH:
            return self._rainbow_banner(name)
        return [
            self.shell.echo(""),
            self.shell.echo_colored(f"  Switched to {name}...", "cyan"),
            self.shell.echo(""),
        ]

    def _rainbow_banner(self, name: str) -> List[str]:
        colored = rainbow(name) + RESET
        return [
            self.shell.echo(""),
            self.shell.echo(f"  {DIM}Switched to{RESET} {BOLD}{colored}{RESET}{DIM}...{RESET}"),
            self.shell.echo(""),
        ]

    # ---------- info table ----------
    def _table(self, request: EmitRequest) -> List[str]:
        project = request.project
        rows = [TableRow("path", str(request.full_path), "path")]
        if not request.no_env:
            for integration, value in self.registry.project_integrations(project):
                rows.append(TableRow(integration.label, value, integration.key))
            for key, value in project.env.items():
                rows.append(TableRow(f"${key}", value, key))

        if self.dialect is Dialect.SH:
            return self._box_table(rows)
        return self._simple_table(rows)

    def _box_table(self, rows: List[TableRow]) -> List[str]:
        max_label = max([len(r.label) for r in rows] + [6])
        max_value = max([len(r.value) for r in rows] + [10])
        width = max_label + max_value + 3

        lines = [self.shell.echo(f"  {WHITE}┌{'─' * width}┐{RESET}")]
        for row in rows:
            color = hex_to_ansi(self.registry.color(row.color_key))
            lines.append(self.shell.echo(
                f"  {WHITE}│{RESET} {color}{row.label.ljust(max_label)}{RESET} "
                f"{DIM}{row.value.ljust(max_value)}{RESET} {WHITE}│{RESET}"
            ))
        lines.append(self.shell.echo(f"  {WHITE}└{'─' * width}┘{RESET}"))
        lines.append(self.shell.echo(""))
        return lines

    def _simple_table(self, rows: List[TableRow]) -> List[str]:
        max_label = max([len(r.label) for r in rows] + [8])
        q = self.shell.escape
        lines = []
        for row in rows:
            label = row.label.ljust(max_label)
            if self.dialect is Dialect.FISH:
                lines.append(
                    f"set_color brblack; printf '│ '; set_color cyan; printf '%s' {q(label)}; "
                    f"set_color normal; printf ' '; set_color green; printf '%s\\n' {q(row.value)}; "
                    f"set_color normal"
                )
            else:
                lines.append(
                    f"Write-Host '│ ' -ForegroundColor DarkGray -NoNewline; "
                    f"Write-Host {q(label)} -ForegroundColor Cyan -NoNewline; "
                    f"Write-Host ' ' -NoNewline; "
                    f"Write-Host {q(row.value)} -ForegroundColor Green"
                )
        return lines


def rainbow(text: str, offset: int = 0) -> str:
    """Colour each character by its distance from the centre of ``text``."""
    mid = len(text) // 2
    return "".join(
        f"{hex_to_ansi(rainbow_color(i, mid, offset))}{ch}" for i, ch in enumerate(text)
    )


def rainbow_color(index: int, mid: int, offset: int = 0) -> str:
    return RAINBOW[(abs(index - mid) - offset) % len(RAINBOW)]
