from __future__ import annotations
from contextlib import contextmanager
import logging
import sys
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import load_config
from .core import (
    Config, EmitRequest, Project, ProjectNotFoundError, SwitchCraftError,
    path_status, resolve_project_path, validate_project_path,
)
from .emitter import ProjectEmitter
from .integrations import IntegrationRegistry, build_registry
from .matching import find_project
from .selector import select_project
from .shells import Dialect
from .wrapper import generate_shell_function

app = typer.Typer(
    help="""switch-craft - Cross-shell project switcher with environment management.

switch-craft prints shell commands that move your session into a project:
• Change to the project directory
• Switch Kubernetes context, GCloud configuration and AWS profile
• Clear the Azure account and activate the project's virtualenv
• Export the project's custom environment variables

Your shell evaluates the output, so install the wrapper functions first:
  switch-craft init sh >> ~/.bashrc

Examples:
  switch-craft go sh myproject      # Script for bash/zsh
  switch-craft go fish              # Pick a project interactively
  switch-craft reset pwsh           # Deactivate everything, cd to projects dir
  switch-craft list                 # Show configured projects

Configuration:
  ~/.config/switch-craft/config.json (override with SWITCH_CRAFT_CONFIG)
  SWITCH_CRAFT_PROJECTS_DIR overrides the base projects directory.
""",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

SHELL_HELP = "Target shell: sh (bash/zsh), fish or pwsh"
NO_ENV_HELP = "Only change directory, skip all environment changes"


# ---------- helpers ----------
def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]switch-craft:[/] {escape(message)}", highlight=False, soft_wrap=True)
    raise typer.Exit(1)


@contextmanager
def _user_errors():
    try:
        yield
    except SwitchCraftError as e:
        _fail(str(e))


def _dialect(shell: Optional[str]) -> Dialect:
    if not shell:
        _fail("Missing shell type. Must be one of: sh, fish, pwsh")
    try:
        return Dialect.parse(shell)
    except ValueError as e:
        _fail(str(e))


def _lookup(config: Config, name: str) -> Project:
    project = find_project(config.projects, name)
    if project is None:
        raise ProjectNotFoundError(name, config.names)
    return project


def _is_tty() -> bool:
    return sys.stdin.isatty()


def _interactive(
    config: Config,
    registry: IntegrationRegistry,
    dialect: Dialect = Dialect.SH,
    no_env: bool = False,
) -> Project:
    if not _is_tty():
        _fail('Interactive mode requires a TTY. Use "switch-craft list" to see projects.')
    if not config.projects:
        _fail("No projects configured.")
    project = select_project(
        config.projects,
        projects_dir=config.projects_dir,
        registry=registry,
        dialect=dialect,
        no_env=no_env,
        icons=config.icons,
    )
    if project is None:
        raise typer.Exit(130)
    return project


def _resolve(config: Config, project: Project):
    full_path = resolve_project_path(config.projects_dir, project.path)
    validate_project_path(full_path, project.name)
    return full_path


def _switch(shell: Optional[str], name: Optional[str], no_env: bool) -> None:
    dialect = _dialect(shell)
    registry = build_registry()
    with _user_errors():
        config = load_config()
        if name is None:
            project = _interactive(config, registry, dialect, no_env)
        else:
            project = _lookup(config, name)
        full_path = _resolve(config, project)
        script = ProjectEmitter(dialect, registry).emit(
            EmitRequest(project=project, full_path=full_path, no_env=no_env)
        )
    logger.debug(f"Switching to {project.name} at {full_path}")
    typer.echo(script)


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"switch-craft {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True,
        help="Show version and exit",
    ),
    debug: bool = typer.Option(
        False, "--debug", envvar="SWITCH_CRAFT_DEBUG", help="Log debug details to stderr",
    ),
):
    if debug:
        _setup_logging()


# ---------- commands ----------
@app.command("go")
def go(
    shell: Optional[str] = typer.Argument(None, help=SHELL_HELP),
    name: Optional[str] = typer.Argument(None, help="Project name (fuzzy matched)"),
    no_env: bool = typer.Option(False, "--no-env", help=NO_ENV_HELP),
):
    """Switch to a project.

    Prints the script that activates the project's integrations and
    changes into its directory. Without a name an interactive picker
    opens.

    Examples:
      switch-craft go sh api         # Exact or fuzzy match on "api"
      switch-craft go fish           # Pick interactively
      switch-craft go pwsh api --no-env
    """
    _switch(shell, name, no_env)


@app.command("select")
def select(
    shell: Optional[str] = typer.Argument(None, help=SHELL_HELP),
    no_env: bool = typer.Option(False, "--no-env", help=NO_ENV_HELP),
):
    """Pick a project with the interactive fuzzy selector."""
    _switch(shell, None, no_env)


@app.command("reset")
def reset(shell: Optional[str] = typer.Argument(None, help=SHELL_HELP)):
    """Deactivate every integration and go to the projects directory."""
    dialect = _dialect(shell)
    with _user_errors():
        config = load_config()
    typer.echo(ProjectEmitter(dialect, build_registry()).emit_reset(config.projects_dir))


@app.command("path")
def path(name: Optional[str] = typer.Argument(None, help="Project name (fuzzy matched)")):
    """Print a project's directory.

    Examples:
      switch-craft path api          # /home/me/work/services/api
      cd "$(switch-craft path api)"
    """
    with _user_errors():
        config = load_config()
        if name is None:
            project = _interactive(config, build_registry())
        else:
            project = _lookup(config, name)
        full_path = _resolve(config, project)
    typer.echo(str(full_path))


@app.command("list")
def list_projects():
    """List configured projects and flag missing directories."""
    with _user_errors():
        config = load_config()
    if not config.projects:
        console.print("No projects configured.")
        return
    for project in config.projects:
        status = path_status(resolve_project_path(config.projects_dir, project.path))
        suffix = f"[dim] ({status})[/]" if status else ""
        console.print(f"{escape(project.name)}{suffix}", highlight=False, soft_wrap=True)


@app.command("init")
def init(shell: Optional[str] = typer.Argument(None, help=SHELL_HELP)):
    """Print the shell functions to add to your profile.

    Examples:
      switch-craft init sh >> ~/.bashrc
      switch-craft init fish >> ~/.config/fish/config.fish
      switch-craft init pwsh >> $PROFILE
    """
    typer.echo(generate_shell_function(_dialect(shell)))
