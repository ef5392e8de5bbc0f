from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple
import os


class SwitchCraftError(Exception):
    """Base class for errors reported to the user before any script is emitted."""


class ProjectNotFoundError(SwitchCraftError):
    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f'Project "{name}" not found. Available: {", ".join(available)}')


class ProjectPathError(SwitchCraftError):
    pass


@dataclass(frozen=True)
class Project:
    name: str
    path: str
    env: Mapping[str, str] = field(default_factory=dict)
    kubectx: Optional[str] = None
    gcloud: Optional[str] = None
    aws: Optional[str] = None
    azure: Optional[str] = None
    venv: Optional[str] = None

    def __post_init__(self) -> None:
        # keep insertion order, refuse mutation
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))


@dataclass(frozen=True)
class Config:
    projects_dir: Path
    projects: Tuple[Project, ...]
    icons: Mapping[str, str] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.projects]


@dataclass(frozen=True)
class EmitRequest:
    project: Project
    full_path: Path
    no_env: bool = False


def expand_home(path: str) -> str:
    """Anchor a ``~``-prefixed path at the current user's home directory.

    Everything after the ``~`` is taken as relative to home, so ``~name`` never looks
    up another user's account.
    """
    if not path.startswith("~"):
        return path
    return os.path.join(Path.home(), path[1:].lstrip("/\\"))


def resolve_project_path(projects_dir: Path | str, project_path: str) -> Path:
    """Resolve a configured project path to an absolute path.

    Absolute paths are used as-is, ``~`` paths are anchored at the home directory and
    everything else is relative to ``projects_dir``. Never touches the filesystem.
    """
    if os.path.isabs(project_path):
        return Path(os.path.normpath(project_path))
    if project_path.startswith("~"):
        return Path(os.path.normpath(expand_home(project_path)))
    return Path(os.path.normpath(os.path.join(projects_dir, project_path)))


def validate_project_path(path: Path, project_name: str) -> None:
    if not path.exists():
        raise ProjectPathError(f'Project "{project_name}" path does not exist: {path}')
    if not path.is_dir():
        raise ProjectPathError(f'Project "{project_name}" path is not a directory: {path}')


def path_status(path: Path) -> str:
    """Short status suffix used by ``switch-craft list``."""
    if not path.exists():
        return "path not found"
    if not path.is_dir():
        return "not a directory"
    return ""
