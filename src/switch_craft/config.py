from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import os
import re
import yaml
from platformdirs import user_config_dir

from .core import Config, Project, SwitchCraftError, expand_home

APP_NAME = "switch-craft"
CONFIG_ENV = "SWITCH_CRAFT_CONFIG"
PROJECTS_DIR_ENV = "SWITCH_CRAFT_PROJECTS_DIR"

OPTIONAL_FIELDS = ("kubectx", "gcloud", "aws", "azure", "venv")
ICON_KEYS = ("k8s", "gcp", "aws", "azure", "venv", "path")
ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

logger = logging.getLogger(__name__)


class ConfigError(SwitchCraftError):
    pass


@dataclass
class Paths:
    config_dir: Path
    config_file: Path


def get_paths() -> Paths:
    cfg = Path(user_config_dir(APP_NAME))
    return Paths(config_dir=cfg, config_file=cfg / "config.json")


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    paths = get_paths()
    if not paths.config_file.exists():
        for name in ("config.yaml", "config.yml"):
            candidate = paths.config_dir / name
            if candidate.exists():
                return candidate
    return paths.config_file


def load_config(path: Optional[Path] = None) -> Config:
    p = path or get_config_path()
    logger.debug(f"Loading configuration from {p}")
    if not p.exists():
        raise ConfigError(
            f"Configuration file not found: {p}\n"
            f"Create a config file or set {CONFIG_ENV} environment variable."
        )
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file: {p}") from e

    if p.suffix.lower() in (".yaml", ".yml"):
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file: {p}") from e
    else:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file: {p}") from e

    return validate_config(raw, p)


def validate_config(raw: Any, config_path: Path | str = "<config>") -> Config:
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration must be a JSON object: {config_path}")

    projects_dir = os.environ.get(PROJECTS_DIR_ENV) or raw.get("projectsDir")
    if not isinstance(projects_dir, str) or not projects_dir:
        raise ConfigError(
            f'Missing "projectsDir" in config or {PROJECTS_DIR_ENV} environment variable'
        )
    base = Path(expand_home(projects_dir))
    if not base.is_absolute():
        base = Path(os.path.abspath(base))

    if not isinstance(raw.get("projects"), list):
        raise ConfigError('Missing or invalid "projects" array in configuration')
    projects = tuple(_validate_project(p, i) for i, p in enumerate(raw["projects"]))

    return Config(projects_dir=base, projects=projects, icons=_validate_icons(raw))


def _validate_icons(config: Dict[str, Any]) -> Dict[str, str]:
    if "icons" not in config:
        return {}
    raw = config["icons"]
    if not isinstance(raw, dict):
        raise ConfigError('"icons" must be an object')
    icons: Dict[str, str] = {}
    for key in ICON_KEYS:
        if key in raw:
            if not isinstance(raw[key], str):
                raise ConfigError(f'Icon "{key}" must be a string')
            icons[key] = raw[key]
    return icons


def _validate_project(raw: Any, index: int) -> Project:
    if not isinstance(raw, dict):
        raise ConfigError(f"Project at index {index} must be an object")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f'Project at index {index} must have a non-empty "name" string')
    path = raw.get("path")
    if not isinstance(path, str) or not path.strip():
        raise ConfigError(f'Project at index {index} must have a non-empty "path" string')
    name = name.strip()

    env: Dict[str, str] = {}
    if "env" in raw:
        if not isinstance(raw["env"], dict):
            raise ConfigError(f'Project "{name}": "env" must be an object')
        for key, value in raw["env"].items():
            if not isinstance(value, str):
                raise ConfigError(f'Project "{name}": env value for "{key}" must be a string')
            if not ENV_NAME_RE.fullmatch(str(key)):
                raise ConfigError(f'Project "{name}": invalid environment variable name "{key}"')
            env[key] = value

    fields: Dict[str, str] = {}
    for key in OPTIONAL_FIELDS:
        if key in raw:
            if not isinstance(raw[key], str):
                raise ConfigError(f'Project "{name}": "{key}" must be a string')
            fields[key] = raw[key]

    return Project(name=name, path=path.strip(), env=env, **fields)
