"""Tests for configuration loading, validation and path resolution."""

import re
from pathlib import Path
from typing import Any, Callable

import pytest

from switch_craft.config import ConfigError, get_config_path, load_config, validate_config
from switch_craft.core import (
    ProjectPathError,
    path_status,
    resolve_project_path,
    validate_project_path,
)


def _config(**overrides: Any) -> dict:
    data = {"projectsDir": "/home/u/work", "projects": [{"name": "api", "path": "services/api"}]}
    data.update(overrides)
    return data


def test_load_json_config(write_config: Callable[..., Path]) -> None:
    write_config(_config(
        projects=[{
            "name": "  api  ",
            "path": "services/api",
            "kubectx": "prod",
            "env": {"B": "2", "A": "1"},
        }],
        icons={"k8s": "⎈", "unknown": "?"},
    ))
    config = load_config()
    assert config.projects_dir == Path("/home/u/work")
    project = config.projects[0]
    assert project.name == "api"
    assert project.kubectx == "prod"
    assert project.gcloud is None
    assert list(project.env.items()) == [("B", "2"), ("A", "1")]
    assert dict(config.icons) == {"k8s": "⎈"}


def test_project_env_is_read_only(write_config: Callable[..., Path]) -> None:
    write_config(_config(projects=[{"name": "api", "path": "x", "env": {"A": "1"}}]))
    project = load_config().projects[0]
    with pytest.raises(TypeError):
        project.env["A"] = "2"  # type: ignore[index]


def test_load_yaml_config(write_config: Callable[..., Path]) -> None:
    write_config(
        "projectsDir: /srv\nprojects:\n  - name: web\n    path: web\n    aws: dev\n",
        name="config.yaml",
    )
    config = load_config()
    assert config.projects[0].aws == "dev"
    assert config.projects_dir == Path("/srv")


def test_missing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SWITCH_CRAFT_CONFIG", str(tmp_path / "nope.json"))
    with pytest.raises(ConfigError, match="Configuration file not found"):
        load_config()


def test_invalid_json(write_config: Callable[..., Path]) -> None:
    write_config("{not json")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_config()


def test_projects_dir_env_override(
    write_config: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
) -> None:
    write_config(_config())
    monkeypatch.setenv("SWITCH_CRAFT_PROJECTS_DIR", "/override")
    assert load_config().projects_dir == Path("/override")


def test_projects_dir_tilde_is_expanded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert validate_config(_config(projectsDir="~/code")).projects_dir == tmp_path / "code"


def test_projects_dir_tilde_user_is_relative_to_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """``~name`` is read as a directory under the current home, not another account."""
    monkeypatch.setenv("HOME", str(tmp_path))
    raw = _config(projectsDir="~nosuchuserxyz/work")
    assert validate_config(raw).projects_dir == tmp_path / "nosuchuserxyz" / "work"
    monkeypatch.setenv("SWITCH_CRAFT_PROJECTS_DIR", "~nosuchuserxyz")
    assert validate_config(raw).projects_dir == tmp_path / "nosuchuserxyz"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ([], "must be a JSON object"),
        ({"projects": []}, 'Missing "projectsDir"'),
        ({"projectsDir": "/w"}, 'invalid "projects" array'),
        ({"projectsDir": "/w", "projects": ["api"]}, "index 0 must be an object"),
        ({"projectsDir": "/w", "projects": [{"path": "x"}]}, 'non-empty "name"'),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": " "}]}, 'non-empty "path"'),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "kubectx": 1}]},
         '"kubectx" must be a string'),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "env": []}]},
         '"env" must be an object'),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "env": {"A": 1}}]},
         'env value for "A" must be a string'),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "env": {"A;rm": "1"}}]},
         "invalid environment variable name"),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "env": {"A\n": "1"}}]},
         "invalid environment variable name"),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "env": None}]},
         '"env" must be an object'),
        ({"projectsDir": "/w", "projects": [{"name": "a", "path": "x", "kubectx": None}]},
         '"kubectx" must be a string'),
        ({"projectsDir": "/w", "projects": [], "icons": None}, '"icons" must be an object'),
        ({"projectsDir": "/w", "projects": [], "icons": []}, '"icons" must be an object'),
        ({"projectsDir": "/w", "projects": [], "icons": {"aws": 1}}, 'Icon "aws" must be a string'),
    ],
)
def test_validation_errors(raw: Any, message: str) -> None:
    with pytest.raises(ConfigError, match=re.escape(message)):
        validate_config(raw)


def test_default_config_path_prefers_json(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("switch_craft.config.user_config_dir", lambda app: str(tmp_path))
    assert get_config_path() == tmp_path / "config.json"
    (tmp_path / "config.yml").write_text("projects: []\n", encoding="utf-8")
    assert get_config_path() == tmp_path / "config.yml"
    (tmp_path / "config.json").write_text("{}", encoding="utf-8")
    assert get_config_path() == tmp_path / "config.json"


def test_resolve_project_path() -> None:
    assert resolve_project_path("/home/u/work", "services/api") == Path("/home/u/work/services/api")
    assert resolve_project_path("/home/u/work", "/opt/app") == Path("/opt/app")
    assert resolve_project_path("/home/u/work", "../other") == Path("/home/u/other")


def test_resolve_project_path_tilde(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolve_project_path("/w", "~/code/api") == tmp_path / "code" / "api"
    assert resolve_project_path("/w", "~") == tmp_path


def test_validate_project_path(tmp_path: Path) -> None:
    validate_project_path(tmp_path, "ok")
    with pytest.raises(ProjectPathError, match="does not exist"):
        validate_project_path(tmp_path / "missing", "api")
    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(ProjectPathError, match="is not a directory"):
        validate_project_path(file_path, "api")
    assert path_status(tmp_path) == ""
    assert path_status(tmp_path / "missing") == "path not found"
    assert path_status(file_path) == "not a directory"
