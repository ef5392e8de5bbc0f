import json
from pathlib import Path
from typing import Any, Callable

import pytest

from switch_craft.core import Project
from switch_craft.integrations import IntegrationRegistry, build_registry


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SWITCH_CRAFT_CONFIG", raising=False)
    monkeypatch.delenv("SWITCH_CRAFT_PROJECTS_DIR", raising=False)
    monkeypatch.delenv("SWITCH_CRAFT_DEBUG", raising=False)


@pytest.fixture
def registry() -> IntegrationRegistry:
    return build_registry()


@pytest.fixture
def full_project() -> Project:
    return Project(
        name="api",
        path="services/api",
        env={"API_URL": "http://localhost:8080", "DEBUG": "1"},
        kubectx="prod",
        gcloud="work",
        aws="staging",
        azure="corp",
        venv=".venv",
    )


@pytest.fixture
def write_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[..., Path]:
    """Write a JSON config under tmp_path and point SWITCH_CRAFT_CONFIG at it."""

    def _write(data: Any, name: str = "config.json") -> Path:
        path = tmp_path / name
        path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
        monkeypatch.setenv("SWITCH_CRAFT_CONFIG", str(path))
        return path

    return _write
