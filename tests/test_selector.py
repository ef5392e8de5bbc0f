"""Tests for the interactive selector state machine, animation and UI."""

from pathlib import Path

import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from switch_craft.core import Project
from switch_craft.integrations import IntegrationRegistry
from switch_craft.selector import (
    ProjectSelector,
    SelectorState,
    TitleAnimation,
    preview_commands,
    rotate,
)
from switch_craft.shells import Dialect


def _projects(count: int) -> list[Project]:
    return [Project(name=f"project-{i:02d}", path=f"p{i}") for i in range(count)]


def _text(fragments: list) -> str:
    return "".join(text for _, text in fragments)


def test_scrolling_keeps_highlight_in_window() -> None:
    state = SelectorState(_projects(25))
    for _ in range(15):
        state.move(1)
    assert state.selected_index == 15
    assert state.scroll_offset == 6
    assert state.visible[-1].name == "project-15"
    assert state.more_above == 6
    assert state.more_below == 9


def test_scrolling_up_moves_window_back() -> None:
    state = SelectorState(_projects(25))
    for _ in range(15):
        state.move(1)
    for _ in range(10):
        state.move(-1)
    assert state.selected_index == 5
    assert state.scroll_offset == 5


def test_movement_is_clamped() -> None:
    state = SelectorState(_projects(3))
    state.move(-1)
    assert state.selected_index == 0
    for _ in range(5):
        state.move(1)
    assert state.selected_index == 2
    assert state.scroll_offset == 0


def test_query_change_resets_selection_and_scroll() -> None:
    state = SelectorState(_projects(25))
    for _ in range(12):
        state.move(1)
    state.set_query("project-2")
    assert state.selected_index == 0
    assert state.scroll_offset == 0
    assert state.highlighted.name.startswith("project-2")


def test_empty_query_shows_everything_in_order() -> None:
    projects = _projects(4)
    state = SelectorState(projects)
    state.set_query("xyz-nothing")
    assert state.filtered == []
    assert state.highlighted is None
    state.move(1)
    state.set_query("")
    assert state.filtered == projects


def test_toggle_preview() -> None:
    state = SelectorState(_projects(1))
    state.toggle_preview()
    assert state.show_preview
    state.toggle_preview()
    assert not state.show_preview


def test_rotate() -> None:
    assert rotate("abc", 1) == "bca"
    assert rotate("abc", 3) == "abc"
    assert rotate("", 2) == ""


def test_title_animation_rotates_pauses_and_reverses() -> None:
    animation = TitleAnimation("abc", pause_frames=2)
    texts = []
    for _ in range(10):
        animation.tick()
        texts.append(animation.text)
    assert texts == ["bca", "cab", "abc", "abc", "abc", "abc", "cab", "bca", "abc", "abc"]
    assert animation.direction == "pause"
    assert animation.color_offset == 10 % 8


def test_preview_lists_only_what_is_set(full_project: Project) -> None:
    commands = preview_commands(full_project, Path("/w/api"), dialect=Dialect.FISH)
    assert commands == [
        "kubectx prod",
        "gcloud config configurations activate work",
        "export AWS_PROFILE=staging",
        "# Azure account: corp",
        "export API_URL=http://localhost:8080",
        "export DEBUG=1",
        "source .venv/bin/activate.fish",
        "cd /w/api",
    ]
    assert not any("unset" in c or "deactivate" in c for c in commands)


def test_preview_without_env_is_just_cd(full_project: Project) -> None:
    assert preview_commands(full_project, Path("/w/api"), no_env=True) == ["cd /w/api"]


def test_rows_render_tags_icons_and_scroll_hints(registry: IntegrationRegistry) -> None:
    projects = [Project(name="api", path="api", kubectx="prod")] + _projects(12)
    selector = ProjectSelector(
        projects, projects_dir=Path("/w"), registry=registry, icons={"k8s": "⎈"}
    )
    rows = selector._rows()
    text = _text(rows)
    assert "api [⎈ k8s: prod]" in text
    assert "↓ 3 more below" in text
    assert ("fg:#326CE5", "⎈ k8s:") in rows


def test_rows_show_no_matches(registry: IntegrationRegistry) -> None:
    selector = ProjectSelector(_projects(2), projects_dir=Path("/w"), registry=registry)
    selector.state.set_query("zzzz")
    assert "No matches found" in _text(selector._rows())
    assert selector._preview() == []


def test_preview_panel_uses_resolved_path(registry: IntegrationRegistry) -> None:
    selector = ProjectSelector(
        [Project(name="api", path="services/api", aws="dev")],
        projects_dir=Path("/w"),
        registry=registry,
    )
    assert _text(selector._preview()) == " export AWS_PROFILE=dev\n cd /w/services/api\n"


def _run(registry: IntegrationRegistry, projects: list[Project], keys: str):
    with create_pipe_input() as pipe:
        pipe.send_text(keys)
        selector = ProjectSelector(
            projects, projects_dir=Path("/w"), registry=registry,
            input=pipe, output=DummyOutput(),
        )
        return selector.run()


@pytest.fixture
def three() -> list[Project]:
    return [Project(name=n, path=n) for n in ("alpha", "beta", "gamma")]


def test_enter_selects_highlighted(registry: IntegrationRegistry, three: list[Project]) -> None:
    assert _run(registry, three, "\r").name == "alpha"


def test_arrow_down_then_enter(registry: IntegrationRegistry, three: list[Project]) -> None:
    assert _run(registry, three, "\x1b[B\x1b[B\r").name == "gamma"


def test_typing_filters(registry: IntegrationRegistry, three: list[Project]) -> None:
    assert _run(registry, three, "bet\r").name == "beta"


def test_ctrl_c_cancels(registry: IntegrationRegistry, three: list[Project]) -> None:
    assert _run(registry, three, "\x03") is None


def test_escape_cancels(registry: IntegrationRegistry, three: list[Project]) -> None:
    assert _run(registry, three, "\x1b") is None
