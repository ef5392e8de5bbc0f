"""Interactive fuzzy project picker.

The picker is split in two: :class:`SelectorState` and :class:`TitleAnimation` hold all
state and logic and know nothing about terminals, while :class:`ProjectSelector`
wires them into a prompt_toolkit application rendered on stderr.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, Mapping, Optional, Sequence
import asyncio
import logging
import sys

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.filters import Condition
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import ConditionalContainer, HSplit, VSplit, Window
from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl
from prompt_toolkit.output import Output, create_output
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import Frame

from .core import Project, resolve_project_path
from .emitter import rainbow_color
from .integrations import IntegrationRegistry, venv_activate_path
from .matching import filter_projects
from .shells import RAINBOW, Dialect

TITLE = "switch-craft"
VISIBLE_ROWS = 10
PAUSE_FRAMES = 20
TICK_SECONDS = 0.1

STYLE = Style.from_dict({
    "dim": "#888888",
    "prompt": "ansicyan",
    "preview": "ansicyan",
    "preview.title": "ansicyan bold",
})

logger = logging.getLogger(__name__)


class SelectorState:
    """Query, highlight and scroll position of the picker."""

    def __init__(self, projects: Sequence[Project], window_size: int = VISIBLE_ROWS):
        self.projects = list(projects)
        self.window_size = window_size
        self.query = ""
        self.filtered: List[Project] = list(self.projects)
        self.selected_index = 0
        self.scroll_offset = 0
        self.show_preview = False

    def set_query(self, query: str) -> None:
        if query == self.query:
            return
        self.query = query
        self.filtered = filter_projects(self.projects, query)
        self.selected_index = 0
        self.scroll_offset = 0

    def move(self, delta: int) -> None:
        if not self.filtered:
            return
        index = max(0, min(len(self.filtered) - 1, self.selected_index + delta))
        self.selected_index = index
        if index < self.scroll_offset:
            self.scroll_offset = index
        elif index >= self.scroll_offset + self.window_size:
            self.scroll_offset = index - self.window_size + 1

    def toggle_preview(self) -> None:
        self.show_preview = not self.show_preview

    @property
    def highlighted(self) -> Optional[Project]:
        if 0 <= self.selected_index < len(self.filtered):
            return self.filtered[self.selected_index]
        return None

    @property
    def visible(self) -> List[Project]:
        return self.filtered[self.scroll_offset:self.scroll_offset + self.window_size]

    @property
    def more_above(self) -> int:
        return self.scroll_offset

    @property
    def more_below(self) -> int:
        return max(0, len(self.filtered) - self.scroll_offset - self.window_size)


def rotate(text: str, n: int) -> str:
    if not text:
        return text
    shift = n % len(text)
    return text[shift:] + text[:shift]


class TitleAnimation:
    """Rotate the title left to a full turn, pause, rotate back, pause, repeat."""

    def __init__(self, title: str = TITLE, pause_frames: int = PAUSE_FRAMES):
        self.title = title
        self.pause_frames = pause_frames
        self.rotation = 0
        self.direction = "forward"
        self.color_offset = 0
        self._paused = 0

    @property
    def text(self) -> str:
        return rotate(self.title, self.rotation)

    def tick(self) -> None:
        self.color_offset = (self.color_offset + 1) % len(RAINBOW)
        if self.direction == "pause":
            self._paused += 1
            if self._paused >= self.pause_frames:
                self.direction = "backward" if self.rotation >= len(self.title) else "forward"
                self._paused = 0
        elif self.direction == "forward":
            if self.rotation >= len(self.title):
                self.direction = "pause"
            else:
                self.rotation += 1
        elif self.rotation <= 0:
            self.direction = "pause"
        else:
            self.rotation -= 1


def preview_commands(
    project: Project, full_path: Path, no_env: bool = False, dialect: Dialect = Dialect.SH
) -> List[str]:
    """Readable approximation of what switching to ``project`` would set."""
    commands = []
    if not no_env:
        if project.kubectx:
            commands.append(f"kubectx {project.kubectx}")
        if project.gcloud:
            commands.append(f"gcloud config configurations activate {project.gcloud}")
        if project.aws:
            commands.append(f"export AWS_PROFILE={project.aws}")
        if project.azure:
            commands.append(f"# Azure account: {project.azure}")
        for key, value in project.env.items():
            commands.append(f"export {key}={value}")
        if project.venv:
            commands.append(f"source {venv_activate_path(project.venv, dialect)}")
    commands.append(f"cd {full_path}")
    return commands


def rainbow_fragments(text: str, offset: int = 0, extra: str = "") -> list:
    mid = len(text) // 2
    return [
        (f"fg:{rainbow_color(i, mid, offset)} {extra}".strip(), ch) for i, ch in enumerate(text)
    ]


class ProjectSelector:
    def __init__(
        self,
        projects: Sequence[Project],
        *,
        projects_dir: Path,
        registry: IntegrationRegistry,
        dialect: Dialect = Dialect.SH,
        no_env: bool = False,
        icons: Optional[Mapping[str, str]] = None,
        input: Optional[Input] = None,
        output: Optional[Output] = None,
    ):
        self.state = SelectorState(projects)
        self.animation = TitleAnimation()
        self.projects_dir = projects_dir
        self.registry = registry
        self.dialect = dialect
        self.no_env = no_env
        self.icons = icons or {}
        self._input = input
        self._output = output

    # ---------- rendering ----------
    def _header(self) -> list:
        return [
            ("class:dim", ">"),
            ("", " "),
            *rainbow_fragments(self.animation.text),
            ("class:dim", " - Select a project"),
        ]

    def _tags(self, project: Project) -> list:
        fragments: list = []
        for integration, value in self.registry.project_integrations(project):
            icon = self.icons.get(integration.key)
            label = f"{icon} {integration.label}" if icon else integration.label
            fragments += [
                ("", " ["),
                (f"fg:{integration.color}", f"{label}:"),
                ("", f" {value}]"),
            ]
        return fragments

    def _rows(self) -> list:
        state = self.state
        fragments: list = []
        if state.more_above:
            fragments.append(("class:dim", f" ↑ {state.more_above} more above\n"))
        if not state.filtered:
            fragments.append(("class:dim", " No matches found\n"))
        offset = self.animation.color_offset
        for i, project in enumerate(state.visible, start=state.scroll_offset):
            if i == state.selected_index:
                fragments += rainbow_fragments(">", offset)
                fragments.append(("", " "))
                fragments += rainbow_fragments(project.name, offset, "bold")
            else:
                fragments.append(("", f"  {project.name}"))
            fragments += self._tags(project)
            fragments.append(("", "\n"))
        if state.more_below:
            fragments.append(("class:dim", f" ↓ {state.more_below} more below\n"))
        return fragments

    def _preview(self) -> list:
        project = self.state.highlighted
        if project is None:
            return []
        full_path = resolve_project_path(self.projects_dir, project.path)
        lines = preview_commands(project, full_path, self.no_env, self.dialect)
        return [("class:dim", f" {line}\n") for line in lines]

    # ---------- application ----------
    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        state = self.state

        @kb.add("escape", eager=True)
        @kb.add("c-c")
        def _cancel(event):
            event.app.exit(result=None)

        @kb.add("enter")
        def _select(event):
            if state.highlighted is not None:
                event.app.exit(result=state.highlighted)

        @kb.add("up")
        def _up(event):
            state.move(-1)

        @kb.add("down")
        def _down(event):
            state.move(1)

        @kb.add("c-o")
        def _toggle(event):
            state.toggle_preview()

        return kb

    def _build_app(self) -> Application:
        search = Buffer(multiline=False, on_text_changed=lambda buf: self.state.set_query(buf.text))
        search_window = Window(BufferControl(buffer=search), height=1)
        show_preview = Condition(
            lambda: self.state.show_preview and self.state.highlighted is not None
        )

        root = HSplit([
            Window(FormattedTextControl(self._header), height=1),
            Window(height=1),
            VSplit([
                Window(FormattedTextControl([("class:prompt", "Search: ")]), width=8),
                search_window,
            ]),
            Window(height=1),
            Window(FormattedTextControl(self._rows), dont_extend_height=True),
            ConditionalContainer(
                Frame(
                    Window(FormattedTextControl(self._preview), dont_extend_height=True),
                    title="Commands Preview",
                    style="class:preview",
                ),
                filter=show_preview,
            ),
            Window(height=1),
            Window(
                FormattedTextControl([(
                    "class:dim",
                    "[↑/↓] Navigate   [Enter] Select   [Ctrl+O] Preview   [Esc] Cancel",
                )]),
                height=1,
            ),
        ])

        app: Application = Application(
            layout=Layout(root, focused_element=search_window),
            key_bindings=self._key_bindings(),
            style=STYLE,
            input=self._input,
            output=self._output or create_output(stdout=sys.stderr),
            full_screen=False,
            erase_when_done=True,
        )
        app.ttimeoutlen = 0.05
        return app

    async def _animate(self, app: Application) -> None:
        while True:
            await asyncio.sleep(TICK_SECONDS)
            self.animation.tick()
            app.invalidate()

    def run(self) -> Optional[Project]:
        """Show the picker; returns the chosen project or ``None`` if cancelled.

        The animation task is owned by the application, which cancels it on every
        exit path before ``run`` returns.
        """
        app = self._build_app()
        project = app.run(pre_run=lambda: app.create_background_task(self._animate(app)))
        logger.debug(f"Selector resolved to {project.name if project else None}")
        return project


def select_project(projects: Sequence[Project], **kwargs) -> Optional[Project]:
    return ProjectSelector(projects, **kwargs).run()
