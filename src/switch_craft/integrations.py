from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, List, Optional

from .shells import Dialect, ShellSyntax

DEFAULT_COLOR = "#AAAAAA"

Activate = Callable[[ShellSyntax, str], List[str]]
Deactivate = Callable[[ShellSyntax], List[str]]


@dataclass(frozen=True)
class Integration:
    """One external tool whose session state a project toggles."""

    key: str
    label: str
    color: str
    field: Optional[str]
    activate: Activate
    deactivate: Deactivate


# ---------- Kubernetes ----------
def _k8s_activate(shell: ShellSyntax, context: str) -> List[str]:
    cmd = shell.silence(f"kubectx {shell.escape(context)}", stderr=False)
    return [shell.if_command_exists("kubectx", cmd)]


def _k8s_deactivate(shell: ShellSyntax) -> List[str]:
    return [shell.if_command_exists("kubectx", shell.silence("kubectx -u"))]


# ---------- GCloud ----------
def _gcloud_activate(shell: ShellSyntax, config: str) -> List[str]:
    cmd = shell.silence(f"gcloud config configurations activate {shell.escape(config)}")
    return [shell.if_command_exists("gcloud", cmd)]


def _gcloud_deactivate(shell: ShellSyntax) -> List[str]:
    cmd = shell.silence("gcloud config configurations activate default")
    return [shell.if_command_exists("gcloud", cmd)]


# ---------- AWS ----------
def _aws_activate(shell: ShellSyntax, profile: str) -> List[str]:
    return [shell.set_env("AWS_PROFILE", profile)]


def _aws_deactivate(shell: ShellSyntax) -> List[str]:
    return [shell.unset_env("AWS_PROFILE")]


# ---------- Azure ----------
def _azure_clear(shell: ShellSyntax, _account: str = "") -> List[str]:
    # az has no "switch account" primitive; both directions clear.
    return [shell.if_command_exists("az", shell.silence("az account clear"))]


# ---------- virtualenv ----------
def venv_activate_path(venv: str, dialect: Dialect) -> str:
    if dialect is Dialect.PWSH:
        return f"{venv}/Scripts/Activate.ps1"
    if dialect is Dialect.FISH:
        return f"{venv}/bin/activate.fish"
    return f"{venv}/bin/activate"


def _venv_activate(shell: ShellSyntax, venv: str) -> List[str]:
    script = venv_activate_path(venv, shell.dialect)
    return [shell.file_exists(script, shell.source_file(script))]


def _venv_deactivate(shell: ShellSyntax) -> List[str]:
    return [shell.if_command_exists("deactivate", shell.silence("deactivate", stdout=False))]


# ---------- plain path ----------
def _path_activate(shell: ShellSyntax, path: str) -> List[str]:
    return [shell.cd(path)]


def _path_deactivate(shell: ShellSyntax) -> List[str]:
    return []


KUBERNETES = Integration("k8s", "k8s", "#326CE5", "kubectx", _k8s_activate, _k8s_deactivate)
GCLOUD = Integration("gcp", "gcp", "#4285F4", "gcloud", _gcloud_activate, _gcloud_deactivate)
AWS = Integration("aws", "aws", "#FF9900", "aws", _aws_activate, _aws_deactivate)
AZURE = Integration("azure", "azure", "#0078D4", "azure", _azure_clear, _azure_clear)
VENV = Integration("venv", "venv", "#3776AB", "venv", _venv_activate, _venv_deactivate)
PATH = Integration("path", "path", DEFAULT_COLOR, None, _path_activate, _path_deactivate)

BUILTIN = (KUBERNETES, GCLOUD, AWS, AZURE, VENV, PATH)


class IntegrationRegistry:
    """Read-only lookup of integrations by key.

    Built once at startup and handed to both the emitter and the selector so the
    script and the UI agree on labels and colours.
    """

    def __init__(self, integrations: Iterable[Integration]):
        self._by_key = MappingProxyType({i.key: i for i in integrations})

    def __getitem__(self, key: str) -> Integration:
        return self._by_key[key]

    def __iter__(self):
        return iter(self._by_key.values())

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def keys(self) -> List[str]:
        return list(self._by_key)

    def color(self, key: str) -> str:
        integration = self._by_key.get(key)
        return integration.color if integration else DEFAULT_COLOR

    def label(self, key: str) -> str:
        integration = self._by_key.get(key)
        return integration.label if integration else key

    def project_integrations(self, project) -> List[tuple[Integration, str]]:
        """(integration, value) pairs for every integration the project sets."""
        pairs = []
        for integration in self:
            if integration.field is None:
                continue
            value = getattr(project, integration.field, None)
            if value:
                pairs.append((integration, value))
        return pairs


def build_registry() -> IntegrationRegistry:
    return IntegrationRegistry(BUILTIN)
