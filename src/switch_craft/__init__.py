"""switch-craft - Cross-shell project switcher with environment management"""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("switch-craft")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
