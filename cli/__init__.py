"""Command line tools for reading openSenseMap boxes via the block proxy."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    # Tests patch ``cli.app.ApiClient``; keep ``cli.app`` the module, not the Typer object.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


__all__ = []
