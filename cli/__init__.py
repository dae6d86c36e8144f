"""Command-line client for the telemetry hub's HTTP API."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    # Resolve lazily so ``cli.app`` stays the module, not the Typer instance;
    # tests patch attributes on that module path.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


__all__ = []
