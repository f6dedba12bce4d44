"""
ont_sdk.cli
===========

Command-line interface exposed as the `ont-sdk` console script.

Typer is only imported when the CLI is actually used:

    >>> from ont_sdk.cli import run
    >>> run(["height"])
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, List

from ..version import __version__

__all__: List[str] = [
    "__version__",
    "run",
    "app",  # Typer app (lazy)
]

_SUBMODULE = "ont_sdk.cli.main"
_EXPOSE = ("app", "run")


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    if name in _EXPOSE:
        return getattr(import_module(_SUBMODULE), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
