from collections.abc import Callable
from typing import Any

from mapflow import builtins  # noqa: F401
from mapflow.domain.port import registered_functions


def get_functions() -> dict[str, Callable[..., Any]]:
    """Returns all functions registered in the default scope, built-ins included."""
    return registered_functions()
