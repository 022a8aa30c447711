from collections.abc import Callable, Mapping
from typing import Any

from mapflow.client import Client
from mapflow.domain.value_object import ExecutionMode, ExecutionOptions
from mapflow.infrastructure.adapter.in_memory.service import create as create_in_memory_service


def create(
    mode: ExecutionMode = ExecutionMode.SEQUENTIAL,
    functions: Mapping[str, Callable[..., Any]] | list[Callable[..., Any]] | None = None,
    max_workers: int | None = None,
) -> Client:
    """
    Factory function to create a Client with the specified execution mode.

    Args:
        mode: Sequential (default) or parallel execution of mappings
        functions: Optional functions to pre-register for name lookups, on top of the built-ins
        max_workers: Thread pool size for parallel mode

    Returns:
        A configured Client instance

    Raises:
        ValueError: If the mode is unsupported
    """
    try:
        mode = ExecutionMode(mode)
    except ValueError:
        raise ValueError(f"Unsupported execution mode: {mode}") from None

    service = create_in_memory_service(functions, ExecutionOptions(mode=mode, max_workers=max_workers))
    return Client(service)
