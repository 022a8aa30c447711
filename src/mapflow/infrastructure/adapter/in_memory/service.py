from collections.abc import Callable, Mapping
from typing import Any

from mapflow.application.adapter import KindChecker, ParameterBinder
from mapflow.application.service import MapService
from mapflow.domain.value_object import ExecutionOptions
from mapflow.infrastructure.adapter.in_memory.function_resolver import InMemoryFunctionResolver
from mapflow.infrastructure.adapter.in_memory.task_runner import InMemoryTaskRunner
from mapflow.infrastructure.provider import get_functions


def create(
    functions: Mapping[str, Callable[..., Any]] | list[Callable[..., Any]] | None = None,
    execution_options: ExecutionOptions | None = None,
) -> MapService:
    """
    Creates a MapService resolving names against the built-in and given functions.

    :param functions: Extra functions, as a name mapping or a list registered by __name__
    :param execution_options: Execution mode and worker count
    :returns: Configured MapService instance
    :rtype: MapService
    """
    resolver = InMemoryFunctionResolver(get_functions())
    extra = InMemoryFunctionResolver(functions)
    for name in extra.names():
        resolver.register(extra.resolve(name), name)

    return MapService(
        resolver=resolver,
        task_runner=InMemoryTaskRunner(),
        binder=ParameterBinder(),
        verifier=KindChecker(),
        execution_options=execution_options if execution_options is not None else ExecutionOptions(),
    )
