from collections.abc import Callable
from typing import Any

from mapflow.application.port import TaskRunner


class InMemoryTaskRunner(TaskRunner):
    def run(self, function: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """
        Call a function in the current thread.

        :param function: The function to call
        :param args: Positional arguments
        :param kwargs: Keyword arguments
        :returns: The function's return value
        """
        return function(*args, **kwargs)
