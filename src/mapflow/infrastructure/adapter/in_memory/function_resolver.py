from collections.abc import Callable, Mapping
from typing import Any

from mapflow.application.port import FunctionResolver
from mapflow.domain.exception import UnresolvedCallableError


class InMemoryFunctionResolver(FunctionResolver):
    """Resolves functions from an in-memory registry."""

    def __init__(self, functions: Mapping[str, Callable[..., Any]] | list[Callable[..., Any]] | None = None):
        """Initializes resolver with an optional mapping of names to functions, or a list of functions.

        Functions given as a list are registered under their __name__.
        """
        self._registry: dict[str, Callable[..., Any]] = {}
        if isinstance(functions, Mapping):
            for name, function in functions.items():
                self.register(function, name)
        else:
            for function in functions or []:
                self.register(function)

    def register(self, function: Callable[..., Any], name: str | None = None) -> None:
        if not callable(function):
            raise TypeError(f"{function!r} is not callable")
        key = name or getattr(function, "__name__", None)
        if not key:
            raise ValueError(f"A name is required to register {function!r}")
        self._registry[key] = function

    def resolve(self, name: str) -> Callable[..., Any]:
        """Returns the function registered under the given name.

        Raises:
            UnresolvedCallableError: If no function is registered for the given name.
        """
        try:
            return self._registry[name]
        except KeyError:
            raise UnresolvedCallableError(name) from None

    def names(self) -> list[str]:
        return sorted(self._registry)
