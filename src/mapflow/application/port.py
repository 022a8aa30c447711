from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from mapflow.domain.entity import Collection, MapCall
from mapflow.domain.value_object import ResultKind


class FunctionResolver(ABC):
    """Abstract base class defining function resolution interface."""

    @abstractmethod
    def resolve(self, name: str) -> Callable[..., Any]:
        """Resolves and returns a function by its name.

        Raises:
            UnresolvedCallableError: If no function is registered under the name.
        """
        ...

    @abstractmethod
    def register(self, function: Callable[..., Any], name: str | None = None) -> None:
        """Registers a function under a name, replacing any previous registration."""
        ...

    @abstractmethod
    def names(self) -> list[str]:
        """Returns the registered names, sorted."""
        ...


class TaskRunner(ABC):
    """Abstract interface for running a single function call."""

    @abstractmethod
    def run(self, function: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Runs the function with the given arguments and returns its result."""


class Binder(ABC):
    """Abstract interface for binding call arguments to a function's signature."""

    @abstractmethod
    def bind(
        self, function: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> tuple[tuple[Any, ...], dict[str, Any]]:
        """Returns the positional and keyword arguments to call the function with."""


class KindVerifier(ABC):
    """Abstract interface for verifying produced values against a result kind."""

    @abstractmethod
    def verify(self, value: Any, kind: ResultKind, index: int, name: Any = None) -> Any:
        """Returns the value to store for this element.

        Raises:
            KindMismatchError: If the value does not match the kind.
        """


class MapStrategy(ABC):
    """Abstract strategy for executing a mapping."""

    @abstractmethod
    def execute(self, call: MapCall) -> Collection:
        """Executes the mapping and returns the result collection."""
        ...
