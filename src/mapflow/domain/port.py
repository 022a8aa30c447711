from collections.abc import Callable
from typing import Any

_functions: dict[str, Callable[..., Any]] = {}


def register(name: str | Callable[..., Any] | None = None) -> Any:
    """Decorator recording a function in the default resolution scope.

    Usable bare (`@register`) or called (`@register("name")`).

    Args:
        name: The name to register under; defaults to the function's __name__.

    Returns:
        A decorator that registers the function and returns it unchanged, or the
        function itself when applied bare.

    Raises:
        TypeError: If name is neither a string, None nor a function.
    """

    def decorator(function: Callable[..., Any]) -> Callable[..., Any]:
        if not callable(function):
            raise TypeError(f"{function!r} is not callable")
        _functions[name or function.__name__] = function
        return function

    if callable(name):
        function, name = name, None
        return decorator(function)
    if name is not None and not isinstance(name, str):
        raise TypeError(f"Function names must be strings, not {type(name).__name__}")
    return decorator


def registered_functions() -> dict[str, Callable[..., Any]]:
    """Returns a copy of the functions registered in the default scope."""
    return dict(_functions)
