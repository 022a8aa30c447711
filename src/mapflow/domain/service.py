from collections.abc import Callable
from typing import Any

from mapflow.domain.entity import Direct, Field, FunctionSelector, MapCall, Named, Position
from mapflow.domain.exception import SizeMismatchError


def validate_map_call(call: MapCall) -> bool:
    """Validates that a mapping has inputs of equal length.

    Args:
        call: The MapCall to validate.

    Returns:
        True if the call is valid.

    Raises:
        SizeMismatchError: If the input collections differ in length.
        ValueError: If there are no inputs or the argument names do not match them.
    """
    call.validate()
    return True


def validate_same_length(*sizes: int, what: str = "collections") -> bool:
    """Raises SizeMismatchError unless every size is equal."""
    if len(set(sizes)) > 1:
        raise SizeMismatchError(list(sizes), what=what)
    return True


def to_selector(ref: Any, strings: str = "field") -> FunctionSelector:
    """Turns a function reference into a FunctionSelector.

    Callables select themselves, ints select a position and strings select
    either a field or a registered function name depending on `strings`.
    """
    if isinstance(ref, FunctionSelector):
        return ref
    if isinstance(ref, str):
        if strings == "name":
            return Named(name=ref)
        if strings == "field":
            return Field(key=ref)
        raise ValueError(f"Unknown string selector mode: {strings}")
    if isinstance(ref, int) and not isinstance(ref, bool):
        return Position(index=ref)
    if callable(ref):
        return Direct(function=ref)
    raise TypeError(f"Cannot use object of type {type(ref).__name__} as a function")


def describe(function: Callable[..., Any]) -> str:
    """Short human readable name of a callable, for log records."""
    return getattr(function, "__qualname__", None) or getattr(function, "__name__", None) or repr(function)
