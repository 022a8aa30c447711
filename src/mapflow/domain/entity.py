import traceback as tb
from abc import abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import msgspec
from msgspec import structs

from mapflow.domain.exception import SizeMismatchError
from mapflow.domain.value_object import ResultKind


class Collection(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """An ordered sequence of values, each optionally associated with a unique name.

    Collections are immutable. Mapping operations never modify their inputs and
    always produce a new Collection with the same length and names.
    """

    values: tuple[Any, ...] = ()
    names: tuple[Any, ...] | None = None
    kind: ResultKind = ResultKind.GENERIC

    def __post_init__(self):
        structs.force_setattr(self, "values", tuple(self.values))
        if self.names is not None:
            names = tuple(self.names)
            structs.force_setattr(self, "names", names)
            if len(names) != len(self.values):
                raise ValueError(f"Collection has {len(self.values)} values but {len(names)} names")
            if len(set(names)) != len(names):
                duplicates = sorted({str(n) for n in names if names.count(n) > 1})
                raise ValueError(f"Collection names must be unique, duplicated: {duplicates}")

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, int) and not isinstance(key, bool):
            return self.values[key]
        if self.names is None:
            raise KeyError(f"Collection has no names, cannot look up {key!r}")
        try:
            return self.values[self.names.index(key)]
        except ValueError:
            raise KeyError(key) from None

    def get(self, key: Any, default: Any = None) -> Any:
        """Returns the value stored under a name, or default when absent."""
        if self.names is None or key not in self.names:
            return default
        return self.values[self.names.index(key)]

    def name_at(self, index: int) -> Any:
        """Returns the name of the element at index, or None for unnamed collections."""
        return None if self.names is None else self.names[index]

    def items(self) -> list[tuple[Any, Any]]:
        """Returns (name, value) pairs; names are None for unnamed collections."""
        return [(self.name_at(i), v) for i, v in enumerate(self.values)]

    def to_dict(self) -> dict[Any, Any]:
        """Returns a name-to-value dict. Requires a named collection."""
        if self.names is None:
            raise ValueError("Only named collections can be converted to a dict")
        return dict(zip(self.names, self.values))

    def to_list(self) -> list[Any]:
        return list(self.values)

    def with_values(self, values: Iterable[Any], kind: ResultKind | None = None) -> "Collection":
        """Builds a new collection with this collection's names and the given values.

        Args:
            values: The new values, one per element of this collection.
            kind: The kind of the new collection; defaults to this collection's kind.

        Returns:
            A new Collection of the same shape.

        Raises:
            SizeMismatchError: If the number of values differs from this collection's length.
        """
        values = tuple(values)
        if len(values) != len(self.values):
            raise SizeMismatchError([len(self.values), len(values)], what="values")
        return Collection(values=values, names=self.names, kind=self.kind if kind is None else kind)


def as_collection(obj: Any) -> Collection:
    """Coerces a Collection, a mapping or any other iterable to a Collection.

    Mapping keys become names. Strings and bytes are rejected rather than iterated
    character by character.
    """
    if isinstance(obj, Collection):
        return obj
    if isinstance(obj, (str, bytes)):
        raise TypeError(f"Expected a collection, got {type(obj).__name__}")
    if isinstance(obj, Mapping):
        return Collection(values=tuple(obj.values()), names=tuple(obj.keys()))
    if isinstance(obj, Iterable):
        return Collection(values=tuple(obj))
    raise TypeError(f"Expected a collection, got {type(obj).__name__}")


class FunctionSelector(msgspec.Struct, tag_field="selector", frozen=True):
    """Base class for the ways a function to map with can be selected."""

    @abstractmethod
    def resolve(self, resolver: Any = None) -> Callable[..., Any]:
        """Turns the selector into a plain callable. Resolver is used for name lookups."""
        ...


class Direct(FunctionSelector, tag="direct", frozen=True):
    """Selects a callable given directly."""

    function: Any

    def resolve(self, resolver: Any = None) -> Callable[..., Any]:
        if not callable(self.function):
            raise TypeError(f"Object of type {type(self.function).__name__} is not callable")
        return self.function


class Named(FunctionSelector, tag="named", frozen=True):
    """Selects a callable by its registered name."""

    name: str

    def resolve(self, resolver: Any = None) -> Callable[..., Any]:
        if resolver is None:
            raise ValueError(f"A function resolver is required to look up '{self.name}'")
        return resolver.resolve(self.name)


class Field(FunctionSelector, tag="field", frozen=True):
    """Selects a field of each element: a mapping key, a collection name or an attribute."""

    key: Any
    default: Any = None

    def resolve(self, resolver: Any = None) -> Callable[..., Any]:
        key, default = self.key, self.default

        def get_field(element: Any, *args: Any, **kwargs: Any) -> Any:
            if isinstance(element, (Mapping, Collection)):
                return element.get(key, default)
            return getattr(element, str(key), default)

        get_field.__name__ = f"field_{key}"
        return get_field


class Position(FunctionSelector, tag="position", frozen=True):
    """Selects the element at a fixed position inside each element."""

    index: int
    default: Any = None

    def resolve(self, resolver: Any = None) -> Callable[..., Any]:
        index, default = self.index, self.default

        def get_position(element: Any, *args: Any, **kwargs: Any) -> Any:
            if isinstance(element, Mapping):
                element = list(element.values())
            elif isinstance(element, msgspec.Struct) and not isinstance(element, Collection):
                element = structs.astuple(element)
            try:
                return element[index]
            except IndexError:
                return default

        get_position.__name__ = f"position_{index}"
        return get_position


class Arguments(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """A bundle of positional and keyword arguments for a single call."""

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = {}


class InvocationSpec(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """A function reference with the arguments of one dispatched call."""

    function: FunctionSelector
    arguments: Arguments
    shared: dict[str, Any] = {}


class MapCall(msgspec.Struct, kw_only=True, frozen=True, forbid_unknown_fields=True):
    """Describes one mapping: the inputs walked in parallel, the function and the result kind.

    When arg_names is set, element i of inputs[j] is passed as keyword argument
    arg_names[j]; otherwise elements are passed positionally in input order.
    """

    inputs: tuple[Collection, ...]
    function: FunctionSelector
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = {}
    kind: ResultKind = ResultKind.GENERIC
    arg_names: tuple[str, ...] | None = None

    def validate(self) -> None:
        if not self.inputs:
            raise ValueError("At least one input collection is required")
        lengths = [len(c) for c in self.inputs]
        if len(set(lengths)) > 1:
            raise SizeMismatchError(lengths)
        if self.arg_names is not None and len(self.arg_names) != len(self.inputs):
            raise ValueError(f"Expected {len(self.inputs)} argument names, got {len(self.arg_names)}")

    @property
    def size(self) -> int:
        return len(self.inputs[0]) if self.inputs else 0

    @property
    def names(self) -> tuple[Any, ...] | None:
        return self.inputs[0].names if self.inputs else None


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return object.__repr__(value)


def _safe_str(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        return f"<unprintable {type(exc).__name__} object>"


class ErrorDiagnostic(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """Structured description of a failed call, including the arguments it was made with."""

    kind: str
    message: str
    args: list[str] = []
    kwargs: dict[str, str] = {}
    traceback: str = ""

    @classmethod
    def from_exception(
        cls, exc: BaseException, args: tuple[Any, ...] = (), kwargs: dict[str, Any] | None = None
    ) -> "ErrorDiagnostic":
        """Describes an exception. Values that fail to render fall back to a generic text."""
        return cls(
            kind=type(exc).__name__,
            message=_safe_str(exc),
            args=[_safe_repr(a) for a in args],
            kwargs={str(k): _safe_repr(v) for k, v in (kwargs or {}).items()},
            traceback="".join(tb.format_exception(type(exc), exc, exc.__traceback__)),
        )


class SafeResult(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """Outcome of a call made through make_safe: either a result or an error, never both."""

    result: Any = None
    error: ErrorDiagnostic | None = None

    def __post_init__(self):
        if self.error is not None and self.result is not None:
            raise ValueError("A SafeResult cannot hold both a result and an error")

    @property
    def ok(self) -> bool:
        return self.error is None


class QuietResult(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """Outcome of a call made through make_quietly, with its captured side output."""

    result: Any = None
    output: str = ""
    warnings: list[str] = []
    messages: str = ""


class Partition(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """Safe results split into successful values and failure diagnostics."""

    successes: Collection
    failures: Collection
    success_indices: list[int] = []
    failure_indices: list[int] = []
    failed_inputs: Collection | None = None
