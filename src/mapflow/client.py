from collections.abc import Callable, Mapping
from typing import Any

from mapflow.application.service import MapService
from mapflow.domain.entity import Collection, as_collection
from mapflow.domain.value_object import ExecutionMode, ResultKind


class Client:
    """
    Unified client façade for mapping and dispatch.

    The Client is the only thing users interact with. It exposes .map() and its
    typed variants, .map2(), .pmap(), the .walk() family, .invoke_map() and
    .function() for registering named functions.

    Extra positional and keyword arguments given to the mapping methods are
    forwarded to every call. `kind` and `mode` are reserved keywords.
    """

    def __init__(self, service: MapService):
        """
        Initialize the client with a configured map service.

        :param service: The service performing mappings and dispatch
        :type service: MapService
        """
        self._service = service

    def function(self, function: Callable[..., Any], name: str | None = None) -> "Client":
        """Registers a function for name lookups by invoke_map. Returns self for chaining."""
        self._service.resolver.register(function, name)
        return self

    def map(
        self,
        collection: Any,
        function: Any,
        *args: Any,
        kind: ResultKind = ResultKind.GENERIC,
        mode: ExecutionMode | None = None,
        **kwargs: Any,
    ) -> Collection:
        """
        Apply a function to every element of a collection.

        :param collection: A Collection, a mapping (keys become names) or any iterable
        :param function: A callable, a FunctionSelector, a field name or a position
        :param kind: The kind every result must have
        :param mode: Overrides the configured execution mode
        :returns: A Collection with the input's length and names
        :rtype: Collection
        :raises KindMismatchError: If a result does not match `kind`
        """
        return self._service.map([collection], function, args, kwargs, kind=kind, mode=mode)

    def map_bool(self, collection: Any, function: Any, *args: Any, **kwargs: Any) -> Collection:
        return self.map(collection, function, *args, kind=ResultKind.BOOL, **kwargs)

    def map_int(self, collection: Any, function: Any, *args: Any, **kwargs: Any) -> Collection:
        return self.map(collection, function, *args, kind=ResultKind.INT, **kwargs)

    def map_float(self, collection: Any, function: Any, *args: Any, **kwargs: Any) -> Collection:
        return self.map(collection, function, *args, kind=ResultKind.FLOAT, **kwargs)

    def map_text(self, collection: Any, function: Any, *args: Any, **kwargs: Any) -> Collection:
        return self.map(collection, function, *args, kind=ResultKind.TEXT, **kwargs)

    def map_records(self, collection: Any, function: Any, *args: Any, **kwargs: Any) -> Collection:
        return self.map(collection, function, *args, kind=ResultKind.RECORD, **kwargs)

    def map2(
        self,
        first: Any,
        second: Any,
        function: Any,
        *args: Any,
        kind: ResultKind = ResultKind.GENERIC,
        mode: ExecutionMode | None = None,
        **kwargs: Any,
    ) -> Collection:
        """
        Apply a function to corresponding elements of two collections.

        :raises SizeMismatchError: If the collections have different lengths
        """
        return self._service.map([first, second], function, args, kwargs, kind=kind, mode=mode)

    def pmap(
        self,
        collections: Any,
        function: Any,
        *args: Any,
        kind: ResultKind = ResultKind.GENERIC,
        mode: ExecutionMode | None = None,
        **kwargs: Any,
    ) -> Collection:
        """
        Apply a function to corresponding elements of any number of collections.

        A mapping or named Collection of collections passes elements by keyword,
        using each collection's name; a plain sequence passes them positionally.

        :raises SizeMismatchError: If the collections have different lengths
        """
        inputs, arg_names = self._split_inputs(collections)
        return self._service.map(inputs, function, args, kwargs, kind=kind, arg_names=arg_names, mode=mode)

    def walk(self, collection: Any, function: Any, *args: Any, mode: ExecutionMode | None = None, **kwargs: Any) -> Any:
        """Call a function for its side effects on every element and return the collection unchanged."""
        self._service.map([collection], function, args, kwargs, kind=ResultKind.NONE, mode=mode)
        return collection

    def walk2(
        self, first: Any, second: Any, function: Any, *args: Any, mode: ExecutionMode | None = None, **kwargs: Any
    ) -> Any:
        """Like walk, over corresponding elements of two collections. Returns the first unchanged."""
        self._service.map([first, second], function, args, kwargs, kind=ResultKind.NONE, mode=mode)
        return first

    def pwalk(
        self, collections: Any, function: Any, *args: Any, mode: ExecutionMode | None = None, **kwargs: Any
    ) -> Any:
        """Like walk, over any number of collections. Returns the collections unchanged."""
        inputs, arg_names = self._split_inputs(collections)
        self._service.map(inputs, function, args, kwargs, kind=ResultKind.NONE, arg_names=arg_names, mode=mode)
        return collections

    def invoke_map(
        self,
        functions: Any,
        arg_sets: Any,
        shared: Mapping[str, Any] | None = None,
        mode: ExecutionMode | None = None,
    ) -> Collection:
        """
        Invoke each function with its own arguments merged over the shared keyword arguments.

        :param functions: Callables or registered names, one per call
        :param arg_sets: Per-call arguments: mappings (keywords), sequences (positional) or Arguments
        :param shared: Keyword arguments for every call; per-call keywords win on collision
        :returns: A Collection of return values, one per call
        :raises SizeMismatchError: If the number of functions and argument sets differ
        :raises UnresolvedCallableError: If a name is not registered
        """
        return self._service.invoke_map(functions, arg_sets, dict(shared or {}), mode=mode)

    def functions(self) -> list[str]:
        """Names of all functions available to invoke_map."""
        return self._service.resolver.names()

    @staticmethod
    def _split_inputs(collections: Any) -> tuple[list[Any], tuple[str, ...] | None]:
        if isinstance(collections, (str, bytes)):
            raise TypeError(f"Expected collections, got {type(collections).__name__}")
        if isinstance(collections, Mapping):
            return list(collections.values()), tuple(collections.keys())
        if isinstance(collections, Collection) and collections.names is not None:
            return list(collections.values), tuple(collections.names)
        return list(as_collection(collections).values), None
