import logging
from collections.abc import Callable, Mapping
from typing import Any

import msgspec
from msgspec import structs

from mapflow.application.adapter import InvocationDispatcher, KindChecker, MapStrategyFactory, ParameterBinder
from mapflow.application.port import Binder, FunctionResolver, KindVerifier, TaskRunner
from mapflow.domain.entity import Collection, MapCall, Partition, SafeResult, as_collection
from mapflow.domain.service import to_selector, validate_map_call, validate_same_length
from mapflow.domain.value_object import ExecutionMode, ExecutionOptions, ResultKind

logger = logging.getLogger(__name__)


def _fields(record: Any) -> tuple[Any, ...]:
    if isinstance(record, Collection):
        return tuple(record.names) if record.names is not None else tuple(range(len(record)))
    if isinstance(record, msgspec.Struct):
        return tuple(f.name for f in structs.fields(record))
    if isinstance(record, Mapping):
        return tuple(record.keys())
    if isinstance(record, (list, tuple)):
        return tuple(range(len(record)))
    raise TypeError(f"Cannot transpose element of type {type(record).__name__}")


def _field(record: Any, key: Any) -> Any:
    if isinstance(record, Collection):
        return record.values[key] if record.names is None else record.values[record.names.index(key)]
    if isinstance(record, msgspec.Struct):
        return getattr(record, key)
    return record[key]


def _same_fields(record: Any, fields: tuple[Any, ...]) -> bool:
    found = _fields(record)
    if isinstance(record, Mapping) or (isinstance(record, Collection) and record.names is not None):
        return len(found) == len(fields) and set(found) == set(fields)
    return found == fields


def transpose(collection: Any) -> dict[Any, Collection]:
    """Reshapes a collection of uniform records into a dict of collections.

    Records may be tuples or lists (keyed by position), mappings or msgspec
    Structs (keyed by field name). Mapping and named collection records are
    matched by name regardless of key order; the first record sets the order.
    Every output collection keeps the input's names and index order, so
    re-zipping them rebuilds the original records.

    Raises:
        ValueError: If the records do not all have the same fields.
    """
    collection = as_collection(collection)
    if len(collection) == 0:
        return {}
    fields = _fields(collection.values[0])
    for idx, record in enumerate(collection.values):
        if not _same_fields(record, fields):
            raise ValueError(f"Element at index {idx} has fields {list(_fields(record))}, expected {list(fields)}")
    return {
        key: collection.with_values((_field(record, key) for record in collection.values), kind=ResultKind.GENERIC)
        for key in fields
    }


def _pick(source: Collection, indices: list[int], value: Callable[[Any], Any] = lambda v: v) -> Collection:
    names = None if source.names is None else tuple(source.names[i] for i in indices)
    return Collection(values=tuple(value(source.values[i]) for i in indices), names=names)


def partition(results: Any, inputs: Any = None) -> Partition:
    """Splits a collection of SafeResult into successful values and failure diagnostics.

    Args:
        results: The output of mapping a make_safe wrapped function.
        inputs: Optionally the collection that was mapped, to report failing inputs.

    Returns:
        A Partition keeping the original names and indices of both halves.
    """
    results = as_collection(results)
    success_indices: list[int] = []
    failure_indices: list[int] = []
    for idx, item in enumerate(results.values):
        if not isinstance(item, SafeResult):
            raise TypeError(f"Element at index {idx} is a {type(item).__name__}, not a SafeResult")
        (success_indices if item.ok else failure_indices).append(idx)
    failed_inputs = None
    if inputs is not None:
        inputs = as_collection(inputs)
        validate_same_length(len(results), len(inputs), what="results and inputs")
        failed_inputs = _pick(inputs, failure_indices)
    return Partition(
        successes=_pick(results, success_indices, lambda r: r.result),
        failures=_pick(results, failure_indices, lambda r: r.error),
        success_indices=success_indices,
        failure_indices=failure_indices,
        failed_inputs=failed_inputs,
    )


class MapService:
    """Runs mappings and dispatches invocations against a function resolver.

    .. note::
        Concrete FunctionResolver and TaskRunner implementations are wired in a
        composition root (see mapflow.factory) and injected here.
    """

    def __init__(
        self,
        resolver: FunctionResolver,
        task_runner: TaskRunner,
        binder: Binder | None = None,
        verifier: KindVerifier | None = None,
        execution_options: ExecutionOptions | None = None,
    ):
        self.resolver = resolver
        self.task_runner = task_runner
        self.binder = binder if binder is not None else ParameterBinder()
        self.verifier = verifier if verifier is not None else KindChecker()
        self.execution_options = execution_options if execution_options is not None else ExecutionOptions()

    def run(self, call: MapCall, mode: ExecutionMode | None = None) -> Collection:
        """Validates and executes a MapCall with the configured or given mode."""
        validate_map_call(call)
        strategy = MapStrategyFactory.get_strategy(
            mode if mode is not None else self.execution_options.mode,
            self.resolver,
            self.task_runner,
            self.verifier,
            self.execution_options.max_workers,
        )
        result = strategy.execute(call)
        logger.debug("Mapping produced %d %s value(s)", len(result), call.kind.value)
        return result

    def map(
        self,
        inputs: list[Any],
        function: Any,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        kind: ResultKind = ResultKind.GENERIC,
        arg_names: tuple[str, ...] | None = None,
        mode: ExecutionMode | None = None,
    ) -> Collection:
        """Maps a function over one or more collections walked in parallel."""
        kwargs = dict(kwargs or {})
        if arg_names is not None:
            clashing = sorted(set(arg_names) & set(kwargs))
            if clashing:
                raise ValueError(f"Arguments given both as collections and as extra arguments: {clashing}")
        call = MapCall(
            inputs=tuple(as_collection(c) for c in inputs),
            function=to_selector(function),
            args=tuple(args),
            kwargs=kwargs,
            kind=ResultKind(kind),
            arg_names=arg_names,
        )
        return self.run(call, mode)

    def invoke_map(
        self, functions: Any, arg_sets: Any, shared: dict[str, Any] | None = None, mode: ExecutionMode | None = None
    ) -> Collection:
        """Invokes each referenced function with its own argument set merged over the shared arguments.

        Args:
            functions: Callables, registered names or FunctionSelectors, one per call.
            arg_sets: Per-call arguments (mappings, sequences or Arguments), one per call.
            shared: Keyword arguments passed to every call; per-call keywords take precedence.
            mode: Overrides the configured execution mode.

        Returns:
            A generic Collection of return values, named like `functions`.

        Raises:
            SizeMismatchError: If there are not exactly as many argument sets as functions.
            UnresolvedCallableError: If a name is not registered. No function is called in that case.
        """
        functions = as_collection(functions)
        arg_sets = as_collection(arg_sets)
        validate_same_length(len(functions), len(arg_sets), what="function references and argument sets")
        resolved = functions.with_values(to_selector(ref, strings="name").resolve(self.resolver) for ref in functions)
        dispatcher = InvocationDispatcher(self.binder, self.task_runner, shared)
        logger.debug("Dispatching %d invocation(s)", len(resolved))
        return self.map([resolved, arg_sets], dispatcher, mode=mode)
