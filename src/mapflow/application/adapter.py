import concurrent.futures
import inspect
import keyword
import logging
import types
import typing
from collections.abc import Callable, Mapping
from typing import Any, Union, get_args, get_origin

import msgspec
from msgspec import structs

from mapflow.application.port import Binder, FunctionResolver, KindVerifier, MapStrategy, TaskRunner
from mapflow.domain.entity import Arguments, Collection, Direct, InvocationSpec, MapCall
from mapflow.domain.exception import KindMismatchError
from mapflow.domain.service import describe
from mapflow.domain.value_object import ExecutionMode, ResultKind

logger = logging.getLogger(__name__)


class ParameterBinder(Binder):
    """Binds call arguments (accepting mixed types) to a function's signature with type coercion.

    Keyword names that are Python keywords (e.g. `lambda`) are bound to a parameter
    with a trailing underscore (`lambda_`) when the function declares one. String
    values are coerced to the annotated int, float or bool parameter types.
    """

    def bind(
        self, function: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> tuple[tuple[Any, ...], dict[str, Any]]:
        try:
            sig = inspect.signature(function)
        except (TypeError, ValueError):
            # Some builtins expose no signature; pass the arguments through untouched
            return tuple(args), dict(kwargs)
        hints = self._hints(function)
        params = sig.parameters
        positional = [
            p.name for p in params.values() if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        ]

        bound_args = []
        for idx, value in enumerate(args):
            target = hints.get(positional[idx], Any) if idx < len(positional) else Any
            bound_args.append(self._coerce(value, target))

        bound_kwargs: dict[str, Any] = {}
        for name, value in kwargs.items():
            target_name = name
            if name not in params and keyword.iskeyword(name) and f"{name}_" in params and f"{name}_" not in kwargs:
                target_name = f"{name}_"
            bound_kwargs[target_name] = self._coerce(value, hints.get(target_name, Any))
        return tuple(bound_args), bound_kwargs

    def _hints(self, function: Callable[..., Any]) -> dict[str, Any]:
        target = function if inspect.isfunction(function) or inspect.ismethod(function) else type(function).__call__
        try:
            return typing.get_type_hints(target, include_extras=False)
        except (NameError, TypeError):
            return {}

    def _coerce(self, value: Any, target_type: Any) -> Any:
        """Coerces a string value to the target type, handling Optional and Union types, including PEP 604 unions."""
        if target_type is Any or (isinstance(target_type, type) and isinstance(value, target_type)):
            return value
        origin = get_origin(target_type)
        if isinstance(target_type, types.UnionType) or origin is Union:
            args = get_args(target_type)
            if value is None and type(None) in args:
                return None
            for t in args:
                if t is type(None):
                    continue
                try:
                    return self._coerce(value, t)
                except (TypeError, ValueError):
                    continue
            return value
        # Primitive coercions from string
        if isinstance(value, str):
            if target_type is int:
                return int(value)
            if target_type is float:
                return float(value)
            if target_type is bool:
                v = value.strip().lower()
                if v in {"true", "1", "yes", "y"}:
                    return True
                if v in {"false", "0", "no", "n"}:
                    return False
        return value


def kind_of(value: Any) -> str:
    """Names the kind a value naturally belongs to, for error messages."""
    if value is None:
        return ResultKind.NONE.value
    if isinstance(value, Collection):
        return "collection"
    if isinstance(value, bool):
        return ResultKind.BOOL.value
    if isinstance(value, int):
        return ResultKind.INT.value
    if isinstance(value, float):
        return ResultKind.FLOAT.value
    if isinstance(value, str):
        return ResultKind.TEXT.value
    if isinstance(value, (Mapping, msgspec.Struct)):
        return ResultKind.RECORD.value
    return type(value).__name__


class KindChecker(KindVerifier):
    """Verifies values against a result kind.

    Checks are strict: a float is never narrowed to int and bools are not numbers.
    The only conversion performed is the lossless widening of int to float.
    """

    def verify(self, value: Any, kind: ResultKind, index: int, name: Any = None) -> Any:
        if kind is ResultKind.GENERIC:
            return value
        if kind is ResultKind.NONE:
            return None
        if kind is ResultKind.BOOL and isinstance(value, bool):
            return value
        if not isinstance(value, bool):
            if kind is ResultKind.INT and isinstance(value, int):
                return value
            if kind is ResultKind.FLOAT and isinstance(value, float):
                return value
            if kind is ResultKind.FLOAT and isinstance(value, int):
                return float(value)
        if kind is ResultKind.TEXT and isinstance(value, str):
            return value
        if kind is ResultKind.RECORD:
            if isinstance(value, Mapping):
                return dict(value)
            if isinstance(value, msgspec.Struct) and not isinstance(value, Collection):
                return structs.asdict(value)
        raise KindMismatchError(index=index, expected=kind.value, actual=kind_of(value), name=name)


def call_arguments(call: MapCall, index: int) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """Builds the arguments of the call made for one element index."""
    elements = [c.values[index] for c in call.inputs]
    if call.arg_names is None:
        return (*elements, *call.args), call.kwargs
    return call.args, {**call.kwargs, **dict(zip(call.arg_names, elements))}


class SequentialMapStrategy(MapStrategy):
    """Calls the function once per element, in ascending index order."""

    def __init__(self, resolver: FunctionResolver, task_runner: TaskRunner, verifier: KindVerifier):
        self.resolver = resolver
        self.task_runner = task_runner
        self.verifier = verifier

    def execute(self, call: MapCall) -> Collection:
        function = call.function.resolve(self.resolver)
        logger.debug("Mapping %s over %d element(s) sequentially", describe(function), call.size)
        names = call.names
        values = []
        for idx in range(call.size):
            args, kwargs = call_arguments(call, idx)
            value = self.task_runner.run(function, args, kwargs)
            values.append(self.verifier.verify(value, call.kind, idx, None if names is None else names[idx]))
        return Collection(values=tuple(values), names=names, kind=call.kind)


class ParallelMapStrategy(MapStrategy):
    """Calls the function for all elements on a thread pool.

    Only suitable for functions free of side effects. Results, kind checks and
    errors are reported in index order, exactly as in sequential mode.
    """

    def __init__(
        self,
        resolver: FunctionResolver,
        task_runner: TaskRunner,
        verifier: KindVerifier,
        max_workers: int | None = None,
    ):
        self.resolver = resolver
        self.task_runner = task_runner
        self.verifier = verifier
        self.max_workers = max_workers

    def execute(self, call: MapCall) -> Collection:
        function = call.function.resolve(self.resolver)
        logger.debug("Mapping %s over %d element(s) in parallel", describe(function), call.size)
        names = call.names
        values = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self.task_runner.run, function, *call_arguments(call, idx)) for idx in range(call.size)
            ]
            try:
                for idx, future in enumerate(futures):
                    value = future.result()
                    values.append(self.verifier.verify(value, call.kind, idx, None if names is None else names[idx]))
            except Exception:
                for future in futures:
                    future.cancel()
                raise
        return Collection(values=tuple(values), names=names, kind=call.kind)


class MapStrategyFactory:
    """Factory to return the correct MapStrategy based on mode."""

    @staticmethod
    def get_strategy(
        mode: ExecutionMode,
        resolver: FunctionResolver,
        task_runner: TaskRunner,
        verifier: KindVerifier,
        max_workers: int | None = None,
    ) -> MapStrategy:
        if ExecutionMode(mode) is ExecutionMode.PARALLEL:
            return ParallelMapStrategy(resolver, task_runner, verifier, max_workers)
        else:
            return SequentialMapStrategy(resolver, task_runner, verifier)


def as_arguments(value: Any) -> Arguments:
    """Coerces a per-call argument bundle: a mapping, a sequence, None or Arguments."""
    if value is None:
        return Arguments()
    if isinstance(value, Arguments):
        return value
    if isinstance(value, Mapping):
        return Arguments(kwargs=dict(value))
    if isinstance(value, (list, tuple, Collection)):
        return Arguments(args=tuple(value))
    raise TypeError(f"Cannot use object of type {type(value).__name__} as call arguments")


class InvocationDispatcher:
    """Invokes one resolved function with its own arguments merged over shared keyword arguments.

    Instances are callables of (function, arguments), so they can be mapped in
    parallel over a collection of functions and a collection of argument sets.
    """

    def __init__(self, binder: Binder, task_runner: TaskRunner, shared: dict[str, Any] | None = None):
        self.binder = binder
        self.task_runner = task_runner
        self.shared = dict(shared or {})

    def dispatch(self, spec: InvocationSpec) -> Any:
        function = spec.function.resolve()
        kwargs = {**spec.shared, **spec.arguments.kwargs}
        args, kwargs = self.binder.bind(function, spec.arguments.args, kwargs)
        logger.debug(
            "Invoking %s with %d positional and %d keyword argument(s)", describe(function), len(args), len(kwargs)
        )
        return self.task_runner.run(function, args, kwargs)

    def __call__(self, function: Callable[..., Any], arguments: Any) -> Any:
        spec = InvocationSpec(function=Direct(function=function), arguments=as_arguments(arguments), shared=self.shared)
        return self.dispatch(spec)
