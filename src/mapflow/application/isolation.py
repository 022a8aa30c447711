"""Function transformers that turn per-call failures and side output into data.

Wrap the per-element function before handing it to a mapping so that one bad
element cannot abort the whole batch:

    results = client.map([1, 10, "a"], make_safe(math.log))
    split = partition(results)
"""

import contextlib
import functools
import io
import logging
import warnings
from collections.abc import Callable
from typing import Any

from mapflow.domain.entity import ErrorDiagnostic, QuietResult, SafeResult
from mapflow.domain.service import describe

logger = logging.getLogger(__name__)


def make_safe(function: Callable[..., Any]) -> Callable[..., SafeResult]:
    """Wraps a function so that every call returns a SafeResult instead of raising.

    Args:
        function: The function to wrap.

    Returns:
        A function with the same call signature. On success its SafeResult holds
        the return value; on failure it holds an ErrorDiagnostic describing the
        exception and the arguments of the failing call.
    """

    @functools.wraps(function)
    def safe(*args: Any, **kwargs: Any) -> SafeResult:
        try:
            result = function(*args, **kwargs)
        except Exception as e:
            error = ErrorDiagnostic.from_exception(e, args, kwargs)
            logger.debug("Captured %s from %s: %s", error.kind, describe(function), error.message)
            return SafeResult(result=None, error=error)
        return SafeResult(result=result, error=None)

    return safe


def make_possibly(function: Callable[..., Any], default: Any = None, quiet: bool = True) -> Callable[..., Any]:
    """Wraps a function so that a failing call returns default instead of raising.

    The failure itself is discarded; use make_safe when the diagnostic is needed.
    With quiet=False each failure is logged as a warning.
    """

    @functools.wraps(function)
    def possibly(*args: Any, **kwargs: Any) -> Any:
        try:
            return function(*args, **kwargs)
        except Exception as e:
            if quiet:
                logger.debug("Replacing %s from %s with default", type(e).__name__, describe(function))
            else:
                error = ErrorDiagnostic.from_exception(e)
                logger.warning("%s failed with %s: %s", describe(function), error.kind, error.message)
            return default

    return possibly


def make_quietly(function: Callable[..., Any]) -> Callable[..., QuietResult]:
    """Wraps a function so that its printed output and warnings are captured and returned.

    Exceptions raised by the function still propagate. Output is captured by
    redirecting sys.stdout and sys.stderr, which are process-wide, so quiet
    functions should not be mapped in parallel mode.
    """

    @functools.wraps(function)
    def quietly(*args: Any, **kwargs: Any) -> QuietResult:
        out, err = io.StringIO(), io.StringIO()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
                result = function(*args, **kwargs)
        return QuietResult(
            result=result,
            output=out.getvalue(),
            warnings=[str(w.message) for w in caught],
            messages=err.getvalue(),
        )

    return quietly
