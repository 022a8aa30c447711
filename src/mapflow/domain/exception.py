class MapflowError(Exception):
    """Base class for all errors raised by mapflow itself."""


class SizeMismatchError(MapflowError, ValueError):
    """Raised when collections iterated in parallel have different lengths."""

    def __init__(self, lengths: list[int], what: str = "collections"):
        self.lengths = list(lengths)
        super().__init__(f"All {what} must have the same length, got lengths {self.lengths}")


class KindMismatchError(MapflowError, TypeError):
    """Raised when a produced value does not match the requested result kind."""

    def __init__(self, index: int, expected: str, actual: str, name: str | None = None):
        self.index = index
        self.name = name
        self.expected = expected
        self.actual = actual
        where = f"index {index}" if name is None else f"index {index} ({name!r})"
        super().__init__(f"Result at {where} must be of kind '{expected}', not '{actual}'")


class UnresolvedCallableError(MapflowError, KeyError):
    """Raised when a function name cannot be found in the resolution scope."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No function registered under name '{name}'")

    def __str__(self) -> str:
        return self.args[0]
