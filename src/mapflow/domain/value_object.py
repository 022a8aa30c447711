from dataclasses import dataclass
from enum import Enum


class ExecutionMode(str, Enum):
    """How a mapping visits its elements."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class ResultKind(str, Enum):
    """The uniform element type a mapping guarantees for its output."""

    GENERIC = "generic"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    RECORD = "record"
    NONE = "none"


@dataclass
class ExecutionOptions:
    mode: ExecutionMode = ExecutionMode.SEQUENTIAL
    max_workers: int | None = None
