"""
Mapflow - Typed mapping and failure isolation

Apply functions over collections with verified result kinds, isolate per-element
failures as data, and dispatch calls to functions chosen by name.
"""

import logging

from mapflow.application.isolation import make_possibly, make_quietly, make_safe
from mapflow.application.service import partition, transpose
from mapflow.client import Client
from mapflow.domain.entity import (
    Arguments,
    Collection,
    Direct,
    ErrorDiagnostic,
    Field,
    Named,
    Partition,
    Position,
    QuietResult,
    SafeResult,
    as_collection,
)
from mapflow.domain.exception import KindMismatchError, MapflowError, SizeMismatchError, UnresolvedCallableError
from mapflow.domain.port import register
from mapflow.domain.value_object import ExecutionMode, ResultKind
from mapflow.factory import create

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Client",
    "create",
    "register",
    "ExecutionMode",
    "ResultKind",
    "Collection",
    "as_collection",
    "Arguments",
    "Direct",
    "Named",
    "Field",
    "Position",
    "SafeResult",
    "ErrorDiagnostic",
    "QuietResult",
    "Partition",
    "make_safe",
    "make_possibly",
    "make_quietly",
    "transpose",
    "partition",
    "MapflowError",
    "SizeMismatchError",
    "KindMismatchError",
    "UnresolvedCallableError",
]
