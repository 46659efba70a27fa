"""
Narrowing of command results by path expressions such as ``data/instance/name``.
"""

import re
from collections.abc import Mapping
from typing import Any, Optional

from ..core.errors import PipelineError
from .result import CommandResult

_SEPARATORS = re.compile(r"[./]")


class QueryError(PipelineError):
    """Raised when a chunk of a query path cannot be resolved."""

    def __init__(self, chunk: str, query: str):
        super().__init__(f"Cannot find '{chunk}' chunk of '{query}' query in the object")
        self.chunk = chunk
        self.query = query


def _lookup(obj: Any, chunk: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(chunk)

    wanted = chunk.lower()
    fields = getattr(type(obj), "model_fields", None)
    names = list(fields) if fields else [name for name in dir(obj) if not name.startswith("_")]
    for name in names:
        if name.lower() == wanted:
            value = getattr(obj, name, None)
            return None if callable(value) else value
    return None


def query_result(result: Any, query: Optional[str]) -> Any:
    """
    Return the part of ``result`` addressed by ``query``.

    Chunks are separated by "." or "/"; mapping keys are matched exactly,
    object attributes ignoring case. Empty queries and unsuccessful command
    results return ``result`` unchanged.

    Raises:
        QueryError: If a chunk does not resolve to a value
    """
    if not query or (isinstance(result, CommandResult) and not result.success):
        return result

    obj = result
    for chunk in _SEPARATORS.split(query):
        if not chunk:
            continue
        value = _lookup(obj, chunk)
        if value is None:
            raise QueryError(chunk, query)
        obj = value
    return obj
