"""
Invocation surface: CLI, command results and result queries.
"""

from .query import QueryError, query_result
from .result import CommandResult, ErrorInfo, to_json

__all__ = [
    'QueryError',
    'query_result',
    'CommandResult',
    'ErrorInfo',
    'to_json',
]
