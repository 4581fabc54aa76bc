"""
Minimal GraphQL execution core: schema registry, document parser and executor
"""

from .errors import (
    ArgumentTypeError,
    DuplicateTypeError,
    FieldError,
    FieldResolutionError,
    GraphQLError,
    InvalidSelectionError,
    ParseError,
    RequestError,
    SchemaError,
    UnknownFieldError,
    UnknownOperationError,
    UnknownTypeError,
)
from .executor import ExecutionResult, execute
from .language import Document, parse
from .registry import MUTATION, QUERY, Argument, Field, Schema, SchemaRegistry

__all__ = [
    "MUTATION",
    "QUERY",
    "Argument",
    "ArgumentTypeError",
    "Document",
    "DuplicateTypeError",
    "ExecutionResult",
    "Field",
    "FieldError",
    "FieldResolutionError",
    "GraphQLError",
    "InvalidSelectionError",
    "ParseError",
    "RequestError",
    "Schema",
    "SchemaError",
    "SchemaRegistry",
    "UnknownFieldError",
    "UnknownOperationError",
    "UnknownTypeError",
    "execute",
    "parse",
]
