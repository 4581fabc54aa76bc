"""
Error types raised by the schema registry and the query executor
"""

from __future__ import annotations

from typing import Any

PathKey = str | int


class GraphQLError(Exception):
    """Base class for every error produced while building or running a schema."""

    def __init__(
        self,
        message: str,
        path: list[PathKey] | None = None,
        original_error: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.path = path
        self.original_error = original_error

    def formatted(self) -> dict[str, Any]:
        """Return the error as it appears in a response's ``errors`` list."""
        error: dict[str, Any] = {"message": self.message}
        if self.path is not None:
            error["path"] = list(self.path)
        return error

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, path={self.path!r})"


# Schema construction (start-up only)


class SchemaError(GraphQLError):
    """The schema could not be built."""


class DuplicateTypeError(SchemaError):
    """A type or root with the same name is already registered."""


class UnknownTypeError(SchemaError):
    """A field references a type that was never registered."""


# Request level (fatal to a single request)


class RequestError(GraphQLError):
    """The request document cannot be executed at all."""


class ParseError(RequestError):
    """The request document is not syntactically valid."""


class UnknownOperationError(RequestError):
    """No executable operation could be selected from the document."""


class UnknownFieldError(RequestError):
    """A selected field does not exist on its parent type."""


class InvalidSelectionError(RequestError):
    """A selection set does not match the shape of the selected field's type."""


# Field level (fatal to a single field subtree)


class FieldError(GraphQLError):
    """An error scoped to one field; siblings keep resolving."""


class ArgumentTypeError(FieldError):
    """An argument is missing, unknown, or cannot be coerced to its declared type."""


class FieldResolutionError(FieldError):
    """A resolver failed or returned a value that does not fit the field's type."""
