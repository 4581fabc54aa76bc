"""
Query executor.

Walks the selection tree of one operation against a ``Schema``, invoking each
field's resolver and completing its value against the declared type. Errors
raised inside a field are recorded with the field's response path and replaced
by ``null``; siblings keep resolving.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ...logging import get_logger
from .errors import (
    ArgumentTypeError,
    FieldError,
    FieldResolutionError,
    GraphQLError,
    InvalidSelectionError,
    ParseError,
    PathKey,
    RequestError,
    UnknownFieldError,
    UnknownOperationError,
)
from .language import MISSING, Document, Operation, Selection, parse, value_to_python
from .registry import (
    MUTATION,
    QUERY,
    FieldDefinition,
    GraphQLType,
    ListType,
    NonNullType,
    ObjectType,
    ScalarType,
    Schema,
    named_type,
)

logger = get_logger(__name__)

TYPENAME_FIELD = "__typename"


@dataclass
class ExecutionResult:
    """Outcome of executing one document."""

    data: dict[str, Any] | None
    errors: list[GraphQLError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def formatted(self) -> dict[str, Any]:
        """Return the ``{data, errors}`` response envelope."""
        result: dict[str, Any] = {"data": self.data}
        if self.errors:
            result["errors"] = [error.formatted() for error in self.errors]
        return result


def execute(
    schema: Schema,
    document: str | Document,
    *,
    context: Any = None,
    variables: Mapping[str, Any] | None = None,
    operation_name: str | None = None,
) -> ExecutionResult:
    """
    Execute a request document.

    Request-level failures (syntax, operation selection, invalid selections)
    produce ``data=None`` with a single error. Field-level failures are
    collected and leave ``null`` at their path.

    Args:
        schema: Finalized schema to execute against
        document: Request text or an already parsed ``Document``
        context: Passed unchanged as the third argument to every resolver
        variables: Values for ``$variables`` declared by the operation
        operation_name: Operation to run when the document holds several

    Returns:
        ExecutionResult with the result tree and the collected errors
    """
    try:
        parsed = parse(document) if isinstance(document, str) else document
        operation = parsed.get_operation(operation_name)
        root_type = _root_type(schema, operation)
        _validate_selections(root_type, operation.selections)
        operation_variables = _operation_variables(operation, variables)
    except RequestError as e:
        logger.info("Request rejected", error_type=type(e).__name__, error=e.message)
        return ExecutionResult(data=None, errors=[e])

    executor = Executor(schema, context, operation_variables)
    data = executor.execute_selections(root_type, None, operation.selections, [])

    if executor.errors:
        logger.info(
            "Operation completed with field errors",
            operation=operation.name,
            kind=operation.kind,
            error_count=len(executor.errors),
        )
    return ExecutionResult(data=data, errors=executor.errors)


def _root_type(schema: Schema, operation: Operation) -> ObjectType:
    if operation.kind not in (QUERY, MUTATION):
        raise UnknownOperationError(f"Unsupported operation type '{operation.kind}'")
    root_type = schema.root(operation.kind)
    if root_type is None:
        raise UnknownOperationError(f"Schema is not configured for {operation.kind} operations")
    return root_type


def _operation_variables(
    operation: Operation, supplied: Mapping[str, Any] | None
) -> dict[str, Any]:
    supplied = supplied or {}
    values = {name: supplied[name] for name in operation.variables if name in supplied}
    for name, definition in operation.variables.items():
        if name not in values and definition.default is not None:
            try:
                values[name] = value_to_python(definition.default, {})
            except ValueError as e:
                raise ParseError(
                    f"Invalid default value for variable '${name}': {e}", original_error=e
                ) from e
    return values


def _validate_selections(parent_type: ObjectType, selections: list[Selection]) -> None:
    """Check every selected field exists and has a selection set matching its type."""
    for selection in selections:
        if selection.name == TYPENAME_FIELD:
            if selection.has_selection_set:
                raise InvalidSelectionError(
                    f"Field '{TYPENAME_FIELD}' must not have a selection since type "
                    "'String!' has no subfields"
                )
            continue

        definition = parent_type.fields.get(selection.name)
        if definition is None:
            raise UnknownFieldError(
                f"Cannot query field '{selection.name}' on type '{parent_type.name}'"
            )

        leaf = named_type(definition.type)
        if isinstance(leaf, ObjectType):
            if not selection.has_selection_set or not selection.selections:
                raise InvalidSelectionError(
                    f"Field '{selection.name}' of type '{definition.type}' must have a "
                    "selection of subfields"
                )
            _validate_selections(leaf, selection.selections)
        elif selection.has_selection_set:
            raise InvalidSelectionError(
                f"Field '{selection.name}' must not have a selection since type "
                f"'{definition.type}' has no subfields"
            )


class Executor:
    """Executes the selections of one validated operation."""

    def __init__(self, schema: Schema, context: Any, variables: dict[str, Any]):
        self.schema = schema
        self.context = context
        self.variables = variables
        self.errors: list[GraphQLError] = []

    def execute_selections(
        self,
        parent_type: ObjectType,
        parent_value: Any,
        selections: list[Selection],
        path: list[PathKey],
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for selection in selections:
            key = selection.response_key
            if selection.name == TYPENAME_FIELD:
                result[key] = parent_type.name
                continue
            definition = parent_type.fields[selection.name]
            result[key] = self.execute_field(
                parent_type, definition, parent_value, selection, path + [key]
            )
        return result

    def execute_field(
        self,
        parent_type: ObjectType,
        definition: FieldDefinition,
        parent_value: Any,
        selection: Selection,
        path: list[PathKey],
    ) -> Any:
        try:
            args = self.coerce_arguments(definition, selection)
            try:
                value = definition.resolver(parent_value, args, self.context)
            except FieldError:
                raise
            except Exception as e:
                logger.warning(
                    "Resolver raised",
                    field=f"{parent_type.name}.{definition.name}",
                    path=path,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise FieldResolutionError(str(e) or type(e).__name__, original_error=e) from e
            return self.complete_value(definition.type, value, selection, path)
        except FieldError as e:
            if e.path is None:
                e.path = list(path)
            self.errors.append(e)
            return None

    def complete_value(
        self, type_: GraphQLType, value: Any, selection: Selection, path: list[PathKey]
    ) -> Any:
        if isinstance(type_, NonNullType):
            completed = self.complete_value(type_.of_type, value, selection, path)
            if completed is None:
                raise FieldResolutionError(
                    f"Cannot return null for non-nullable field '{selection.name}'"
                )
            return completed

        if value is None:
            return None

        if isinstance(type_, ListType):
            if isinstance(value, str | bytes | Mapping) or not isinstance(value, Iterable):
                raise FieldResolutionError(
                    f"Expected an iterable for list field '{selection.name}', "
                    f"got {type(value).__name__}"
                )
            return [
                self.complete_value(type_.of_type, item, selection, path + [index])
                for index, item in enumerate(value)
            ]

        if isinstance(type_, ScalarType):
            try:
                return type_.serialize(value)
            except (TypeError, ValueError) as e:
                raise FieldResolutionError(str(e), original_error=e) from e

        return self.execute_selections(type_, value, selection.selections, path)

    def coerce_arguments(self, definition: FieldDefinition, selection: Selection) -> dict[str, Any]:
        """
        Coerce the arguments supplied for a field to their declared types.

        Raises:
            ArgumentTypeError: On unknown arguments, missing required arguments,
                or values that cannot be coerced
        """
        for name in selection.arguments:
            if name not in definition.args:
                raise ArgumentTypeError(
                    f"Unknown argument '{name}' on field '{definition.name}'"
                )

        coerced: dict[str, Any] = {}
        for name, arg in definition.args.items():
            node = selection.arguments.get(name)
            value = MISSING
            try:
                if node is not None:
                    value = value_to_python(node, self.variables)

                if value is MISSING:
                    if arg.has_default:
                        coerced[name] = arg.default
                    elif isinstance(arg.type, NonNullType):
                        raise ArgumentTypeError(
                            f"Argument '{name}' of required type '{arg.type}' was not provided"
                        )
                    continue

                coerced[name] = _coerce_input(arg.type, value)
            except (TypeError, ValueError) as e:
                shown = "" if value is MISSING else f" {value!r}"
                raise ArgumentTypeError(
                    f"Argument '{name}' has invalid value{shown}: {e}", original_error=e
                ) from e
        return coerced


def _coerce_input(type_: GraphQLType, value: Any) -> Any:
    if isinstance(type_, NonNullType):
        if value is None or value is MISSING:
            raise ValueError(f"Expected non-nullable type '{type_}' not to be null")
        return _coerce_input(type_.of_type, value)

    if value is None:
        return None

    if isinstance(type_, ListType):
        if isinstance(value, list):
            return [_coerce_input(type_.of_type, item) for item in value]
        return [_coerce_input(type_.of_type, value)]

    if isinstance(type_, ScalarType):
        return type_.coerce_input(value)

    raise TypeError(f"Type '{type_}' cannot be used as an input type")
