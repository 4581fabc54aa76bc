"""
Request document parsing.

The document text is tokenized and parsed with graphql-core; the resulting AST
is reduced to a plain selection tree with fragments inlined, which is all the
executor needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from graphql import GraphQLSyntaxError
from graphql import parse as parse_ast
from graphql.language import ast

from .errors import ParseError, UnknownOperationError

# Field nesting allowed in a single operation, counted through inlined fragments
MAX_SELECTION_DEPTH = 50

_TOO_DEEP = f"Document is nested deeper than {MAX_SELECTION_DEPTH} levels"


@dataclass
class Selection:
    """One requested field, with its arguments and nested selections."""

    name: str
    alias: str | None = None
    arguments: dict[str, ast.ValueNode] = field(default_factory=dict)
    selections: list[Selection] = field(default_factory=list)
    has_selection_set: bool = False

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass
class VariableDefinition:
    name: str
    type: str
    default: ast.ValueNode | None = None


@dataclass
class Operation:
    kind: str
    name: str | None
    selections: list[Selection]
    variables: dict[str, VariableDefinition] = field(default_factory=dict)


@dataclass
class Document:
    operations: list[Operation]

    def get_operation(self, operation_name: str | None = None) -> Operation:
        """
        Pick the operation to execute.

        Raises:
            UnknownOperationError: If the name is unknown, or the document holds
                several operations and no name was given
        """
        if operation_name is None:
            if len(self.operations) != 1:
                raise UnknownOperationError(
                    "Must provide operation name if query contains multiple operations"
                )
            return self.operations[0]

        for operation in self.operations:
            if operation.name == operation_name:
                return operation
        raise UnknownOperationError(f"Unknown operation named '{operation_name}'")


def parse(source: str) -> Document:
    """
    Parse request text into a ``Document``.

    Raises:
        ParseError: On syntax errors, unknown or cyclic fragments, selections
            nested deeper than ``MAX_SELECTION_DEPTH``, variables used without
            being declared, or a document without operations
    """
    if not source or not source.strip():
        raise ParseError("Syntax Error: Unexpected <EOF>.")

    try:
        document = parse_ast(source)
    except GraphQLSyntaxError as e:
        raise ParseError(e.message, original_error=e) from e
    except RecursionError as e:
        raise ParseError(_TOO_DEEP, original_error=e) from e

    fragments: dict[str, ast.FragmentDefinitionNode] = {}
    operation_nodes: list[ast.OperationDefinitionNode] = []
    for definition in document.definitions:
        if isinstance(definition, ast.FragmentDefinitionNode):
            name = definition.name.value
            if name in fragments:
                raise ParseError(f"There can be only one fragment named '{name}'")
            fragments[name] = definition
        elif isinstance(definition, ast.OperationDefinitionNode):
            operation_nodes.append(definition)
        else:
            raise ParseError(f"Unsupported definition: {type(definition).__name__}")

    if not operation_nodes:
        raise ParseError("Document does not contain any operation")

    operations = []
    for node in operation_nodes:
        operation = Operation(
            kind=node.operation.value,
            name=node.name.value if node.name else None,
            selections=_convert_selection_set(node.selection_set, fragments, (), 1),
            variables={
                var.variable.name.value: VariableDefinition(
                    name=var.variable.name.value,
                    type=_print_type_node(var.type),
                    default=var.default_value,
                )
                for var in node.variable_definitions or ()
            },
        )
        _check_variables_declared(operation)
        operations.append(operation)
    return Document(operations=operations)


def _convert_selection_set(
    selection_set: ast.SelectionSetNode | None,
    fragments: dict[str, ast.FragmentDefinitionNode],
    visiting: tuple[str, ...],
    depth: int,
) -> list[Selection]:
    if selection_set is None:
        return []
    if depth > MAX_SELECTION_DEPTH:
        raise ParseError(_TOO_DEEP)

    collected: dict[str, Selection] = {}
    for node in selection_set.selections:
        if isinstance(node, ast.FieldNode):
            selection = Selection(
                name=node.name.value,
                alias=node.alias.value if node.alias else None,
                arguments={arg.name.value: arg.value for arg in node.arguments or ()},
                selections=_convert_selection_set(
                    node.selection_set, fragments, visiting, depth + 1
                ),
                has_selection_set=node.selection_set is not None,
            )
            _merge(collected, [selection])
        elif isinstance(node, ast.FragmentSpreadNode):
            name = node.name.value
            if name in visiting:
                raise ParseError(f"Cannot spread fragment '{name}' within itself")
            fragment = fragments.get(name)
            if fragment is None:
                raise ParseError(f"Unknown fragment '{name}'")
            _merge(
                collected,
                _convert_selection_set(
                    fragment.selection_set, fragments, visiting + (name,), depth
                ),
            )
        elif isinstance(node, ast.InlineFragmentNode):
            _merge(
                collected,
                _convert_selection_set(node.selection_set, fragments, visiting, depth),
            )
    return list(collected.values())


def _check_variables_declared(operation: Operation) -> None:
    """Every ``$variable`` used in an argument must be declared by its operation."""
    pending = list(operation.selections)
    while pending:
        selection = pending.pop()
        pending.extend(selection.selections)
        for node in selection.arguments.values():
            for name in _variables_in(node):
                if name not in operation.variables:
                    label = f" '{operation.name}'" if operation.name else ""
                    raise ParseError(f"Variable '${name}' is not defined by operation{label}")


def _variables_in(node: ast.ValueNode) -> list[str]:
    if isinstance(node, ast.VariableNode):
        return [node.name.value]
    if isinstance(node, ast.ListValueNode):
        return [name for item in node.values for name in _variables_in(item)]
    if isinstance(node, ast.ObjectValueNode):
        return [name for f in node.fields for name in _variables_in(f.value)]
    return []


def _merge(collected: dict[str, Selection], selections: list[Selection]) -> None:
    """Merge selections sharing a response key, keeping first-seen order."""
    for selection in selections:
        existing = collected.get(selection.response_key)
        if existing is None:
            collected[selection.response_key] = selection
            continue
        if existing.name != selection.name:
            raise ParseError(
                f"Fields '{selection.response_key}' conflict because "
                f"'{existing.name}' and '{selection.name}' are different fields"
            )
        merged = {s.response_key: s for s in existing.selections}
        _merge(merged, selection.selections)
        existing.selections = list(merged.values())
        existing.has_selection_set = existing.has_selection_set or selection.has_selection_set


def _print_type_node(node: ast.TypeNode) -> str:
    if isinstance(node, ast.NonNullTypeNode):
        return f"{_print_type_node(node.type)}!"
    if isinstance(node, ast.ListTypeNode):
        return f"[{_print_type_node(node.type)}]"
    return node.name.value  # type: ignore[attr-defined]


def value_to_python(node: ast.ValueNode, variables: dict[str, Any]) -> Any:
    """Convert a literal argument value to Python, substituting variables.

    Variables missing from ``variables`` come back as ``MISSING``.
    """
    if isinstance(node, ast.VariableNode):
        return variables.get(node.name.value, MISSING)
    if isinstance(node, ast.NullValueNode):
        return None
    if isinstance(node, ast.IntValueNode):
        return int(node.value)
    if isinstance(node, ast.FloatValueNode):
        return float(node.value)
    if isinstance(node, ast.StringValueNode | ast.EnumValueNode):
        return node.value
    if isinstance(node, ast.BooleanValueNode):
        return node.value
    if isinstance(node, ast.ListValueNode):
        return [value_to_python(item, variables) for item in node.values]
    if isinstance(node, ast.ObjectValueNode):
        return {f.name.value: value_to_python(f.value, variables) for f in node.fields}
    raise ParseError(f"Unsupported value: {type(node).__name__}")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
