"""
Schema registry: declares object types and the Query / Mutation roots.

Types are declared through a builder (``SchemaRegistry``) and referenced by
SDL-style notation (``"Int"``, ``"String!"``, ``"[Comment]"``). Calling
``finalize()`` resolves every reference, binds a default property accessor to
fields that have no resolver, and returns an immutable ``Schema``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ...logging import get_logger
from .errors import DuplicateTypeError, SchemaError, UnknownTypeError

logger = get_logger(__name__)

Resolver = Callable[[Any, dict[str, Any], Any], Any]

_UNSET: Any = object()

QUERY = "query"
MUTATION = "mutation"
ROOT_KINDS = (QUERY, MUTATION)
DEFAULT_ROOT_NAMES = {QUERY: "Query", MUTATION: "Mutation"}

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


# Scalars


def _serialize_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        result = value
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    elif isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        result = int(value.strip())
    else:
        raise ValueError(f"Int cannot represent non-integer value: {value!r}")
    if not _INT_MIN <= result <= _INT_MAX:
        raise ValueError(f"Int cannot represent non 32-bit signed integer value: {value!r}")
    return result


def _coerce_int(value: Any) -> int:
    # Numeric strings are accepted; booleans and fractional numbers are not.
    if isinstance(value, bool):
        raise ValueError(f"Int cannot represent non-integer value: {value!r}")
    return _serialize_int(value)


def _serialize_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ValueError(f"Float cannot represent non numeric value: {value!r}")


def _coerce_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Float cannot represent non numeric value: {value!r}")
    return _serialize_float(value)


def _serialize_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str | int | float):
        return str(value)
    raise ValueError(f"String cannot represent value: {value!r}")


def _coerce_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"String cannot represent a non string value: {value!r}")
    return value


def _serialize_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value != 0
    raise ValueError(f"Boolean cannot represent a non boolean value: {value!r}")


def _coerce_boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Boolean cannot represent a non boolean value: {value!r}")
    return value


def _serialize_id(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"ID cannot represent value: {value!r}")


@dataclass(frozen=True)
class ScalarType:
    """A leaf type with output serialization and input coercion."""

    name: str
    serialize: Callable[[Any], Any]
    coerce_input: Callable[[Any], Any]
    description: str | None = None

    def __str__(self) -> str:
        return self.name


Int = ScalarType("Int", _serialize_int, _coerce_int, "32-bit signed integer")
Float = ScalarType("Float", _serialize_float, _coerce_float, "Double-precision number")
String = ScalarType("String", _serialize_string, _coerce_string, "UTF-8 text")
Boolean = ScalarType("Boolean", _serialize_boolean, _coerce_boolean, "true or false")
ID = ScalarType("ID", _serialize_id, _serialize_id, "Unique identifier, serialized as a string")

BUILTIN_SCALARS: dict[str, ScalarType] = {
    scalar.name: scalar for scalar in (Int, Float, String, Boolean, ID)
}


# Wrapping types


@dataclass(frozen=True)
class ListType:
    of_type: GraphQLType

    def __str__(self) -> str:
        return f"[{self.of_type}]"


@dataclass(frozen=True)
class NonNullType:
    of_type: GraphQLType

    def __str__(self) -> str:
        return f"{self.of_type}!"


def named_type(type_: GraphQLType) -> ScalarType | ObjectType:
    """Strip list and non-null wrappers."""
    while isinstance(type_, ListType | NonNullType):
        type_ = type_.of_type
    return type_


def parse_type_ref(ref: str) -> tuple[str, Callable[[GraphQLType], GraphQLType]]:
    """Split SDL notation into the named type and a function that re-applies the wrappers.

    ``"[Comment!]!"`` yields ``"Comment"`` and a wrapper building
    ``NonNull(List(NonNull(Comment)))``.
    """
    text = ref.strip()
    if not text:
        raise SchemaError("Empty type reference")

    if text.endswith("!"):
        inner_name, inner_wrap = parse_type_ref(text[:-1])
        if text[:-1].rstrip().endswith("!"):
            raise SchemaError(f"Malformed type reference: {ref!r}")
        return inner_name, lambda t: NonNullType(inner_wrap(t))

    if text.startswith("["):
        if not text.endswith("]"):
            raise SchemaError(f"Malformed type reference: {ref!r}")
        inner_name, inner_wrap = parse_type_ref(text[1:-1])
        return inner_name, lambda t: ListType(inner_wrap(t))

    if not text.replace("_", "a").isalnum() or text[0].isdigit():
        raise SchemaError(f"Malformed type reference: {ref!r}")
    return text, lambda t: t


# Definitions supplied to the registry


@dataclass
class Argument:
    """Declared argument of a field."""

    type: str
    default: Any = _UNSET
    description: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET


@dataclass
class Field:
    """Declared field of an object type.

    ``source`` names the attribute (or mapping key) the default resolver reads;
    it defaults to the field name.
    """

    type: str
    resolver: Resolver | None = None
    args: dict[str, Argument] = field(default_factory=dict)
    description: str | None = None
    source: str | None = None


# Finalized, immutable schema objects


@dataclass(frozen=True)
class ArgumentDefinition:
    name: str
    type: GraphQLType
    default: Any = _UNSET
    description: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    type: GraphQLType
    resolver: Resolver
    args: Mapping[str, ArgumentDefinition]
    description: str | None = None


@dataclass(frozen=True, eq=False)
class ObjectType:
    name: str
    fields: Mapping[str, FieldDefinition]
    description: str | None = None

    def __str__(self) -> str:
        return self.name


GraphQLType = ScalarType | ObjectType | ListType | NonNullType


def property_resolver(source: str) -> Resolver:
    """Build a resolver that reads ``source`` from the parent by attribute or key."""

    def resolve(parent: Any, args: dict[str, Any], context: Any) -> Any:
        _ = args, context
        if parent is None:
            return None
        if isinstance(parent, Mapping):
            return parent.get(source)
        return getattr(parent, source, None)

    resolve.__name__ = f"resolve_{source}"
    return resolve


class Schema:
    """Immutable result of ``SchemaRegistry.finalize()``."""

    def __init__(
        self,
        types: dict[str, ObjectType],
        roots: dict[str, ObjectType],
    ):
        self._types = MappingProxyType(dict(types))
        self._roots = MappingProxyType(dict(roots))

    @property
    def types(self) -> Mapping[str, ObjectType]:
        return self._types

    @property
    def query_type(self) -> ObjectType:
        return self._roots[QUERY]

    @property
    def mutation_type(self) -> ObjectType | None:
        return self._roots.get(MUTATION)

    def root(self, kind: str) -> ObjectType | None:
        """Return the root type for ``"query"`` or ``"mutation"``."""
        return self._roots.get(kind)

    def get_type(self, name: str) -> ScalarType | ObjectType | None:
        if name in BUILTIN_SCALARS:
            return BUILTIN_SCALARS[name]
        return self._types.get(name)

    def print(self) -> str:
        """Render the schema as SDL text."""
        blocks: list[str] = []

        root_lines = [f"  {kind}: {root.name}" for kind, root in self._roots.items()]
        blocks.append("schema {\n" + "\n".join(root_lines) + "\n}")

        for object_type in [*self._roots.values(), *self._types.values()]:
            blocks.append(_print_object_type(object_type))

        return "\n\n".join(blocks) + "\n"


def _print_object_type(object_type: ObjectType) -> str:
    lines: list[str] = []
    if object_type.description:
        lines.append(f'"""{object_type.description}"""')
    lines.append(f"type {object_type.name} {{")
    for definition in object_type.fields.values():
        if definition.description:
            lines.append(f'  """{definition.description}"""')
        args = ""
        if definition.args:
            rendered = []
            for arg in definition.args.values():
                text = f"{arg.name}: {arg.type}"
                if arg.has_default:
                    text += f" = {_print_literal(arg.default)}"
                rendered.append(text)
            args = "(" + ", ".join(rendered) + ")"
        lines.append(f"  {definition.name}{args}: {definition.type}")
    lines.append("}")
    return "\n".join(lines)


def _print_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if isinstance(value, list):
        return "[" + ", ".join(_print_literal(item) for item in value) + "]"
    return str(value)


class SchemaRegistry:
    """
    Builder for a ``Schema``.

    Object types and roots are registered by name; references between them are
    resolved once in ``finalize()`` so every construction error surfaces at
    start-up.
    """

    def __init__(self):
        self._types: dict[str, tuple[dict[str, Field], str | None]] = {}
        self._roots: dict[str, tuple[str, dict[str, Field]]] = {}
        self._finalized = False

    def define_type(
        self, name: str, fields: Mapping[str, Field], description: str | None = None
    ) -> None:
        """
        Register an object type.

        Args:
            name: Type name, unique across types, roots and built-in scalars
            fields: Ordered mapping of field name to ``Field``
            description: Optional description printed in SDL

        Raises:
            DuplicateTypeError: If the name is already taken
            SchemaError: If the registry is already finalized or ``fields`` is empty
        """
        self._check_open()
        self._check_name_free(name)
        if not fields:
            raise SchemaError(f"Type '{name}' must define at least one field")

        logger.debug("Registering type", name=name, fields=list(fields))
        self._types[name] = (dict(fields), description)

    def define_root(
        self, kind: str, fields: Mapping[str, Field], name: str | None = None
    ) -> None:
        """
        Register the Query or Mutation root.

        Every root field must carry its own resolver; roots have no parent
        value for a default accessor to read from.

        Raises:
            DuplicateTypeError: If this root (or a type with its name) already exists
            SchemaError: On unknown kind, missing resolvers, or a finalized registry
        """
        self._check_open()
        if kind not in ROOT_KINDS:
            raise SchemaError(f"Unknown root kind '{kind}', expected one of {ROOT_KINDS}")
        if kind in self._roots:
            raise DuplicateTypeError(f"The {kind} root is already registered")

        root_name = name or DEFAULT_ROOT_NAMES[kind]
        self._check_name_free(root_name)
        if not fields:
            raise SchemaError(f"Root '{root_name}' must define at least one field")

        for field_name, definition in fields.items():
            if definition.resolver is None:
                raise SchemaError(f"Root field '{root_name}.{field_name}' has no resolver")

        logger.debug("Registering root", kind=kind, name=root_name, fields=list(fields))
        self._roots[kind] = (root_name, dict(fields))

    def finalize(self) -> Schema:
        """
        Resolve all type references and freeze the schema.

        Raises:
            UnknownTypeError: If a field or argument references an unregistered type
            SchemaError: If no Query root is registered or an argument type is not a scalar
        """
        self._check_open()
        if QUERY not in self._roots:
            raise SchemaError("A schema requires a query root")

        # Placeholders first so object types can reference each other in any order.
        objects: dict[str, ObjectType] = {}
        field_maps: dict[str, dict[str, FieldDefinition]] = {}
        pending: list[tuple[str, dict[str, Field], str | None, bool]] = [
            (type_name, fields, description, False)
            for type_name, (fields, description) in self._types.items()
        ]
        pending.extend(
            (root_name, fields, None, True) for root_name, fields in self._roots.values()
        )
        for type_name, _, description, _ in pending:
            field_maps[type_name] = {}
            objects[type_name] = ObjectType(
                name=type_name,
                fields=MappingProxyType(field_maps[type_name]),
                description=description,
            )

        for type_name, fields, _, _ in pending:
            for field_name, declared in fields.items():
                output_type = self._resolve_ref(declared.type, objects, f"{type_name}.{field_name}")
                arguments = {
                    arg_name: self._build_argument(arg_name, arg, objects, type_name, field_name)
                    for arg_name, arg in declared.args.items()
                }
                resolver = declared.resolver or property_resolver(declared.source or field_name)
                field_maps[type_name][field_name] = FieldDefinition(
                    name=field_name,
                    type=output_type,
                    resolver=resolver,
                    args=MappingProxyType(arguments),
                    description=declared.description,
                )

        types = {name: objects[name] for name in self._types}
        roots = {kind: objects[root_name] for kind, (root_name, _) in self._roots.items()}

        self._finalized = True
        logger.info("Schema finalized", types=list(types), roots=list(roots))
        return Schema(types=types, roots=roots)

    def _build_argument(
        self,
        arg_name: str,
        arg: Argument,
        objects: dict[str, ObjectType],
        type_name: str,
        field_name: str,
    ) -> ArgumentDefinition:
        location = f"{type_name}.{field_name}({arg_name})"
        arg_type = self._resolve_ref(arg.type, objects, location)
        if not isinstance(named_type(arg_type), ScalarType):
            raise SchemaError(f"Argument {location} must be a scalar or list of scalars")
        return ArgumentDefinition(
            name=arg_name, type=arg_type, default=arg.default, description=arg.description
        )

    def _resolve_ref(
        self, ref: str, objects: dict[str, ObjectType], location: str
    ) -> GraphQLType:
        type_name, wrap = parse_type_ref(ref)
        resolved: ScalarType | ObjectType | None = BUILTIN_SCALARS.get(type_name) or objects.get(
            type_name
        )
        if resolved is None:
            raise UnknownTypeError(f"Unknown type '{type_name}' referenced by {location}")
        return wrap(resolved)

    def _check_open(self) -> None:
        if self._finalized:
            raise SchemaError("Schema registry is finalized and can no longer be modified")

    def _check_name_free(self, name: str) -> None:
        taken = (
            name in BUILTIN_SCALARS
            or name in self._types
            or any(root_name == name for root_name, _ in self._roots.values())
        )
        if taken:
            raise DuplicateTypeError(f"Type '{name}' is already registered")
