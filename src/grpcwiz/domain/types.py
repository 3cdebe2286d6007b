"""Field kinds and type references for domain model fields.

A field's domain type is described by a :class:`TypeRef`, a closed tagged
variant over :class:`FieldKind`.  Sequence kinds carry an ``element`` and
message kinds carry the referenced ``model`` name.  Descriptor files spell
types as short strings (``"int32"``, ``"list[Person]"``) which
:func:`parse_type` turns into a TypeRef.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, model_validator


class FieldKind(StrEnum):
    """Every domain field kind the generator understands."""

    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    BOOL = "bool"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"
    ARRAY = "array"
    LIST = "list"
    MESSAGE = "message"


class Cardinality(StrEnum):
    """How a field is laid out on the wire."""

    SCALAR = "scalar"
    REPEATED = "repeated"
    BYTES = "bytes"


SCALAR_KINDS: frozenset[FieldKind] = frozenset(
    {
        FieldKind.INT32,
        FieldKind.INT64,
        FieldKind.UINT32,
        FieldKind.UINT64,
        FieldKind.BOOL,
        FieldKind.FLOAT,
        FieldKind.DOUBLE,
        FieldKind.DECIMAL,
        FieldKind.STRING,
        FieldKind.TIMESTAMP,
    }
)

# Kinds whose domain values are plain Python value types.  They are
# None-checked only when the field is declared nullable.
VALUE_KINDS: frozenset[FieldKind] = frozenset(
    {
        FieldKind.INT32,
        FieldKind.INT64,
        FieldKind.UINT32,
        FieldKind.UINT64,
        FieldKind.BOOL,
        FieldKind.FLOAT,
        FieldKind.DOUBLE,
        FieldKind.DECIMAL,
        FieldKind.TIMESTAMP,
    }
)

SEQUENCE_KINDS: frozenset[FieldKind] = frozenset({FieldKind.ARRAY, FieldKind.LIST})

# Aliases accepted by parse_type, keyed by lowercase spelling.
_ALIASES: dict[str, FieldKind] = {
    "int": FieldKind.INT32,
    "long": FieldKind.INT64,
    "uint": FieldKind.UINT32,
    "ulong": FieldKind.UINT64,
    "boolean": FieldKind.BOOL,
    "single": FieldKind.FLOAT,
    "str": FieldKind.STRING,
    "datetime": FieldKind.TIMESTAMP,
    "byte[]": FieldKind.BYTES,
}

_SEQUENCE_RE = re.compile(r"^(list|array)\[(?P<inner>.+)\]$", re.IGNORECASE)
_ARRAY_SUFFIX_RE = re.compile(r"^(?P<inner>.+)\[\]$")
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_OPTIONAL_RE = re.compile(r"^optional\[(?P<inner>.+)\]$", re.IGNORECASE)


class TypeRef(BaseModel):
    """Reference to the domain type of one field."""

    model_config = {"frozen": True}

    kind: FieldKind
    element: TypeRef | None = None
    model: str | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> Self:
        if self.kind in SEQUENCE_KINDS:
            if self.element is None:
                msg = f"{self.kind} type requires an element type"
                raise ValueError(msg)
        elif self.element is not None:
            msg = f"{self.kind} type cannot carry an element type"
            raise ValueError(msg)
        if self.kind is FieldKind.MESSAGE:
            if not self.model:
                msg = "message type requires a model name"
                raise ValueError(msg)
        elif self.model is not None:
            msg = f"{self.kind} type cannot reference a model"
            raise ValueError(msg)
        return self

    @classmethod
    def scalar(cls, kind: FieldKind) -> TypeRef:
        return cls(kind=kind)

    @classmethod
    def list_of(cls, element: TypeRef) -> TypeRef:
        return cls(kind=FieldKind.LIST, element=element)

    @classmethod
    def array_of(cls, element: TypeRef) -> TypeRef:
        return cls(kind=FieldKind.ARRAY, element=element)

    @classmethod
    def message(cls, model: str) -> TypeRef:
        return cls(kind=FieldKind.MESSAGE, model=model)

    @property
    def is_sequence(self) -> bool:
        return self.kind in SEQUENCE_KINDS

    @property
    def is_message(self) -> bool:
        return self.kind is FieldKind.MESSAGE

    def referenced_model(self) -> str | None:
        """Model name this type points at, looking through one sequence level."""
        if self.kind is FieldKind.MESSAGE:
            return self.model
        if self.element is not None:
            return self.element.referenced_model()
        return None

    def spelling(self) -> str:
        """Inverse of :func:`parse_type`."""
        if self.kind is FieldKind.MESSAGE:
            return str(self.model)
        if self.element is not None:
            return f"{self.kind}[{self.element.spelling()}]"
        return str(self.kind)


def parse_type(text: str) -> TypeRef:
    """Parse a descriptor-file type spelling into a TypeRef.

    Examples:
        >>> parse_type("int32").kind
        <FieldKind.INT32: 'int32'>
        >>> parse_type("list[Person]").spelling()
        'list[Person]'
        >>> parse_type("string[]").spelling()
        'array[string]'
    """
    spelled = text.strip()
    if not spelled:
        msg = "Empty type spelling"
        raise ValueError(msg)

    lowered = spelled.lower()
    if lowered in _ALIASES:
        return TypeRef.scalar(_ALIASES[lowered])

    if match := _SEQUENCE_RE.match(spelled):
        inner = parse_type(match.group("inner"))
        if match.group(1).lower() == "array":
            return TypeRef.array_of(inner)
        return TypeRef.list_of(inner)

    if match := _ARRAY_SUFFIX_RE.match(spelled):
        return TypeRef.array_of(parse_type(match.group("inner")))

    try:
        kind = FieldKind(lowered)
    except ValueError:
        kind = None
    if kind is not None:
        if kind in SEQUENCE_KINDS or kind is FieldKind.MESSAGE:
            msg = f"Type {spelled!r} needs a parameter"
            raise ValueError(msg)
        return TypeRef.scalar(kind)

    if not _IDENT_RE.match(spelled):
        msg = f"Cannot parse type {spelled!r}"
        raise ValueError(msg)
    return TypeRef.message(spelled)


def parse_field_type(text: str) -> tuple[TypeRef, bool]:
    """Parse a field spelling that may be marked nullable.

    ``T?`` and ``optional[T]`` mark the field nullable; the marker applies to
    the field, never to sequence elements.

    Examples:
        >>> parse_field_type("int64?")[1]
        True
        >>> parse_field_type("optional[Person]")[0].spelling()
        'Person'
    """
    spelled = text.strip()
    if spelled.endswith("?"):
        return parse_type(spelled[:-1]), True
    if match := _OPTIONAL_RE.match(spelled):
        return parse_type(match.group("inner")), True
    return parse_type(spelled), False
