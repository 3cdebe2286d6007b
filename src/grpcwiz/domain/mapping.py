"""Type Mapper: domain field type -> proto3 wire type and cardinality.

Rules, checked in priority order:

1. Scalars map to the matching proto scalar.  ``decimal`` becomes
   ``double`` (lossy) and ``timestamp`` becomes ``int64`` epoch microseconds
   with the wire field renamed ``dt_<name>``.
2. ``bytes`` maps to ``bytes`` (not repeated).
3. ``array[T]`` maps to ``repeated`` + the element's mapping.
4. ``list[T]`` maps exactly like an array.
5. ``message`` maps to a nested ``Grpc_<Model>`` reference.

The mapper is a pure function.  Anything outside the table raises
:class:`~grpcwiz.domain.errors.UnsupportedTypeError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from grpcwiz.domain.errors import UnsupportedTypeError
from grpcwiz.domain.naming import message_name
from grpcwiz.domain.types import Cardinality, FieldKind, TypeRef

TIMESTAMP_PREFIX = "dt_"

SCALAR_WIRE_TYPES: dict[FieldKind, str] = {
    FieldKind.INT32: "int32",
    FieldKind.INT64: "int64",
    FieldKind.UINT32: "uint32",
    FieldKind.UINT64: "uint64",
    FieldKind.BOOL: "bool",
    FieldKind.FLOAT: "float",
    FieldKind.DOUBLE: "double",
    FieldKind.DECIMAL: "double",
    FieldKind.STRING: "string",
    FieldKind.TIMESTAMP: "int64",
}


@dataclass(frozen=True)
class WireType:
    """Result of mapping one domain type.

    Attributes:
        type: Proto type token without the ``repeated`` keyword.
        cardinality: Scalar, repeated, or bytes.
        nested: True when ``type`` names another generated message.
    """

    type: str
    cardinality: Cardinality
    nested: bool = False

    @property
    def declaration(self) -> str:
        """Type as written in a proto field line."""
        if self.cardinality is Cardinality.REPEATED:
            return f"repeated {self.type}"
        return self.type


def _element_wire_type(element: TypeRef) -> tuple[str, bool]:
    """Map a sequence element to ``(proto type, nested)``."""
    match element.kind:
        case (
            FieldKind.INT32
            | FieldKind.INT64
            | FieldKind.UINT32
            | FieldKind.UINT64
            | FieldKind.BOOL
            | FieldKind.FLOAT
            | FieldKind.DOUBLE
            | FieldKind.DECIMAL
            | FieldKind.STRING
            | FieldKind.TIMESTAMP
        ):
            return SCALAR_WIRE_TYPES[element.kind], False
        case FieldKind.BYTES:
            return "bytes", False
        case FieldKind.MESSAGE:
            return message_name(str(element.model)), True
        case FieldKind.ARRAY | FieldKind.LIST:
            msg = f"Nested sequences are not supported: {element.spelling()!r} inside a sequence"
            raise UnsupportedTypeError(msg, type=element.spelling())
        case _:
            assert_never(element.kind)


def map_type(ref: TypeRef) -> WireType:
    """Map a domain type reference to its wire type."""
    match ref.kind:
        case (
            FieldKind.INT32
            | FieldKind.INT64
            | FieldKind.UINT32
            | FieldKind.UINT64
            | FieldKind.BOOL
            | FieldKind.FLOAT
            | FieldKind.DOUBLE
            | FieldKind.DECIMAL
            | FieldKind.STRING
            | FieldKind.TIMESTAMP
        ):
            return WireType(SCALAR_WIRE_TYPES[ref.kind], Cardinality.SCALAR)
        case FieldKind.BYTES:
            return WireType("bytes", Cardinality.BYTES)
        case FieldKind.ARRAY | FieldKind.LIST:
            if ref.element is None:
                msg = f"Sequence type {ref.kind} has no element type"
                raise UnsupportedTypeError(msg, type=str(ref.kind))
            wire, nested = _element_wire_type(ref.element)
            return WireType(wire, Cardinality.REPEATED, nested=nested)
        case FieldKind.MESSAGE:
            return WireType(message_name(str(ref.model)), Cardinality.SCALAR, nested=True)
        case _:
            assert_never(ref.kind)


def wire_field_name(field_name: str, ref: TypeRef) -> str:
    """Wire name of a field; timestamps get the ``dt_`` prefix."""
    if ref.kind is FieldKind.TIMESTAMP:
        return f"{TIMESTAMP_PREFIX}{field_name}"
    return field_name
