"""Per-run records built by discovery and read by the emitters.

Records are frozen: emitters only read them.  Nothing here outlives one
generation run.
"""

from __future__ import annotations

from dataclasses import dataclass

from grpcwiz.domain.descriptors import (
    InterfaceDescriptor,
    MethodDescriptor,
    ModelDescriptor,
    ServiceDescriptor,
)
from grpcwiz.domain.mapping import map_type, wire_field_name
from grpcwiz.domain.types import Cardinality, TypeRef


@dataclass(frozen=True)
class FieldDescriptor:
    """One message field with its wire mapping and tag number."""

    name: str
    domain_type: TypeRef
    wire_type: str
    cardinality: Cardinality
    ordinal: int
    is_nested_message: bool
    wire_name: str
    nullable: bool = False

    @property
    def has_presence(self) -> bool:
        """Declared ``optional`` on the wire so an unset value reads back as None.

        Message fields track presence already and repeated fields cannot.
        """
        return (
            self.nullable
            and self.cardinality is not Cardinality.REPEATED
            and not self.is_nested_message
        )

    @property
    def declaration(self) -> str:
        if self.cardinality is Cardinality.REPEATED:
            return f"repeated {self.wire_type}"
        if self.has_presence:
            return f"optional {self.wire_type}"
        return self.wire_type


@dataclass(frozen=True)
class MessageDescriptor:
    name: str
    fields: tuple[FieldDescriptor, ...]
    module: str | None = None

    @classmethod
    def from_model(cls, model: ModelDescriptor) -> MessageDescriptor:
        """Derive the message from *model*; ordinals follow declaration order."""
        fields: list[FieldDescriptor] = []
        for ordinal, spec in enumerate(model.fields, start=1):
            wire = map_type(spec.type)
            fields.append(
                FieldDescriptor(
                    name=spec.name,
                    domain_type=spec.type,
                    wire_type=wire.type,
                    cardinality=wire.cardinality,
                    ordinal=ordinal,
                    is_nested_message=wire.nested,
                    wire_name=wire_field_name(spec.name, spec.type),
                    nullable=spec.nullable,
                )
            )
        return cls(name=model.name, fields=tuple(fields), module=model.module)

    def nested_models(self) -> list[str]:
        """Model names referenced by fields, first occurrence order."""
        names: list[str] = []
        for f in self.fields:
            ref = f.domain_type.referenced_model()
            if ref is not None and ref not in names:
                names.append(ref)
        return names


@dataclass(frozen=True)
class ServiceRecord:
    """One discovered service and the models it touches.

    Attributes:
        service: The service descriptor carrying the marker.
        interface: The interface defining the wire contract.
        short_name: Service name without the ``Service`` suffix.
        referenced_models: Every model reachable from the marker and from
            method signatures, in emission order.
    """

    service: ServiceDescriptor
    interface: InterfaceDescriptor
    short_name: str
    referenced_models: tuple[str, ...]

    @property
    def methods(self) -> tuple[MethodDescriptor, ...]:
        return self.interface.methods

    @property
    def name(self) -> str:
        return self.service.name
