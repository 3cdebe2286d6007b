"""Type universe descriptors: the plain data the generator consumes.

The host program assembles these, either through
:class:`grpcwiz.registry.Registry` or from a YAML descriptor file, and hands
the resulting :class:`TypeUniverse` to the generator.  Discovery never looks
at source declarations, only at these models.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, model_validator

from grpcwiz.domain.types import TypeRef


class ReturnKind(StrEnum):
    """Shape of a service method's return value."""

    AWAITABLE = "awaitable"
    STREAM = "stream"
    SYNC = "sync"


class FieldSpec(BaseModel):
    """One declared property of a domain model.

    ``nullable`` fields may hold None; on the wire they track presence.
    """

    model_config = {"frozen": True}

    name: str
    type: TypeRef
    nullable: bool = False


class ModelDescriptor(BaseModel):
    """A domain data model, fields in declaration order."""

    model_config = {"frozen": True}

    name: str
    fields: tuple[FieldSpec, ...] = ()
    module: str | None = None

    @model_validator(mode="after")
    def _unique_fields(self) -> Self:
        seen: set[str] = set()
        for spec in self.fields:
            if spec.name in seen:
                msg = f"Model {self.name} declares field {spec.name!r} twice"
                raise ValueError(msg)
            seen.add(spec.name)
        return self


class ParamDescriptor(BaseModel):
    """A method parameter; ``type`` names a model."""

    model_config = {"frozen": True}

    name: str
    type: str


class ReturnSpec(BaseModel):
    """What a method returns: the container shape and the wrapped type names."""

    model_config = {"frozen": True}

    kind: ReturnKind
    types: tuple[str, ...] = ()


class MethodDescriptor(BaseModel):
    model_config = {"frozen": True}

    name: str
    params: tuple[ParamDescriptor, ...] = ()
    returns: ReturnSpec


class InterfaceDescriptor(BaseModel):
    model_config = {"frozen": True}

    name: str
    methods: tuple[MethodDescriptor, ...] = ()


class ServiceDescriptor(BaseModel):
    """A service implementation carrying the service marker.

    Attributes:
        name: Implementation name, expected to end with ``Service``.
        interfaces: Interfaces the implementation declares, in order.
            The first one defines the wire contract.
        models: Model names associated explicitly with the marker.
        module: Dotted import path of the implementation class.
    """

    model_config = {"frozen": True}

    name: str
    interfaces: tuple[InterfaceDescriptor, ...] = ()
    models: tuple[str, ...] = ()
    module: str | None = None


class TypeUniverse(BaseModel):
    """Every declared service and model handed to one generation run."""

    model_config = {"frozen": True}

    services: tuple[ServiceDescriptor, ...] = ()
    models: tuple[ModelDescriptor, ...] = Field(default=())

    @model_validator(mode="after")
    def _unique_models(self) -> Self:
        seen: set[str] = set()
        for model in self.models:
            if model.name in seen:
                msg = f"Model {model.name!r} is declared more than once"
                raise ValueError(msg)
            seen.add(model.name)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.services and not self.models

    def model_named(self, name: str) -> ModelDescriptor | None:
        for model in self.models:
            if model.name == name:
                return model
        return None

    def model_table(self) -> dict[str, ModelDescriptor]:
        return {model.name: model for model in self.models}
