"""Typed registration calls that build a :class:`TypeUniverse` from Python classes.

The host program marks its interfaces, services, and (optionally) models::

    wiz = Registry()

    @wiz.model
    @dataclass
    class Person:
        id: Int32
        first_name: str = ""

    @wiz.interface
    class PeopleServiceProtocol(Protocol):
        async def get_all(self, request: GetAllPeopleRequest) -> PeopleResponse: ...

    @wiz.service(Person)
    class PeopleService(PeopleServiceProtocol):
        ...

    universe = wiz.build()

Introspection happens here, once, when :meth:`Registry.build` runs.  The
generator itself only ever sees the resulting descriptors.

Python types map to field kinds as follows: ``int`` -> int64, ``float`` ->
double, ``bool``, ``str``, ``bytes``, ``Decimal``, ``datetime``,
``list[T]`` -> list, ``tuple[T, ...]`` -> array, and any
other class -> nested message.  A field annotated ``T | None`` is nullable:
it round-trips None through proto3 presence.  Use the ``Annotated`` aliases below
(:data:`Int32`, :data:`UInt32`, :data:`Float32`, ...) to pick a narrower
wire width.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import logging
import types
import typing
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, TypeVar

from grpcwiz.domain.descriptors import (
    FieldSpec,
    InterfaceDescriptor,
    MethodDescriptor,
    ModelDescriptor,
    ParamDescriptor,
    ReturnKind,
    ReturnSpec,
    ServiceDescriptor,
    TypeUniverse,
)
from grpcwiz.domain.errors import DescriptorError
from grpcwiz.domain.types import SCALAR_KINDS, FieldKind, TypeRef

logger = logging.getLogger(__name__)

_C = TypeVar("_C", bound=type)

Int32 = Annotated[int, FieldKind.INT32]
Int64 = Annotated[int, FieldKind.INT64]
UInt32 = Annotated[int, FieldKind.UINT32]
UInt64 = Annotated[int, FieldKind.UINT64]
Float32 = Annotated[float, FieldKind.FLOAT]
Float64 = Annotated[float, FieldKind.DOUBLE]

_PY_SCALARS: dict[Any, FieldKind] = {
    bool: FieldKind.BOOL,
    int: FieldKind.INT64,
    float: FieldKind.DOUBLE,
    str: FieldKind.STRING,
    Decimal: FieldKind.DECIMAL,
    datetime: FieldKind.TIMESTAMP,
    bytes: FieldKind.BYTES,
    bytearray: FieldKind.BYTES,
}

_LIST_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_AWAITABLE_ORIGINS = (collections.abc.Awaitable, collections.abc.Coroutine)
_STREAM_ORIGINS = (
    collections.abc.AsyncIterator,
    collections.abc.AsyncIterable,
    collections.abc.AsyncGenerator,
)


def _module_of(cls: type) -> str | None:
    module = getattr(cls, "__module__", None)
    if module in (None, "__main__", "builtins"):
        return None
    return module


def _is_model_class(obj: Any) -> bool:
    return inspect.isclass(obj) and obj.__module__ != "builtins" and obj not in _PY_SCALARS


def _split_optional(hint: Any) -> tuple[Any, bool]:
    """``T | None`` -> ``(T, True)``; anything else passes through."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = typing.get_args(hint)
        present = [a for a in args if a is not type(None)]
        if len(present) == 1 and len(present) < len(args):
            return present[0], True
    return hint, False


class Registry:
    """Collects marked classes and turns them into descriptors."""

    def __init__(self) -> None:
        self._models: list[type] = []
        self._interfaces: list[type] = []
        self._services: list[tuple[type, tuple[type, ...]]] = []

    # -- marking -----------------------------------------------------------

    def model(self, cls: _C) -> _C:
        """Mark *cls* as a domain model (class decorator)."""
        if cls not in self._models:
            self._models.append(cls)
        return cls

    def interface(self, cls: _C) -> _C:
        """Mark *cls* as a service interface (class decorator)."""
        if cls not in self._interfaces:
            self._interfaces.append(cls)
        return cls

    def service(self, *models: type) -> Callable[[_C], _C]:
        """Mark a service implementation and associate *models* with it."""

        def decorator(cls: _C) -> _C:
            self._services.append((cls, models))
            return cls

        return decorator

    # -- building ----------------------------------------------------------

    def build(self) -> TypeUniverse:
        """Introspect every marked class and return the type universe."""
        builder = _UniverseBuilder(self._interfaces)
        for cls in self._models:
            builder.require(cls)
        services = [builder.describe_service(cls, models) for cls, models in self._services]
        universe = TypeUniverse(services=tuple(services), models=builder.drain())
        logger.debug(
            "Registry built %d services and %d models",
            len(universe.services),
            len(universe.models),
        )
        return universe


class _UniverseBuilder:
    """Walks classes reachable from the marked ones, describing each once."""

    def __init__(self, interfaces: list[type]) -> None:
        self._interfaces = interfaces
        self._by_name: dict[str, type] = {}
        self._described: dict[str, ModelDescriptor] = {}
        self._pending: list[type] = []

    def require(self, cls: type) -> str:
        """Queue *cls* for description and return its model name."""
        name = cls.__name__
        existing = self._by_name.get(name)
        if existing is None:
            self._by_name[name] = cls
            self._pending.append(cls)
        elif existing is not cls:
            raise DescriptorError(
                f"Two different classes are named {name!r} "
                f"({existing.__module__} and {cls.__module__})",
                model=name,
            )
        return name

    def drain(self) -> tuple[ModelDescriptor, ...]:
        while self._pending:
            cls = self._pending.pop(0)
            if cls.__name__ not in self._described:
                self._described[cls.__name__] = self._describe_model(cls)
        return tuple(self._described.values())

    # -- models --

    def _describe_model(self, cls: type) -> ModelDescriptor:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except NameError as exc:
            raise DescriptorError(f"Cannot resolve annotations of {cls.__name__}: {exc}") from exc

        if dataclasses.is_dataclass(cls):
            names = [f.name for f in dataclasses.fields(cls)]
        else:
            names = list(hints)

        fields: list[FieldSpec] = []
        for name in names:
            if name.startswith("_") or name not in hints:
                continue
            hint = hints[name]
            if typing.get_origin(hint) is ClassVar:
                continue
            where = f"{cls.__name__}.{name}"
            inner, nullable = _split_optional(hint)
            fields.append(
                FieldSpec(name=name, type=self._type_ref(inner, where), nullable=nullable)
            )
        return ModelDescriptor(name=cls.__name__, fields=tuple(fields), module=_module_of(cls))

    def _type_ref(self, hint: Any, where: str) -> TypeRef:
        origin = typing.get_origin(hint)
        args = typing.get_args(hint)

        if origin is Annotated:
            for meta in args[1:]:
                if isinstance(meta, FieldKind) and (meta in SCALAR_KINDS or meta is FieldKind.BYTES):
                    return TypeRef.scalar(meta)
            return self._type_ref(args[0], where)

        if origin in (typing.Union, types.UnionType):
            if type(None) in args and len(args) == 2:
                raise DescriptorError(
                    f"Only a whole field can be optional, not a sequence element ({where})",
                    field=where,
                )
            raise DescriptorError(f"Union types are not supported ({where})", field=where)

        if origin in _LIST_ORIGINS:
            if len(args) != 1:
                raise DescriptorError(f"List field needs an element type ({where})", field=where)
            return TypeRef.list_of(self._type_ref(args[0], where))

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return TypeRef.array_of(self._type_ref(args[0], where))
            raise DescriptorError(
                f"Only homogeneous tuple[T, ...] fields are supported ({where})", field=where
            )

        if hint in _PY_SCALARS:
            return TypeRef.scalar(_PY_SCALARS[hint])

        if _is_model_class(hint):
            return TypeRef.message(self.require(hint))

        raise DescriptorError(f"Unsupported field type {hint!r} ({where})", field=where)

    # -- services --

    def describe_service(self, cls: type, models: tuple[type, ...]) -> ServiceDescriptor:
        interfaces = [
            self._describe_interface(base)
            for base in cls.__mro__[1:]
            if base in self._interfaces
        ]
        return ServiceDescriptor(
            name=cls.__name__,
            interfaces=tuple(interfaces),
            models=tuple(self.require(m) for m in models),
            module=_module_of(cls),
        )

    def _describe_interface(self, iface: type) -> InterfaceDescriptor:
        methods = [
            self._describe_method(iface, name, member)
            for name, member in vars(iface).items()
            if not name.startswith("_") and inspect.isfunction(member)
        ]
        return InterfaceDescriptor(name=iface.__name__, methods=tuple(methods))

    def _describe_method(self, iface: type, name: str, func: Any) -> MethodDescriptor:
        where = f"{iface.__name__}.{name}"
        try:
            hints = typing.get_type_hints(func)
        except NameError as exc:
            raise DescriptorError(f"Cannot resolve annotations of {where}: {exc}") from exc

        params: list[ParamDescriptor] = []
        for param in list(inspect.signature(func).parameters.values())[1:]:
            hint = hints.get(param.name)
            if hint is None:
                raise DescriptorError(
                    f"Parameter {param.name!r} of {where} has no annotation", method=where
                )
            params.append(ParamDescriptor(name=param.name, type=self._type_name(hint)))

        return MethodDescriptor(name=name, params=tuple(params), returns=self._returns(func, hints))

    def _returns(self, func: Any, hints: dict[str, Any]) -> ReturnSpec:
        ret = hints.get("return", type(None))
        if inspect.isasyncgenfunction(func):
            return ReturnSpec(kind=ReturnKind.STREAM, types=self._result_types(ret))
        if inspect.iscoroutinefunction(func):
            return ReturnSpec(kind=ReturnKind.AWAITABLE, types=self._result_types(ret))

        origin = typing.get_origin(ret)
        args = typing.get_args(ret)
        if origin in _AWAITABLE_ORIGINS and args:
            return ReturnSpec(kind=ReturnKind.AWAITABLE, types=self._result_types(args[-1]))
        if origin in _STREAM_ORIGINS and args:
            return ReturnSpec(kind=ReturnKind.STREAM, types=self._result_types(args[0]))
        return ReturnSpec(kind=ReturnKind.SYNC, types=self._result_types(ret))

    def _result_types(self, hint: Any) -> tuple[str, ...]:
        if hint is None or hint is type(None):
            return ()
        if typing.get_origin(hint) is tuple:
            return tuple(self._type_name(a) for a in typing.get_args(hint) if a is not Ellipsis)
        return (self._type_name(hint),)

    def _type_name(self, hint: Any) -> str:
        if _is_model_class(hint):
            return self.require(hint)
        return getattr(hint, "__name__", repr(hint))
