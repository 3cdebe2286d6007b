"""Declarative descriptor files (YAML) -> TypeUniverse.

A descriptor file lists models and services as plain data::

    models:
      Person:
        module: app.models
        fields:
          id: int32
          first_name: string
          tags: list[string]
    services:
      PeopleService:
        models: [Person]
        interfaces:
          IPeopleService:
            get_all:
              params: {request: GetAllPeopleRequest}
              returns: awaitable[PeopleResponse]

Both mappings keyed by name (as above) and lists of ``{name: ...}`` entries
are accepted at every level.  ``returns`` is ``awaitable[T]``,
``stream[T]``, or a bare ``T`` for a synchronous return.  A field spelled
``T?`` or ``optional[T]`` is nullable.  Model, field, service, interface and
method names must be Python identifiers.
"""

from __future__ import annotations

import keyword
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

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
from grpcwiz.domain.types import parse_field_type

logger = logging.getLogger(__name__)

_RETURN_RE = re.compile(r"^(?P<kind>awaitable|stream)(\[(?P<inner>.*)\])?$", re.IGNORECASE)


def _named_entries(value: Any, where: str) -> list[tuple[str, dict[str, Any]]]:
    """Normalize ``{name: body}`` or ``[{name: ..., ...}]`` into ``(name, body)`` pairs."""
    if value is None:
        return []
    if isinstance(value, dict):
        entries = []
        for name, body in value.items():
            if body is not None and not isinstance(body, dict):
                raise DescriptorError(f"{where}.{name} must be a mapping")
            entries.append((str(name), dict(body or {})))
        return entries
    if isinstance(value, list):
        entries = []
        for item in value:
            if not isinstance(item, dict) or "name" not in item:
                raise DescriptorError(f"Every entry under {where} needs a 'name'")
            body = dict(item)
            entries.append((str(body.pop("name")), body))
        return entries
    raise DescriptorError(f"Expected a mapping or list under {where}")


def _pairs(value: Any, where: str) -> list[tuple[str, str]]:
    """``{a: int32}`` or ``[{name: a, type: int32}]`` -> ``[("a", "int32")]``."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [(str(k), str(v)) for k, v in value.items()]
    if isinstance(value, list):
        pairs = []
        for item in value:
            if not isinstance(item, dict) or "name" not in item or "type" not in item:
                raise DescriptorError(f"Every entry under {where} needs 'name' and 'type'")
            pairs.append((str(item["name"]), str(item["type"])))
        return pairs
    raise DescriptorError(f"Expected a mapping or list under {where}")


def parse_returns(text: str | None) -> ReturnSpec:
    """Parse a ``returns`` spelling.

    Examples:
        >>> parse_returns("awaitable[PeopleResponse]").types
        ('PeopleResponse',)
        >>> parse_returns("PeopleResponse").kind
        <ReturnKind.SYNC: 'sync'>
    """
    if text is None or not str(text).strip():
        return ReturnSpec(kind=ReturnKind.SYNC)
    spelled = str(text).strip()
    match = _RETURN_RE.match(spelled)
    if match is None:
        return ReturnSpec(kind=ReturnKind.SYNC, types=(spelled,))
    inner = match.group("inner") or ""
    types = tuple(part.strip() for part in inner.split(",") if part.strip())
    return ReturnSpec(kind=ReturnKind(match.group("kind").lower()), types=types)


def _identifier(name: str, where: str) -> None:
    """Reject names that cannot appear in generated Python code."""
    if not name.isidentifier() or keyword.iskeyword(name):
        raise DescriptorError(f"{where}: {name!r} is not a valid Python identifier", name=name)


def _model(name: str, body: dict[str, Any]) -> ModelDescriptor:
    _identifier(name, "models")
    fields = []
    for field_name, spelled in _pairs(body.get("fields"), f"models.{name}.fields"):
        _identifier(field_name, f"models.{name}.fields")
        try:
            ref, nullable = parse_field_type(spelled)
        except ValueError as exc:
            raise DescriptorError(f"{name}.{field_name}: {exc}", model=name) from exc
        fields.append(FieldSpec(name=field_name, type=ref, nullable=nullable))
    return ModelDescriptor(name=name, fields=tuple(fields), module=body.get("module"))


def _interface(name: str, body: dict[str, Any]) -> InterfaceDescriptor:
    _identifier(name, "interfaces")
    # Interfaces may nest their methods under "methods" or list them directly.
    raw_methods = body.get("methods", body)
    methods = []
    for method_name, method_body in _named_entries(raw_methods, f"interfaces.{name}"):
        _identifier(method_name, f"interfaces.{name}")
        params = tuple(
            ParamDescriptor(name=p, type=t)
            for p, t in _pairs(method_body.get("params"), f"{name}.{method_name}.params")
        )
        methods.append(
            MethodDescriptor(
                name=method_name,
                params=params,
                returns=parse_returns(method_body.get("returns")),
            )
        )
    return InterfaceDescriptor(name=name, methods=tuple(methods))


def _service(name: str, body: dict[str, Any]) -> ServiceDescriptor:
    _identifier(name, "services")
    interfaces = tuple(
        _interface(iface_name, iface_body)
        for iface_name, iface_body in _named_entries(
            body.get("interfaces"), f"services.{name}.interfaces"
        )
    )
    models = body.get("models") or []
    if not isinstance(models, list):
        raise DescriptorError(f"services.{name}.models must be a list")
    return ServiceDescriptor(
        name=name,
        interfaces=interfaces,
        models=tuple(str(m) for m in models),
        module=body.get("module"),
    )


def universe_from_data(data: Any) -> TypeUniverse:
    """Build a TypeUniverse from already-parsed descriptor data."""
    if data is None:
        return TypeUniverse()
    if not isinstance(data, dict):
        raise DescriptorError("Descriptor root must be a mapping with 'models' and 'services'")
    try:
        models = tuple(_model(n, b) for n, b in _named_entries(data.get("models"), "models"))
        services = tuple(
            _service(n, b) for n, b in _named_entries(data.get("services"), "services")
        )
        return TypeUniverse(services=services, models=models)
    except ValidationError as exc:
        raise DescriptorError(f"Invalid descriptor: {exc}") from exc


def load_descriptor_file(path: Path) -> TypeUniverse:
    """Read and parse a YAML descriptor file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptorError(f"Cannot read descriptor file {path}: {exc}", path=str(path)) from exc
    try:
        data = YAML(typ="safe").load(raw)
    except YAMLError as exc:
        raise DescriptorError(f"Invalid YAML in {path}: {exc}", path=str(path)) from exc
    universe = universe_from_data(data)
    logger.debug(
        "Loaded %s: %d services, %d models", path, len(universe.services), len(universe.models)
    )
    return universe
