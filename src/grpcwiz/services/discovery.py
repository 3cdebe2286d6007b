"""Discovery and graph building: TypeUniverse -> ordered service records.

Builds one NetworkX DiGraph per run with a node per service and per model.
Edges run service -> model (explicit marker models and method signatures)
and model -> model (nested field references).  Each service's referenced
models are the explicit models first, then each method's input and output,
with every newly seen model followed by its nested references in field
order (DFS preorder, first occurrence wins).

All validation happens here, before any text is rendered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import networkx as nx

from grpcwiz.domain import naming
from grpcwiz.domain.descriptors import ModelDescriptor, TypeUniverse
from grpcwiz.domain.errors import ErrorCode, GenerationError
from grpcwiz.domain.records import MessageDescriptor, ServiceRecord
from grpcwiz.domain.validation import resolve_interface, validate_interface, validate_service_name

logger = logging.getLogger(__name__)

type _Node = tuple[str, str]


def _model_node(name: str) -> _Node:
    return ("model", name)


def _service_node(name: str) -> _Node:
    return ("service", name)


@dataclass(frozen=True)
class DiscoveryPlan:
    """Everything the emitters need, computed before any emission starts.

    Attributes:
        records: Service records in discovery order.
        messages: Message descriptors for every referenced model, keyed by
            name, in first-reference order.
        graph: The service/model reference graph.
        unused_models: Declared models no service reaches.
    """

    records: tuple[ServiceRecord, ...]
    messages: dict[str, MessageDescriptor]
    graph: nx.DiGraph = field(repr=False)
    unused_models: tuple[str, ...] = ()

    def message_order(self) -> list[str]:
        """Distinct message names in run emission order."""
        order: list[str] = []
        for record in self.records:
            for name in record.referenced_models:
                if name not in order:
                    order.append(name)
        return order


def build_model_graph(models: dict[str, ModelDescriptor]) -> nx.DiGraph:
    """Add every model and its nested references to a fresh DiGraph."""
    g: nx.DiGraph = nx.DiGraph()
    for model in models.values():
        g.add_node(_model_node(model.name), kind="model")
    for model in models.values():
        for spec in model.fields:
            ref = spec.type.referenced_model()
            if ref is None:
                continue
            if ref not in models:
                raise GenerationError(
                    ErrorCode.UNKNOWN_MODEL,
                    f"Unknown model type '{ref}' referenced by {model.name}.{spec.name}",
                    model=ref,
                )
            g.add_edge(_model_node(model.name), _model_node(ref), field=spec.name)
    return g


def _reach(g: nx.DiGraph, name: str, order: list[str]) -> None:
    for node in nx.dfs_preorder_nodes(g, _model_node(name)):
        kind, model = node
        if kind == "model" and model not in order:
            order.append(model)


def check_generated_names(
    records: list[ServiceRecord], messages: dict[str, MessageDescriptor]
) -> None:
    """Reject emitted names that would clash in the schema or the output tree.

    Distinct models can still share a converter module (``HTTPStatus`` and
    ``HttpStatus``), and a service's wire name shares the proto namespace
    with the messages.
    """
    converters: dict[str, str] = {}
    for name in messages:
        module = naming.converter_module(name)
        previous = converters.get(module)
        if previous is not None:
            raise GenerationError(
                ErrorCode.NAME_COLLISION,
                f"Models {previous} and {name} both generate the converter module '{module}'",
                model=name,
            )
        converters[module] = name

    for record in records:
        if record.short_name in messages:
            wire = naming.wire_service_name(record.short_name)
            raise GenerationError(
                ErrorCode.NAME_COLLISION,
                f"Service {record.name} and model {record.short_name} both generate "
                f"'{wire}' in the schema",
                service=record.name,
            )


def discover(universe: TypeUniverse) -> DiscoveryPlan:
    """Validate *universe* and build the per-run service records."""
    if universe.is_empty:
        raise GenerationError(ErrorCode.NO_TYPES, "Type universe has no types")
    if not universe.services:
        raise GenerationError(
            ErrorCode.NO_SERVICES, "Service classes must have the service marker"
        )

    models = universe.model_table()
    g = build_model_graph(models)

    def require(name: str, where: str) -> None:
        if name not in models:
            raise GenerationError(
                ErrorCode.UNKNOWN_MODEL,
                f"Unknown model type '{name}' referenced by {where}",
                model=name,
            )

    records: list[ServiceRecord] = []
    adapter_modules: dict[str, str] = {}
    for service in universe.services:
        short = validate_service_name(service)
        module = naming.adapter_module(short)
        previous = adapter_modules.get(module)
        if previous is not None:
            raise GenerationError(
                ErrorCode.NAME_COLLISION,
                f"Services {previous} and {service.name} both generate the module '{module}'",
                service=service.name,
            )
        adapter_modules[module] = service.name

        interface = resolve_interface(service)
        validate_interface(interface)

        svc = _service_node(service.name)
        g.add_node(svc, kind="service")
        order: list[str] = []
        for name in service.models:
            require(name, service.name)
            g.add_edge(svc, _model_node(name), via="marker")
            _reach(g, name, order)
        for method in interface.methods:
            in_type = method.params[0].type
            out_type = method.returns.types[0]
            require(in_type, f"{interface.name}.{method.name}")
            require(out_type, f"{interface.name}.{method.name}")
            g.add_edge(svc, _model_node(in_type), via=method.name)
            g.add_edge(svc, _model_node(out_type), via=method.name)
            _reach(g, in_type, order)
            _reach(g, out_type, order)

        records.append(
            ServiceRecord(
                service=service,
                interface=interface,
                short_name=short,
                referenced_models=tuple(order),
            )
        )
        logger.debug(
            "Discovered %s (%d methods, %d models)",
            service.name,
            len(interface.methods),
            len(order),
        )

    messages: dict[str, MessageDescriptor] = {}
    for record in records:
        for name in record.referenced_models:
            if name not in messages:
                messages[name] = MessageDescriptor.from_model(models[name])

    check_generated_names(records, messages)
    unused = tuple(name for name in models if name not in messages)
    return DiscoveryPlan(
        records=tuple(records),
        messages=messages,
        graph=g,
        unused_models=unused,
    )
