"""Service Adapter and Client Proxy emitters.

The adapter subclasses the servicer base that ``grpc_tools`` generates from
the schema and forwards each RPC to the domain service.  The proxy wraps the
generated stub and exposes the domain interface's methods.  Both reach the
converters only through names from :mod:`grpcwiz.domain.naming`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from grpcwiz.domain import naming
from grpcwiz.domain.records import MessageDescriptor, ServiceRecord
from grpcwiz.emitters.context import EmitContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RpcBinding:
    """One interface method seen from both ends of the wire."""

    rpc: str
    method: str
    request_model: str
    response_model: str
    request_message: str
    response_message: str
    request_converter: str
    response_converter: str


def bind_methods(record: ServiceRecord) -> tuple[RpcBinding, ...]:
    bindings: list[RpcBinding] = []
    for method in record.methods:
        in_model = method.params[0].type
        out_model = method.returns.types[0]
        bindings.append(
            RpcBinding(
                rpc=naming.rpc_name(method.name),
                method=method.name,
                request_model=in_model,
                response_model=out_model,
                request_message=naming.message_name(in_model),
                response_message=naming.message_name(out_model),
                request_converter=naming.converter_module(in_model),
                response_converter=naming.converter_module(out_model),
            )
        )
    return tuple(bindings)


def _converter_modules(bindings: tuple[RpcBinding, ...]) -> list[str]:
    return sorted({b.request_converter for b in bindings} | {b.response_converter for b in bindings})


def _model_imports(
    bindings: tuple[RpcBinding, ...],
    messages: Mapping[str, MessageDescriptor],
    context: EmitContext,
) -> dict[str, list[str]]:
    """Domain model imports grouped by module, both sorted."""
    grouped: dict[str, set[str]] = {}
    for b in bindings:
        for model in (b.request_model, b.response_model):
            module = context.model_module(messages[model].module)
            grouped.setdefault(module, set()).add(model)
    return {module: sorted(names) for module, names in sorted(grouped.items())}


def _template_vars(
    record: ServiceRecord,
    messages: Mapping[str, MessageDescriptor],
    context: EmitContext,
) -> dict[str, object]:
    bindings = bind_methods(record)
    short = record.short_name
    return {
        "service": record.name,
        "service_module": context.service_module(record.service.module),
        "service_attr": naming.snake_case(record.name),
        "wire_service": naming.wire_service_name(short),
        "shared_package": context.shared_package,
        "converters_package": context.converters_package,
        "pb2": context.pb2,
        "pb2_grpc": context.pb2_grpc,
        "converter_modules": _converter_modules(bindings),
        "model_imports": _model_imports(bindings, messages, context),
        "rpcs": bindings,
        "to_wire": naming.to_wire_function,
        "from_wire": naming.from_wire_function,
    }


class AdapterEmitter:
    """Render ``server/services/grpc_<short>_service.py``."""

    def __init__(self, context: EmitContext) -> None:
        self._context = context

    def emit(self, record: ServiceRecord, messages: Mapping[str, MessageDescriptor]) -> str:
        values = _template_vars(record, messages, self._context)
        short = record.short_name
        values.update(
            adapter=naming.adapter_class(short),
            servicer_base=naming.servicer_base(short),
            register=naming.register_function(short),
        )
        template = self._context.environment("services").get_template("adapter.py.j2")
        logger.debug("Adapter %s", naming.adapter_class(short))
        return template.render(**values)


class ProxyEmitter:
    """Render ``client/services/<short>_client.py``."""

    def __init__(self, context: EmitContext) -> None:
        self._context = context

    def emit(self, record: ServiceRecord, messages: Mapping[str, MessageDescriptor]) -> str:
        values = _template_vars(record, messages, self._context)
        short = record.short_name
        values.update(proxy=naming.proxy_class(short), stub=naming.stub_class(short))
        template = self._context.environment("services").get_template("proxy.py.j2")
        logger.debug("Proxy %s", naming.proxy_class(short))
        return template.render(**values)
