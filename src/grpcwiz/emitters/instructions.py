"""Instructions Emitter: the README that tells users how to wire things up."""

from __future__ import annotations

from collections.abc import Mapping

from grpcwiz.domain import naming
from grpcwiz.domain.records import MessageDescriptor, ServiceRecord
from grpcwiz.emitters.context import EmitContext
from grpcwiz.emitters.services import bind_methods


def render_instructions(
    records: tuple[ServiceRecord, ...],
    messages: Mapping[str, MessageDescriptor],
    context: EmitContext,
    requirements: list[str],
) -> str:
    """Render ``README.txt`` for one run.

    *requirements* are pip requirement lines, already resolved by
    :mod:`grpcwiz.infrastructure.versions`.
    """
    services = [
        {
            "name": record.name,
            "attr": naming.snake_case(record.name),
            "adapter_module": naming.adapter_module(record.short_name),
            "proxy_module": naming.proxy_module(record.short_name),
            "proxy": naming.proxy_class(record.short_name),
            "service_module": context.service_module(record.service.module),
        }
        for record in records
    ]
    sample = None
    sample_record = None
    for record in records:
        bindings = bind_methods(record)
        if bindings:
            sample, sample_record = bindings[0], record
            break
    template = context.environment("instructions").get_template("README.txt.j2")
    return template.render(
        namespace=context.namespace,
        namespace_path=context.namespace.replace(".", "/"),
        proto_file=context.proto_file,
        requirements=requirements,
        services=services,
        sample=sample,
        sample_proxy=naming.proxy_class(sample_record.short_name) if sample_record else "",
        sample_proxy_module=naming.proxy_module(sample_record.short_name) if sample_record else "",
        sample_request_module=(
            context.model_module(messages[sample.request_model].module) if sample else ""
        ),
    )
