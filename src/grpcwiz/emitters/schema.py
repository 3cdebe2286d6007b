"""Schema Emitter: service records -> one proto3 schema.

For each record, in discovery order, the emitter renders a service block
with one rpc line per method.  It then renders a message block for every
referenced model not yet emitted in this run.  The run-scoped set of
emitted names is the only mutable state and has a single writer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from grpcwiz.domain import naming
from grpcwiz.domain.records import MessageDescriptor, ServiceRecord
from grpcwiz.emitters.context import EmitContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RpcLine:
    name: str
    request: str
    response: str


@dataclass(frozen=True)
class ServiceBlock:
    name: str
    rpcs: tuple[RpcLine, ...]
    messages: tuple[MessageDescriptor, ...]


@dataclass
class SchemaEmitter:
    """Accumulates service and message blocks for one run."""

    context: EmitContext
    _emitted: set[str] = field(default_factory=set)
    _blocks: list[ServiceBlock] = field(default_factory=list)

    @property
    def emitted_messages(self) -> frozenset[str]:
        return frozenset(self._emitted)

    def emit_service(
        self,
        record: ServiceRecord,
        messages: Mapping[str, MessageDescriptor],
    ) -> ServiceBlock:
        """Add *record*'s service block and any messages it introduces."""
        rpcs = tuple(
            RpcLine(
                name=naming.rpc_name(method.name),
                request=naming.message_name(method.params[0].type),
                response=naming.message_name(method.returns.types[0]),
            )
            for method in record.methods
        )
        fresh: list[MessageDescriptor] = []
        for name in record.referenced_models:
            if name in self._emitted:
                continue
            self._emitted.add(name)
            fresh.append(messages[name])

        block = ServiceBlock(
            name=naming.wire_service_name(record.short_name),
            rpcs=rpcs,
            messages=tuple(fresh),
        )
        self._blocks.append(block)
        logger.debug(
            "Schema block %s: %d rpcs, %d new messages", block.name, len(rpcs), len(fresh)
        )
        return block

    def render(self) -> str:
        template = self.context.environment("schema").get_template("wire.proto.j2")
        return template.render(
            package=self.context.proto_package,
            services=self._blocks,
            message_name=naming.message_name,
        )


def render_schema(
    records: tuple[ServiceRecord, ...],
    messages: Mapping[str, MessageDescriptor],
    context: EmitContext,
) -> str:
    """One-shot rendering of every record."""
    emitter = SchemaEmitter(context)
    for record in records:
        emitter.emit_service(record, messages)
    return emitter.render()
