"""Converter Emitter: one message -> one bidirectional converter module.

Each field contributes a few lines in each direction.  The lines are built
here so the rules stay testable without rendering, and the template only
lays them out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from grpcwiz.domain import naming
from grpcwiz.domain.records import FieldDescriptor, MessageDescriptor
from grpcwiz.domain.types import VALUE_KINDS, FieldKind, TypeRef
from grpcwiz.emitters.context import EmitContext

logger = logging.getLogger(__name__)

WIRE_TIME_MODULE = "wire_time"


@dataclass(frozen=True)
class FieldConversion:
    """Generated statements for one field, without indentation."""

    name: str
    to_wire: tuple[str, ...]
    from_wire: tuple[str, ...]


def _guarded(source: str, body: str) -> tuple[str, ...]:
    return (f"if {source} is not None:", f"    {body}")


class _FieldWriter:
    """Builds the statements for one message's fields."""

    def __init__(self, message: MessageDescriptor) -> None:
        self._message = message
        self.nested_modules: list[str] = []
        self.uses_decimal = False
        self.uses_time = False

    def _call(self, model: str, function: str) -> str:
        # Self references stay local to the module being generated.
        if model == self._message.name:
            return function
        module = naming.converter_module(model)
        if module not in self.nested_modules:
            self.nested_modules.append(module)
        return f"{module}.{function}"

    def _element_to_wire(self, element: TypeRef, var: str) -> str | None:
        """Expression converting one domain element, or None for identity."""
        match element.kind:
            case FieldKind.DECIMAL:
                return f"float({var})"
            case FieldKind.TIMESTAMP:
                self.uses_time = True
                return f"to_epoch_micros({var})"
            case FieldKind.BYTES:
                return f"bytes({var})"
            case _:
                return None

    def _element_from_wire(self, element: TypeRef, var: str) -> str | None:
        match element.kind:
            case FieldKind.DECIMAL:
                self.uses_decimal = True
                return f"Decimal(str({var}))"
            case FieldKind.TIMESTAMP:
                self.uses_time = True
                return f"from_epoch_micros({var})"
            case _:
                return None

    def to_wire(self, f: FieldDescriptor) -> tuple[str, ...]:
        ref = f.domain_type
        source = f"item.{f.name}"
        target = f"result.{f.wire_name}"

        if ref.is_message:
            call = self._call(str(ref.model), naming.to_wire_function(str(ref.model)))
            return _guarded(source, f"{target}.CopyFrom({call}({source}))")

        if ref.is_sequence:
            element = ref.element
            assert element is not None
            if element.is_message:
                model = str(element.model)
                call = self._call(model, naming.to_wire_list_function(model))
                return _guarded(source, f"{target}.extend({call}({source}))")
            expr = self._element_to_wire(element, "value")
            if expr is None:
                return _guarded(source, f"{target}.extend({source})")
            return _guarded(source, f"{target}.extend({expr} for value in {source})")

        if (
            ref.kind in VALUE_KINDS
            and ref.kind not in (FieldKind.DECIMAL, FieldKind.TIMESTAMP)
            and not f.nullable
        ):
            return (f"{target} = {source}",)

        expr = self._element_to_wire(ref, source)
        return _guarded(source, f"{target} = {expr or source}")

    def from_wire(self, f: FieldDescriptor) -> tuple[str, ...]:
        ref = f.domain_type
        source = f"item.{f.wire_name}"
        target = f'values["{f.name}"]'

        if ref.is_message:
            model = str(ref.model)
            call = self._call(model, naming.from_wire_function(model))
            return (f'if item.HasField("{f.wire_name}"):', f"    {target} = {call}({source})")

        if ref.is_sequence:
            element = ref.element
            assert element is not None
            wrap = "tuple" if ref.kind is FieldKind.ARRAY else "list"
            if element.is_message:
                model = str(element.model)
                call = self._call(model, naming.from_wire_list_function(model))
                if wrap == "list":
                    return (f"{target} = {call}({source})",)
                return (f"{target} = tuple({call}({source}))",)
            expr = self._element_from_wire(element, "value")
            if expr is None:
                return (f"{target} = {wrap}({source})",)
            return (f"{target} = {wrap}({expr} for value in {source})",)

        expr = self._element_from_wire(ref, source)
        if f.has_presence:
            return (f'if item.HasField("{f.wire_name}"):', f"    {target} = {expr or source}")

        if ref.kind in (FieldKind.STRING, FieldKind.BYTES):
            return (f"if {source}:", f"    {target} = {source}")

        return (f"{target} = {expr or source}",)


@dataclass(frozen=True)
class ConverterModule:
    """Rendered converter plus what it needed to import."""

    message: str
    module: str
    text: str
    uses_time: bool


class ConverterEmitter:
    """Render converter modules for the messages of one run."""

    def __init__(self, context: EmitContext) -> None:
        self._context = context

    def conversions(self, message: MessageDescriptor) -> tuple[list[FieldConversion], _FieldWriter]:
        writer = _FieldWriter(message)
        conversions = [
            FieldConversion(name=f.name, to_wire=writer.to_wire(f), from_wire=writer.from_wire(f))
            for f in message.fields
        ]
        return conversions, writer

    def emit(self, message: MessageDescriptor) -> ConverterModule:
        conversions, writer = self.conversions(message)
        ctx = self._context
        template = ctx.environment("converters").get_template("converter.py.j2")
        text = template.render(
            model=message.name,
            model_module=ctx.model_module(message.module),
            wire_message=naming.message_name(message.name),
            pb2=ctx.pb2,
            shared_package=ctx.shared_package,
            converters_package=ctx.converters_package,
            nested_modules=sorted(writer.nested_modules),
            uses_decimal=writer.uses_decimal,
            uses_time=writer.uses_time,
            wire_time_module=WIRE_TIME_MODULE,
            fields=conversions,
            to_wire=naming.to_wire_function(message.name),
            from_wire=naming.from_wire_function(message.name),
            to_wire_list=naming.to_wire_list_function(message.name),
            from_wire_list=naming.from_wire_list_function(message.name),
        )
        module = naming.converter_module(message.name)
        logger.debug("Converter %s: %d fields", module, len(conversions))
        return ConverterModule(
            message=message.name, module=module, text=text, uses_time=writer.uses_time
        )

    def emit_wire_time(self) -> str:
        template = self._context.environment("converters").get_template("wire_time.py.j2")
        return template.render()


def needs_wire_time(messages: Iterable[MessageDescriptor]) -> bool:
    """True when any field, scalar or element, is a timestamp."""
    for message in messages:
        for f in message.fields:
            ref = f.domain_type
            if ref.kind is FieldKind.TIMESTAMP:
                return True
            if ref.element is not None and ref.element.kind is FieldKind.TIMESTAMP:
                return True
    return False
