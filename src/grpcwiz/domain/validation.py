"""Method Contract Validator and service naming rules.

INVARIANT: every interface method takes exactly one input and returns one
awaitable result.  The first violation aborts the whole run; there is no
per-method skipping.
"""

from __future__ import annotations

from grpcwiz.domain.descriptors import (
    InterfaceDescriptor,
    MethodDescriptor,
    ReturnKind,
    ServiceDescriptor,
)
from grpcwiz.domain.errors import ErrorCode, GenerationError
from grpcwiz.domain.naming import SERVICE_SUFFIX, short_service_name


def validate_method(method: MethodDescriptor) -> None:
    """Raise GenerationError unless *method* follows the calling convention."""
    if not method.params:
        raise GenerationError(
            ErrorCode.METHOD_ARITY,
            f"Service method {method.name} requires one input parameter",
            method=method.name,
        )
    if len(method.params) > 1:
        raise GenerationError(
            ErrorCode.METHOD_ARITY,
            f"Service method {method.name} has more than one parameter",
            method=method.name,
        )
    returns = method.returns
    if returns.kind is not ReturnKind.AWAITABLE or len(returns.types) != 1:
        raise GenerationError(
            ErrorCode.METHOD_RETURN,
            f"Service method {method.name} must return a single-result async value",
            method=method.name,
        )


def validate_interface(interface: InterfaceDescriptor) -> None:
    for method in interface.methods:
        validate_method(method)


def validate_service_name(service: ServiceDescriptor) -> str:
    """Return the short service name, or raise when the suffix rule is broken."""
    short = short_service_name(service.name)
    if short is None:
        raise GenerationError(
            ErrorCode.INVALID_SERVICE_NAME,
            f"GrpcService names must end with the word '{SERVICE_SUFFIX}' ({service.name})",
            service=service.name,
        )
    if not short:
        raise GenerationError(
            ErrorCode.INVALID_SERVICE_NAME,
            f"GrpcService name '{service.name}' has nothing before the '{SERVICE_SUFFIX}' suffix",
            service=service.name,
        )
    return short


def resolve_interface(service: ServiceDescriptor) -> InterfaceDescriptor:
    """The first declared interface defines the service's wire contract."""
    if not service.interfaces:
        raise GenerationError(
            ErrorCode.NO_INTERFACE,
            f"Can not find an interface with the service marker for {service.name}",
            service=service.name,
        )
    return service.interfaces[0]
