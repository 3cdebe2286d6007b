"""Generation failures raised by the core and converted at the service boundary.

The core never returns partial output: any of these aborts the whole run.
:class:`grpcwiz.services.generate.GenerateService` turns them into a failed
``ServiceResult`` whose ``error.message`` is the human-readable text.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Failure taxonomy reported in ``ServiceError.code``."""

    # Structural violations
    INVALID_SERVICE_NAME = "INVALID_SERVICE_NAME"
    NO_INTERFACE = "NO_INTERFACE"
    METHOD_ARITY = "METHOD_ARITY"
    METHOD_RETURN = "METHOD_RETURN"
    NAME_COLLISION = "NAME_COLLISION"
    UNKNOWN_MODEL = "UNKNOWN_MODEL"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    # Empty input
    NO_TYPES = "NO_TYPES"
    NO_SERVICES = "NO_SERVICES"
    # Caller input
    INVALID_DESCRIPTOR = "INVALID_DESCRIPTOR"
    INVALID_NAMESPACE = "INVALID_NAMESPACE"
    UNKNOWN_TEMPLATE_GROUP = "UNKNOWN_TEMPLATE_GROUP"
    # Collaborators
    VERSION_LOOKUP_FAILED = "VERSION_LOOKUP_FAILED"
    WRITE_FAILED = "WRITE_FAILED"
    # Control
    CANCELLED = "CANCELLED"


class GenerationError(Exception):
    """A fatal, descriptive failure of one generation run."""

    def __init__(self, code: ErrorCode, message: str, **detail: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail


class UnsupportedTypeError(GenerationError):
    """A field type the type mapper has no rule for."""

    def __init__(self, message: str, **detail: str) -> None:
        super().__init__(ErrorCode.UNSUPPORTED_TYPE, message, **detail)


class DescriptorError(GenerationError):
    """A descriptor file or registry that cannot be turned into a type universe."""

    def __init__(self, message: str, **detail: str) -> None:
        super().__init__(ErrorCode.INVALID_DESCRIPTOR, message, **detail)


class GenerationCancelled(GenerationError):
    """The caller's cancellation token was set between emission steps."""

    def __init__(self, message: str = "Generation cancelled before commit") -> None:
        super().__init__(ErrorCode.CANCELLED, message)
