"""ServiceResult and ServiceError: the service boundary contract.

INVARIANT: All service-layer methods return ServiceResult.  Core failures
travel as :class:`~grpcwiz.domain.errors.GenerationError` and are converted
here, at the boundary, by :func:`failure`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from grpcwiz.domain.errors import GenerationError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"generate"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(op: str, exc: GenerationError) -> ServiceResult:
    """Convert a core failure into a failed result for *op*."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=str(exc.code), message=exc.message, detail=dict(exc.detail)),
    )
