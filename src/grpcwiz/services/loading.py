"""Turn CLI inputs into a TypeUniverse.

Two sources are accepted: a YAML descriptor file, or a ``module:attr``
reference to a :class:`~grpcwiz.registry.Registry`, a
:class:`~grpcwiz.domain.descriptors.TypeUniverse`, or a zero-argument
callable returning either.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import Any

from grpcwiz.domain.descriptors import TypeUniverse
from grpcwiz.domain.errors import DescriptorError
from grpcwiz.infrastructure.descriptor_file import load_descriptor_file
from grpcwiz.registry import Registry

logger = logging.getLogger(__name__)


def _coerce(target: Any, ref: str) -> TypeUniverse:
    if isinstance(target, TypeUniverse):
        return target
    if isinstance(target, Registry):
        return target.build()
    if callable(target):
        result = target()
        if isinstance(result, (TypeUniverse, Registry)):
            return _coerce(result, ref)
    raise DescriptorError(
        f"{ref} is not a Registry, a TypeUniverse, or a callable returning one",
        registry=ref,
    )


def load_registry(ref: str, *, search_path: Path | None = None) -> TypeUniverse:
    """Import ``module:attr`` and build its type universe.

    *search_path* (usually the project root) is importable while the
    module loads.
    """
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise DescriptorError(f"Registry reference must look like 'module:attr', got {ref!r}")

    added = False
    if search_path is not None and str(search_path) not in sys.path:
        sys.path.insert(0, str(search_path))
        added = True
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise DescriptorError(f"Cannot import {module_name}: {exc}", registry=ref) from exc
    finally:
        if added:
            sys.path.remove(str(search_path))

    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise DescriptorError(f"{module_name} has no attribute {attr!r}", registry=ref) from exc
    logger.debug("Loaded registry %s", ref)
    return _coerce(target, ref)


def load_universe(
    *,
    descriptor: Path | None = None,
    registry: str | None = None,
    search_path: Path | None = None,
) -> TypeUniverse:
    """Load the universe from exactly one of *descriptor* or *registry*."""
    if descriptor is not None and registry is not None:
        raise DescriptorError("Pass either a descriptor file or --registry, not both")
    if registry is not None:
        return load_registry(registry, search_path=search_path)
    if descriptor is not None:
        return load_descriptor_file(descriptor)
    raise DescriptorError("No input: pass a descriptor file or --registry module:attr")
