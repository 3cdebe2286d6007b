"""Copy user model and service sources into the generated tree.

Copied files lose every discovery marker (grpcwiz imports, registry
decorators, the ``Registry()`` assignment) so the generated package does
not depend on grpcwiz at runtime.  The width aliases from
:mod:`grpcwiz.registry` are rewritten to plain ``int`` and ``float``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from grpcwiz.domain.errors import ErrorCode, GenerationError

logger = logging.getLogger(__name__)

_ALIAS_REWRITES: dict[str, str] = {
    "Int32": "int",
    "Int64": "int",
    "UInt32": "int",
    "UInt64": "int",
    "Float32": "float",
    "Float64": "float",
}
_ALIAS_RE = re.compile(r"\b(" + "|".join(_ALIAS_REWRITES) + r")\b")

_SKIP_DIRS = frozenset({"__pycache__", ".git", ".venv"})


@dataclass(frozen=True)
class CopiedSource:
    relpath: PurePosixPath
    module: str
    text: str


def strip_markers(text: str, patterns: Iterable[str]) -> str:
    """Drop marker lines and rewrite width aliases."""
    compiled = [re.compile(p) for p in patterns]
    kept = [line for line in text.splitlines(keepends=True) if not any(c.search(line) for c in compiled)]
    return _ALIAS_RE.sub(lambda m: _ALIAS_REWRITES[m.group(1)], "".join(kept))


def _python_files(source_dir: Path) -> list[Path]:
    files = [
        p
        for p in source_dir.rglob("*.py")
        if not _SKIP_DIRS.intersection(p.relative_to(source_dir).parts)
    ]
    return sorted(files)


def collect_sources(
    source_dir: Path,
    target: str,
    *,
    package: str,
    patterns: Iterable[str],
) -> list[CopiedSource]:
    """Read ``*.py`` files under *source_dir* for placement under *target*.

    Args:
        source_dir: Directory holding the user's sources.
        target: Output-root-relative directory, e.g. ``shared/models``.
        package: Dotted package *target* is importable as.
        patterns: Marker line regexes to strip.
    """
    if not source_dir.is_dir():
        raise GenerationError(
            ErrorCode.WRITE_FAILED,
            f"Source directory not found: {source_dir}",
            path=str(source_dir),
        )
    patterns = tuple(patterns)
    copied: list[CopiedSource] = []
    for path in _python_files(source_dir):
        rel = PurePosixPath(*path.relative_to(source_dir).parts)
        if rel.name == "__init__.py":
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise GenerationError(
                ErrorCode.WRITE_FAILED, f"Cannot read {path}: {exc}", path=str(path)
            ) from exc
        module = ".".join((package, *rel.with_suffix("").parts))
        copied.append(
            CopiedSource(
                relpath=PurePosixPath(target) / rel,
                module=module,
                text=strip_markers(text, patterns),
            )
        )
    logger.debug("Collected %d sources from %s", len(copied), source_dir)
    return copied
