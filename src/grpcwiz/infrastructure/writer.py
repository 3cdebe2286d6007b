"""Staged, all-or-nothing placement of generated files.

Emitters fill an :class:`ArtifactSet` in memory.  :func:`commit` is the only
code that touches the output tree.  It writes every artifact to a staging
directory under the output root first, so a failed write leaves the previous
output untouched.  Only then does it reset the generated directories and
move the staged files into place.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from grpcwiz.domain.errors import ErrorCode, GenerationError

logger = logging.getLogger(__name__)

# Cleared recursively before each commit.
RESET_DIRS: tuple[str, ...] = (
    "shared/converters",
    "server/services",
    "client/services",
    "shared/models",
)

_STAGING_PREFIX = ".grpcwiz-staging-"


@dataclass
class ArtifactSet:
    """Generated files keyed by output-root-relative POSIX path."""

    files: dict[PurePosixPath, str] = field(default_factory=dict)

    def add(self, relpath: str | PurePosixPath, text: str) -> None:
        path = PurePosixPath(relpath)
        if path.is_absolute() or ".." in path.parts:
            raise GenerationError(
                ErrorCode.WRITE_FAILED,
                f"Artifact path must stay under the output root: {relpath}",
                path=str(relpath),
            )
        if path in self.files:
            raise GenerationError(
                ErrorCode.NAME_COLLISION,
                f"Artifact emitted twice: {relpath}",
                path=str(relpath),
            )
        self.files[path] = text

    def get(self, relpath: str) -> str | None:
        return self.files.get(PurePosixPath(relpath))

    def paths(self) -> list[str]:
        return [str(p) for p in self.files]

    def __contains__(self, relpath: object) -> bool:
        return isinstance(relpath, str | PurePosixPath) and PurePosixPath(relpath) in self.files

    def __iter__(self) -> Iterator[tuple[PurePosixPath, str]]:
        return iter(self.files.items())

    def __len__(self) -> int:
        return len(self.files)


def commit(
    artifacts: ArtifactSet,
    output_root: Path,
    *,
    reset_dirs: tuple[str, ...] = RESET_DIRS,
) -> list[Path]:
    """Write *artifacts* under *output_root*; return the written paths.

    Raises:
        GenerationError: ``WRITE_FAILED`` on any filesystem error.
    """
    written: list[Path] = []
    try:
        output_root.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix=_STAGING_PREFIX, dir=output_root) as tmp:
            staging = Path(tmp)
            for relpath, text in artifacts:
                staged = staging.joinpath(*relpath.parts)
                staged.parent.mkdir(parents=True, exist_ok=True)
                staged.write_text(text, encoding="utf-8")

            for reset in reset_dirs:
                target = output_root.joinpath(*PurePosixPath(reset).parts)
                if target.is_dir():
                    shutil.rmtree(target)
                    logger.debug("Cleared %s", target)

            for relpath, _ in artifacts:
                dest = output_root.joinpath(*relpath.parts)
                dest.parent.mkdir(parents=True, exist_ok=True)
                os.replace(staging.joinpath(*relpath.parts), dest)
                written.append(dest)
    except OSError as exc:
        raise GenerationError(
            ErrorCode.WRITE_FAILED,
            f"Cannot write generated files under {output_root}: {exc}",
            path=str(output_root),
        ) from exc

    logger.info("Wrote %d files under %s", len(written), output_root)
    return written
