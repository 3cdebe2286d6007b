"""TemplateService: inspect the packaged templates and seed project overrides.

Overrides placed under ``.grpcwiz/templates/`` win over the packaged
templates on the next generation run.  Exporting copies the packaged text
there as a starting point; existing override files are left alone unless
``force`` is set.
"""

from __future__ import annotations

import logging
from pathlib import Path

from grpcwiz.config.logging import run_context
from grpcwiz.config.settings import WizSettings
from grpcwiz.domain.errors import ErrorCode, GenerationError
from grpcwiz.infrastructure.templates import (
    OVERRIDE_DIR,
    TEMPLATE_GROUPS,
    override_path,
    packaged_source,
    packaged_templates,
)
from grpcwiz.services.result import ServiceResult, failure

logger = logging.getLogger(__name__)


def _check_groups(groups: tuple[str, ...]) -> tuple[str, ...]:
    unknown = [g for g in groups if g not in TEMPLATE_GROUPS]
    if unknown:
        raise GenerationError(
            ErrorCode.UNKNOWN_TEMPLATE_GROUP,
            f"Unknown template group {unknown[0]!r}; expected one of {', '.join(TEMPLATE_GROUPS)}",
            group=unknown[0],
        )
    return groups or TEMPLATE_GROUPS


def _write_template(dest: Path, text: str) -> None:
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise GenerationError(
            ErrorCode.WRITE_FAILED, f"Cannot write {dest}: {exc}", path=str(dest)
        ) from exc


class TemplateService:
    """Template listing and export for one project root."""

    def __init__(self, settings: WizSettings | None = None) -> None:
        self._settings = settings or WizSettings()

    @property
    def override_root(self) -> Path:
        return self._settings.project_root / OVERRIDE_DIR

    def list_templates(self) -> ServiceResult:
        """Every packaged template and the override shadowing it, if any."""
        op = "templates_list"
        root = self._settings.project_root
        entries = []
        for group in TEMPLATE_GROUPS:
            for name in packaged_templates(group):
                override = override_path(root, group, name)
                entries.append(
                    {
                        "group": group,
                        "name": name,
                        "override": str(override) if override is not None else None,
                    }
                )
        return ServiceResult(
            ok=True,
            op=op,
            data={"override_root": str(self.override_root), "templates": entries},
        )

    def export_templates(
        self,
        groups: tuple[str, ...] = (),
        *,
        force: bool = False,
    ) -> ServiceResult:
        """Copy packaged templates into ``.grpcwiz/templates/<group>/``."""
        op = "templates_export"
        written: list[str] = []
        skipped: list[str] = []
        with run_context(op=op):
            try:
                for group in _check_groups(groups):
                    for name in packaged_templates(group):
                        dest = self.override_root / group / name
                        if dest.exists() and not force:
                            skipped.append(str(dest))
                            continue
                        _write_template(dest, packaged_source(group, name))
                        written.append(str(dest))
            except GenerationError as exc:
                return failure(op, exc)
            logger.info("Exported %d templates to %s", len(written), self.override_root)

        warnings = [f"Kept existing override {path}" for path in skipped]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "override_root": str(self.override_root),
                "written": written,
                "skipped": skipped,
            },
            warnings=warnings,
        )
