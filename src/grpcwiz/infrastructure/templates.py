"""Shared Jinja2 template loading with per-project override support."""

from __future__ import annotations

from functools import cache
from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
)

OVERRIDE_DIR = Path(".grpcwiz") / "templates"

TEMPLATE_GROUPS: tuple[str, ...] = ("schema", "converters", "services", "instructions", "packages")


def build_template_environment(group: str, *, project_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with user overrides before packaged defaults.

    Overrides live in ``.grpcwiz/templates/`` under the project root, either
    namespaced by group (``.grpcwiz/templates/converters/``) or flat.
    Undefined variables raise instead of rendering as empty text.
    """

    loaders: list[BaseLoader] = []
    if project_root is not None:
        template_root = project_root / OVERRIDE_DIR
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("grpcwiz", f"templates/{group}"))
    return Environment(
        loader=ChoiceLoader(loaders),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
        autoescape=False,
    )


@cache
def default_environment(group: str) -> Environment:
    """Packaged-templates-only environment, shared across runs."""
    return build_template_environment(group)


def packaged_templates(group: str) -> list[str]:
    """Names of the packaged templates in *group*."""
    return sorted(default_environment(group).list_templates())


def packaged_source(group: str, name: str) -> str:
    """Raw text of one packaged template."""
    env = default_environment(group)
    assert env.loader is not None
    source, _, _ = env.loader.get_source(env, name)
    return source


def override_path(project_root: Path, group: str, name: str) -> Path | None:
    """The override that shadows *name*, grouped directory first."""
    template_root = project_root / OVERRIDE_DIR
    for candidate in (template_root / group / name, template_root / name):
        if candidate.is_file():
            return candidate
    return None
