"""Command group: inspect and export the code templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from grpcwiz.commands._base import WizGroup
from grpcwiz.infrastructure.templates import TEMPLATE_GROUPS

if TYPE_CHECKING:
    from grpcwiz.commands._context import AppContext

_TEMPLATES_EXAMPLES = """\
  grpcwiz templates list
  grpcwiz templates export --group converters
  grpcwiz templates export --force"""


@click.group(cls=WizGroup, examples=_TEMPLATES_EXAMPLES)
@click.pass_obj
def templates(app: AppContext) -> None:
    """Inspect and customize the templates generated code is rendered from."""


@templates.command(
    "list",
    examples="""\
  grpcwiz templates list
  grpcwiz --json templates list""",
)
@click.pass_obj
def list_templates(app: AppContext) -> None:
    """List packaged templates and the project overrides shadowing them."""
    from grpcwiz.services.templates import TemplateService

    app.emit(TemplateService(app.settings).list_templates())


@templates.command(
    examples="""\
  grpcwiz templates export
  grpcwiz templates export --group schema --group services
  grpcwiz templates export --force""",
)
@click.option(
    "--group",
    "groups",
    multiple=True,
    type=click.Choice(TEMPLATE_GROUPS),
    help="Export only this group (repeatable).",
)
@click.option("--force", is_flag=True, help="Overwrite existing override files.")
@click.pass_obj
def export(app: AppContext, groups: tuple[str, ...], force: bool) -> None:
    """Copy packaged templates into .grpcwiz/templates/ for editing."""
    from grpcwiz.services.templates import TemplateService

    app.emit(TemplateService(app.settings).export_templates(groups, force=force))
