"""Command: show the runtime package requirements for generated code."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from grpcwiz.commands._base import WizCommand

if TYPE_CHECKING:
    from grpcwiz.commands._context import AppContext


@click.command(
    cls=WizCommand,
    examples="""\
  grpcwiz versions
  grpcwiz versions --resolve
  grpcwiz -q versions > requirements-grpc.txt""",
)
@click.option(
    "--resolve/--no-resolve",
    default=None,
    help="Look up the latest releases on the package index.",
)
@click.pass_obj
def versions(app: AppContext, resolve: bool | None) -> None:
    """Print requirement lines for grpcio, grpcio-tools, and protobuf."""
    from grpcwiz.services.generate import GenerateService

    settings = app.settings
    if resolve is not None:
        settings = settings.model_copy(
            update={"versions": settings.versions.model_copy(update={"resolve": resolve})}
        )
    app.emit(GenerateService(settings).versions())
