"""Command: validate models and services without generating anything."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from grpcwiz.commands._base import WizCommand
from grpcwiz.commands._options import universe_inputs

if TYPE_CHECKING:
    from grpcwiz.commands._context import AppContext


@click.command(
    cls=WizCommand,
    examples="""\
  grpcwiz check api.yaml
  grpcwiz check --registry myapp.rpc:wiz
  grpcwiz --json check api.yaml""",
)
@universe_inputs
@click.pass_obj
def check(app: AppContext, descriptor: str | None, registry: str | None) -> None:
    """Validate services and list the RPCs and messages they would produce."""
    from grpcwiz.services.generate import GenerateService

    universe = app.load_universe("check", descriptor, registry)
    app.emit(GenerateService(app.settings).check(universe))
