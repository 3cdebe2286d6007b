"""Command: generate the schema, converters, servicers, and clients."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from grpcwiz.commands._base import WizCommand
from grpcwiz.commands._options import universe_inputs

if TYPE_CHECKING:
    from grpcwiz.commands._context import AppContext


@click.command(
    cls=WizCommand,
    examples="""\
  grpcwiz generate api.yaml --namespace acme.rpc
  grpcwiz generate --registry myapp.rpc:wiz --output build/acme_rpc
  grpcwiz --no-interact generate api.yaml
  grpcwiz generate api.yaml --resolve-versions""",
)
@universe_inputs
@click.option("--namespace", default=None, help="Dotted package of the generated code.")
@click.option(
    "--output",
    "output_dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Output root (default: the namespace path under the project root).",
)
@click.option(
    "--resolve-versions/--no-resolve-versions",
    default=None,
    help="Pin README requirements to the latest releases on the package index.",
)
@click.pass_obj
def generate(
    app: AppContext,
    descriptor: str | None,
    registry: str | None,
    namespace: str | None,
    output_dir: str | None,
    resolve_versions: bool | None,
) -> None:
    """Generate the gRPC layer for every marked service."""
    from grpcwiz.config.models import DEFAULT_NAMESPACE
    from grpcwiz.services.generate import GenerateService, default_output_root

    settings = app.settings
    universe = app.load_universe("generate", descriptor, registry)

    ns = namespace or settings.generate.namespace
    if ns is None:
        ns = (
            click.prompt("Namespace", default=DEFAULT_NAMESPACE)
            if not settings.no_interact and not settings.json_output
            else DEFAULT_NAMESPACE
        )

    if output_dir is not None:
        output_root = Path(output_dir)
    elif settings.generate.output is not None:
        output_root = settings.resolve_path(settings.generate.output)
    else:
        output_root = default_output_root(ns, settings.project_root)

    if resolve_versions is not None:
        settings = settings.model_copy(
            update={"versions": settings.versions.model_copy(update={"resolve": resolve_versions})}
        )

    app.emit(GenerateService(settings).generate(universe, ns, output_root))
