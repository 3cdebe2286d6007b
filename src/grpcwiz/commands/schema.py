"""Command: render the proto3 schema without generating code."""

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
  grpcwiz schema api.yaml
  grpcwiz schema api.yaml --namespace acme.rpc
  grpcwiz schema --registry myapp.rpc:wiz --output wire.proto""",
)
@universe_inputs
@click.option("--namespace", default=None, help="Package the schema declares (<ns>.shared).")
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the schema to FILE instead of stdout.",
)
@click.pass_obj
def schema(
    app: AppContext,
    descriptor: str | None,
    registry: str | None,
    namespace: str | None,
    output_file: str | None,
) -> None:
    """Print the schema that ``generate`` would write."""
    from grpcwiz.config.models import DEFAULT_NAMESPACE
    from grpcwiz.services.generate import GenerateService
    from grpcwiz.services.result import ServiceError, ServiceResult

    universe = app.load_universe("schema", descriptor, registry)
    ns = namespace or app.settings.generate.namespace or DEFAULT_NAMESPACE
    result = GenerateService(app.settings).render_schema(universe, ns)
    if not result.ok or output_file is None:
        app.emit(result)
        return

    path = Path(output_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(result.data["schema"], encoding="utf-8")
    except OSError as exc:
        app.emit(
            ServiceResult(
                ok=False,
                op="schema",
                error=ServiceError(
                    code="WRITE_FAILED",
                    message=f"Cannot write {path}: {exc}",
                    detail={"path": str(path)},
                ),
            )
        )
        return
    app.emit(result.model_copy(update={"data": {**result.data, "path": str(path)}}))
