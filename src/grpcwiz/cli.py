"""Root CLI group for grpcwiz with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from grpcwiz import __version__
from grpcwiz.commands import register_commands
from grpcwiz.commands._base import WizGroup
from grpcwiz.commands._context import AppContext
from grpcwiz.config.settings import WizSettings


@click.group(
    cls=WizGroup,
    invoke_without_command=True,
    examples="""\
  grpcwiz check api.yaml
  grpcwiz generate api.yaml --namespace acme.rpc
  grpcwiz --json generate --registry myapp.rpc:wiz
  grpcwiz -C services/people schema""",
)
@click.version_option(version=__version__, prog_name="grpcwiz")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essential lines.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and extra detail.")
@click.option("--log-json", is_flag=True, help="Log JSON lines to stderr.")
@click.option("--no-interact", is_flag=True, help="Never prompt; use configured or default values.")
@click.option("-c", "--config", "config_path", default=None, help="Use this config file.")
@click.option(
    "-C",
    "--project-root",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Project directory (default: where grpcwiz.toml is found, else CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_interact: bool,
    config_path: str | None,
    project_root: Path | None,
) -> None:
    """grpcwiz: generate a gRPC layer from domain models and services."""
    settings = WizSettings.from_cli(
        config_path=config_path,
        project_root=project_root.resolve() if project_root is not None else None,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_interact=no_interact,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
