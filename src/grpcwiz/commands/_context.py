"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides input loading and centralized result
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from grpcwiz.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from grpcwiz.config.settings import WizSettings
    from grpcwiz.domain.descriptors import TypeUniverse
    from grpcwiz.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: WizSettings) -> None:
        self.settings = settings

        from grpcwiz.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def load_universe(self, op: str, descriptor: str | None, registry: str | None) -> TypeUniverse:
        """Load the command's input, emitting a failed *op* result on error.

        Falls back to ``[generate] descriptor`` when neither input is given.
        """
        from grpcwiz.domain.errors import GenerationError
        from grpcwiz.services.loading import load_universe
        from grpcwiz.services.result import failure

        configured = self.settings.generate.descriptor
        if descriptor is None and registry is None and configured is not None:
            descriptor = str(self.settings.resolve_path(configured))
        try:
            return load_universe(
                descriptor=Path(descriptor) if descriptor is not None else None,
                registry=registry,
                search_path=self.settings.project_root,
            )
        except GenerationError as exc:
            self.emit(failure(op, exc))
            raise  # emit() exits; kept for type checkers

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # Check output already lists its warnings; JSON carries them inline.
            if not settings.json_output and result.op != "check":
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
