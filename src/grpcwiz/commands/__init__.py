"""Subcommand modules for grpcwiz.

Provides register_commands() which uses deferred imports to keep
``grpcwiz --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from grpcwiz.commands.check import check
    from grpcwiz.commands.generate import generate
    from grpcwiz.commands.schema import schema
    from grpcwiz.commands.templates import templates
    from grpcwiz.commands.versions import versions

    cli.add_command(generate)
    cli.add_command(check)
    cli.add_command(schema)
    cli.add_command(versions)
    cli.add_command(templates)
