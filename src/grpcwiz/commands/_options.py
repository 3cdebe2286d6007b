"""Options shared by every command that reads a type universe."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


def universe_inputs(func: F) -> F:
    """Add the ``DESCRIPTOR`` argument and the ``--registry`` option."""
    func = click.option(
        "--registry",
        default=None,
        metavar="MODULE:ATTR",
        help="Import a Registry (or TypeUniverse) instead of reading a descriptor file.",
    )(func)
    return click.argument(
        "descriptor",
        required=False,
        type=click.Path(dir_okay=False),
    )(func)
