"""Rich Console factory and theme for grpcwiz output.

Renderers draw onto a Console backed by StringIO and hand back plain
strings, so ``AppContext.emit`` decides where text goes.  Rich drops color
codes on its own when the buffer is not a terminal (tests, pipes).
"""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

WIZ_THEME = Theme(
    {
        # status
        "wiz.ok": "bold green",
        "wiz.error": "bold red",
        "wiz.warning": "bold yellow",
        "wiz.op": "bold cyan",
        # fields
        "wiz.key": "dim",
        "wiz.path": "dim",
        # generated names
        "wiz.service": "bold blue",
        "wiz.rpc": "green",
        "wiz.message": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing into a fresh StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=WIZ_THEME,
        no_color=no_color,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )


def get_output(console: Console) -> str:
    """Text written so far to a console from :func:`create_console`."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def capture(draw: Callable[[Console], None], *, width: int | None = None) -> str:
    """Run *draw* against a buffered console and return what it printed."""
    console = create_console(width=width)
    draw(console)
    return get_output(console)
