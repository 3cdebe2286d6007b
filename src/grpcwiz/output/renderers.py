"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
gets the rendered text back from ``capture``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from grpcwiz.output.console import capture

if TYPE_CHECKING:
    from rich.console import Console

    from grpcwiz.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Rich emits plain text here, since the buffer is never a terminal.
    """
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
    else:
        renderer = _render_error
    text = capture(lambda console: renderer(result, console, verbose=verbose))
    return text.rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    d = result.data
    if result.op == "schema" and "schema" in d:
        return str(d["schema"]).rstrip("\n")
    if result.op == "versions":
        return "\n".join(d.get("requirements", []))
    if result.op == "generate":
        return "\n".join(d.get("files", []))
    if result.op == "templates_export":
        return "\n".join(d.get("written", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="wiz.ok")
    op = Text(f"  {result.op}", style="wiz.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="wiz.key")
    if key in ("path", "output_root", "schema_path"):
        v = Text(str(value), style="wiz.path")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning ", style="wiz.warning"), Text(warning), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="wiz.error")
    op = Text(f"  {result.op}", style="wiz.op")
    code = Text(f" [{err.code}]" if err else "", style="dim")
    console.print(label, op, code, Text(" - "), Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Generation renderers ──────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a generation run: where it wrote and what."""
    _status_line(console, result)
    d = result.data
    for key in ("namespace", "output_root", "schema"):
        if key in d:
            _field(console, key, d[key])
    _field(console, "services", len(d.get("services", [])))
    _field(console, "messages", len(d.get("messages", [])))
    files = d.get("files", [])
    _field(console, "files_written", len(files))
    if verbose:
        for f in files:
            console.print(f"    {f}")
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the discovery summary as one table of RPCs per service."""
    d = result.data
    services = d.get("services", [])
    for service in services:
        console.print(
            f"[wiz.service]{service['name']}[/wiz.service]"
            f"  (interface {service.get('interface', '?')})"
        )
        methods = service.get("methods", [])
        if methods:
            table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
            table.add_column("RPC", style="wiz.rpc", no_wrap=True)
            table.add_column("Request", style="wiz.message")
            table.add_column("Response", style="wiz.message")
            if verbose:
                table.add_column("Method", style="dim")
            for method in methods:
                row = [method["rpc"], method["request"], method["response"]]
                if verbose:
                    row.append(method["name"])
                table.add_row(*row)
            console.print(table)
        else:
            console.print("  [dim]no methods[/dim]")
        if verbose:
            console.print(f"  models: {', '.join(service.get('models', []))}")

    messages = d.get("messages", [])
    console.print(f"\n{len(services)} services, {len(messages)} messages")
    _render_warnings(console, result)


def _render_schema(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Schema preview prints the proto text itself; a written schema gets a status line."""
    d = result.data
    if "path" in d:
        _status_line(console, result)
        _field(console, "path", d["path"])
        _field(console, "messages", len(d.get("messages", [])))
        return
    console.print(Text(str(d.get("schema", "")).rstrip("\n")), soft_wrap=True)


def _render_versions(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    source = "package index" if result.data.get("resolved") else "fallback specifiers"
    _field(console, "source", source)
    for line in result.data.get("requirements", []):
        console.print(f"    {line}")


def _render_templates_list(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Group", style="wiz.op", no_wrap=True)
    table.add_column("Template", no_wrap=True)
    table.add_column("Override", style="wiz.path")
    for entry in d.get("templates", []):
        table.add_row(entry["group"], entry["name"], entry["override"] or "-")
    console.print(table)
    _field(console, "path", d.get("override_root", ""))


def _render_templates_export(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "path", d.get("override_root", ""))
    _field(console, "written", len(d.get("written", [])))
    _field(console, "skipped", len(d.get("skipped", [])))
    if verbose:
        for path in d.get("written", []):
            console.print(f"    {path}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_generate,
    "check": _render_check,
    "schema": _render_schema,
    "versions": _render_versions,
    "templates_list": _render_templates_list,
    "templates_export": _render_templates_export,
}
