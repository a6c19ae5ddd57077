"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from projctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from projctl.services.result import ServiceResult

    _Renderer = Callable[[ServiceResult, Console], None]

# Keys shown in the dependency table, not in the property listing.
_STAMP_KEYS = frozenset(
    {"Name", "ContentLocation", "WorkspaceLocation", "ProjectJsonLocation", "Dependencies"}
)


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        _status_line(console, result)
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        if verbose:
            _render_raw(console, result)
    else:
        _render_error(result, console)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: item names one per line, else a status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list) and items:
        names = [_item_name(item) for item in items]
        return "\n".join(name for name in names if name)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _item_name(item: Any) -> str:
    if not isinstance(item, dict):
        return ""
    for key in ("Name", "type"):
        if item.get(key):
            return str(item[key])
    dependency = item.get("dependency")
    if isinstance(dependency, dict):
        return str(dependency.get("Location", ""))
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="proj.ok"), Text(f"  {result.op}", style="proj.op"))


def _field(console: Console, key: str, value: Any) -> None:
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"))
    style = "proj.location" if key.endswith("Location") else ""
    console.print(Text.assemble((f"  {key}: ", "proj.key"), (str(value), style)))


def _dependency_table(dependencies: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Type", style="proj.type", no_wrap=True)
    table.add_column("Name", style="proj.name")
    table.add_column("Location", style="proj.location")
    for dep in dependencies:
        table.add_row(
            str(dep.get("Type", "")),
            str(dep.get("Name", "")),
            str(dep.get("Location", "")),
        )
    return table


def _render_project(console: Console, project: dict[str, Any]) -> None:
    _field(console, "Name", project.get("Name", ""))
    _field(console, "ContentLocation", project.get("ContentLocation", ""))
    for key, value in project.items():
        if key not in _STAMP_KEYS:
            _field(console, key, value)
    dependencies = project.get("Dependencies") or []
    if dependencies:
        console.print(_dependency_table(dependencies))
    else:
        console.print(Text("  no dependencies", style="dim"))


def _render_raw(console: Console, result: ServiceResult) -> None:
    console.print()
    console.print(Text("  data:", style="dim"))
    console.print(json.dumps(result.data, indent=2), markup=False)


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  WARNING ", style="proj.warning"), Text(warning))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="proj.error"),
        Text(f"  {result.op}", style="proj.op"),
        Text(": "),
        Text(msg),
    )
    if err and err.code:
        console.print(Text(f"  code: {err.code}", style="dim"))


# ── Op renderers ──────────────────────────────────────────────────────


def _render_project_list(result: ServiceResult, console: Console) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  no projects", style="dim"))
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="proj.name")
    table.add_column("Location", style="proj.location")
    table.add_column("Dependencies", justify="right")
    for project in items:
        table.add_row(
            str(project.get("Name", "")),
            str(project.get("ContentLocation", "")),
            str(len(project.get("Dependencies") or [])),
        )
    console.print(table)


def _render_single_project(result: ServiceResult, console: Console) -> None:
    project = result.data.get("project")
    if isinstance(project, dict):
        _render_project(console, project)
    for key, value in result.data.items():
        if key != "project":
            _field(console, key, value)
    _render_warnings(console, result)


def _render_init(result: ServiceResult, console: Console) -> None:
    data = result.data
    if "file_metadata" in data:
        _field(console, "created", data["file_metadata"].get("Location", ""))
        return
    _field(console, "ContentLocation", data.get("content_location", ""))
    metadata = data.get("project_metadata") or {}
    for key, value in metadata.items():
        _field(console, key, value)


def _render_resolution(result: ServiceResult, console: Console) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Type", style="proj.type", no_wrap=True)
    table.add_column("Dependency")
    table.add_column("Resolved to")
    for item in result.data.get("items", []):
        dep = item.get("dependency", {})
        resolved = item.get("resolved")
        if resolved:
            target = Text(str(resolved.get("Location", "")), style="proj.location")
        else:
            target = Text(item.get("error", {}).get("message", "unresolved"), style="proj.missing")
        table.add_row(str(dep.get("Type", "")), str(dep.get("Location", "")), target)
    console.print(table)
    _field(console, "resolved", result.data.get("resolved", 0))


def _render_handlers(result: ServiceResult, console: Console) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  no handlers", style="dim"))
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Type", style="proj.type", no_wrap=True)
    table.add_column("ID", style="dim")
    table.add_column("Description")
    for handler in items:
        table.add_row(
            str(handler.get("type", "")),
            str(handler.get("id", "")),
            str(handler.get("addDependencyTooltip", "")),
        )
    console.print(table)


def _render_generic(result: ServiceResult, console: Console) -> None:
    for key, value in result.data.items():
        _field(console, key, value)
    _render_warnings(console, result)


_OP_RENDERERS: dict[str, _Renderer] = {
    "list_projects": _render_project_list,
    "show_project": _render_single_project,
    "set_properties": _render_single_project,
    "add_dependency": _render_single_project,
    "remove_dependency": _render_single_project,
    "init_project": _render_init,
    "create_project": _render_init,
    "resolve_dependencies": _render_resolution,
    "list_handlers": _render_handlers,
}
