"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeAlias

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from groupgraph.output.console import create_console, get_output, style_for_mode

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from groupgraph.services.result import ServiceResult

    Renderer: TypeAlias = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    d = result.data
    if isinstance(d.get("ids"), list):
        return "\n".join(str(i) for i in d["ids"])
    if result.op == "descendant_tree":
        return "\n".join(str(gid) for gid in _tree_ids(d.get("tree", [])))
    items = d.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if "id" in item)
    if "id" in d:
        return str(d["id"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _tree_ids(nodes: list[dict[str, Any]]) -> list[int]:
    """Group ids of a serialized tree in depth-first order."""
    ids: list[int] = []
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        ids.append(node["group"]["id"])
        stack.extend(reversed(node.get("children", [])))
    return ids


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="gg.ok")
    op = Text(f"  {result.op}", style="gg.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="gg.key")
    if isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    elif key == "id" or key.endswith("_id"):
        v = Text(str(value), style="gg.id")
    elif key == "name":
        v = Text(str(value), style="gg.name")
    elif key == "inclusion_mode":
        v = Text(str(value), style=style_for_mode(str(value)))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _mode_text(mode: str) -> Text:
    return Text(mode, style=style_for_mode(mode))


def _group_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a list of groups."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="gg.id", no_wrap=True)
    table.add_column("Name", style="gg.name")
    table.add_column("Description")
    if verbose:
        table.add_column("Owner", style="dim")
        table.add_column("Created", style="dim")

    for item in items:
        row = [str(item.get("id", "")), str(item.get("name", "")), item.get("description", "")]
        if verbose:
            row.extend([str(item.get("owner_id", "")), str(item.get("created", ""))])
        table.add_row(*row)
    return table


def _policy_table(items: list[dict[str, Any]], *, key_column: str) -> Table:
    """Build a Rich Table for edges or overrides (the shared policy columns)."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="gg.id", no_wrap=True)
    table.add_column(key_column.replace("_", " ").title(), style="gg.id")
    table.add_column("Mode")
    table.add_column("Selected")
    table.add_column("Profiles")

    for item in items:
        selected = item.get("included_subgroup_ids") or []
        table.add_row(
            str(item.get("id", "")),
            str(item.get(key_column, "")),
            _mode_text(str(item.get("inclusion_mode", ""))),
            ", ".join(str(s) for s in selected) or "-",
            "yes" if item.get("include_direct_profiles") else "no",
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="gg.error")
    op = Text(f"  {result.op}", style="gg.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if err is None:
        return
    for violation in err.detail.get("violations", []):
        field = Text(f"  {violation.get('field', '?')}", style="gg.key")
        console.print(field, Text(f" {violation.get('message', '')}"), end="")
        console.print(Text(f"  [{violation.get('code', '')}]", style="dim"))

    if verbose and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            if k != "violations":
                console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/delete results for groups, profiles, and policies."""
    _status_line(console, result)
    mutation_keys = (
        "id",
        "name",
        "group_id",
        "profile_id",
        "edge_id",
        "parent_id",
        "child_id",
        "target_group_id",
        "inclusion_mode",
        "included_subgroup_ids",
        "include_direct_profiles",
        "created",
        "added",
        "edges_removed",
        "memberships_removed",
        "overrides_pruned",
    )
    for key in mutation_keys:
        if key in result.data:
            _field(console, key, result.data[key])
    # Show fields_changed for update ops
    if "fields_changed" in result.data:
        _field(console, "fields_changed", result.data["fields_changed"])
    if verbose:
        _render_meta(console, result)


# ── Group renderers ───────────────────────────────────────────────────


def _render_group(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_group: fields, then outgoing edges."""
    d = result.data
    _status_line(console, result)
    for key in ("id", "name", "owner_id", "description", "created", "profile_ids"):
        if key in d:
            _field(console, key, d[key])
    edges = d.get("edges", [])
    if edges:
        console.print()
        console.print(_policy_table(edges, key_column="child_id"))


def _render_group_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_groups and descendant_list as a table."""
    items = result.data.get("items", [])
    root = result.data.get("root")
    if root:
        console.print(f"Descendants of [gg.name]{root['name']}[/gg.name] ({root['id']})")
    console.print(_group_table(items, verbose=verbose))
    console.print(f"\n{result.data.get('count', len(items))} groups")


def _render_overrides(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_overrides for one edge."""
    edge = result.data.get("edge", {})
    items = result.data.get("items", [])
    console.print(
        f"Overrides on edge [gg.id]{edge.get('id')}[/gg.id] "
        f"({edge.get('parent_id')} → {edge.get('child_id')})"
    )
    console.print(_policy_table(items, key_column="target_group_id"))
    console.print(f"\n{result.data.get('count', len(items))} overrides")


# ── Visibility renderers ──────────────────────────────────────────────


def _profile_label(entry: dict[str, Any]) -> Text:
    profile = entry["profile"]
    if entry.get("repeated"):
        return Text(f"{profile['name']} (repeated)", style="gg.repeated")
    return Text(profile["name"])


def _add_subtree(branch: Tree, node: dict[str, Any]) -> None:
    """Attach *node* and its descendants under *branch* (explicit stack)."""
    stack: list[tuple[Tree, dict[str, Any]]] = [(branch, node)]
    while stack:
        parent, current = stack.pop()
        group = current["group"]
        label = Text.assemble(
            (group["name"], "gg.name"),
            (f"  #{group['id']}", "gg.id"),
            "  ",
            _mode_text(current["inclusion_mode"]),
        )
        if current.get("is_leaf_boundary"):
            label.append("  (boundary)", style="dim")
        sub = parent.add(label)
        for entry in current.get("direct_profiles", []):
            sub.add(_profile_label(entry))
        # children are pushed in reverse so they pop in sibling order
        stack.extend((sub, child) for child in reversed(current.get("children", [])))


def _render_tree(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render descendant_tree as a Rich Tree rooted at the queried group."""
    d = result.data
    root = d.get("root", {})
    title = Text.assemble((root.get("name", "?"), "gg.name"), (f"  #{root.get('id')}", "gg.id"))
    tree = Tree(title)
    for entry in d.get("root_profiles", []):
        tree.add(_profile_label(entry))
    for node in d.get("tree", []):
        _add_subtree(tree, node)
    console.print(tree)
    console.print(f"\n{d.get('count', 0)} groups")


def _render_profiles(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render visible_profiles as a table."""
    d = result.data
    items = d.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="gg.id", no_wrap=True)
    table.add_column("Name", style="gg.name")
    if verbose:
        table.add_column("Attributes", style="dim")
    for item in items:
        row = [str(item.get("id", "")), str(item.get("name", ""))]
        if verbose:
            row.append(json.dumps(item.get("attributes", {}), separators=(",", ":")))
        table.add_row(*row)
    console.print(table)
    groups = len(d.get("group_ids", []))
    console.print(f"\n{d.get('count', len(items))} profiles from {groups} groups")


def _render_ids(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ancestor_ids and full_reachable_ids."""
    d = result.data
    _status_line(console, result)
    _field(console, "id", d.get("id"))
    _field(console, "direction", d.get("direction"))
    _field(console, "count", d.get("count", 0))
    ids = d.get("ids", [])
    if ids:
        _field(console, "ids", ", ".join(str(i) for i in ids))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    # Groups & profiles
    "create_group": _render_mutation,
    "delete_group": _render_mutation,
    "get_group": _render_group,
    "list_groups": _render_group_list,
    "create_profile": _render_mutation,
    "delete_profile": _render_mutation,
    "add_profile": _render_mutation,
    "remove_profile": _render_mutation,
    # Edges & overrides
    "create_edge": _render_mutation,
    "update_edge": _render_mutation,
    "delete_edge": _render_mutation,
    "upsert_override": _render_mutation,
    "delete_override": _render_mutation,
    "list_overrides": _render_overrides,
    # Visibility
    "descendant_list": _render_group_list,
    "descendant_tree": _render_tree,
    "visible_profiles": _render_profiles,
    "ancestor_ids": _render_ids,
    "full_reachable_ids": _render_ids,
}
