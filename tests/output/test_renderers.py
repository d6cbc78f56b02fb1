"""Tests for operation-specific Rich renderers."""

from typing import Any

from groupgraph.output.renderers import render_quiet, render_result
from groupgraph.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


def _flat(output: str) -> str:
    """Collapse runs of whitespace so field assertions ignore column padding."""
    return " ".join(output.split())


def _group(gid: int, name: str) -> dict[str, Any]:
    return {"id": gid, "owner_id": 1, "name": name, "description": "", "created": "2026-01-01"}


def _node(
    gid: int,
    name: str,
    *,
    mode: str = "all",
    profiles: list[tuple[str, bool]] = (),
    children: list[dict[str, Any]] = (),
) -> dict[str, Any]:
    return {
        "group": _group(gid, name),
        "inclusion_mode": mode,
        "include_direct_profiles": True,
        "is_leaf_boundary": mode == "none",
        "direct_profiles": [
            {"profile": {"id": i, "owner_id": 1, "name": n, "attributes": {}}, "repeated": r}
            for i, (n, r) in enumerate(profiles, start=100)
        ],
        "children": list(children),
    }


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("get_group", "NOT_FOUND", "Group 9 not found", id=9))
        assert "ERROR" in output
        assert "get_group" in output
        assert "Group 9 not found" in output
        assert "detail" not in output

    def test_violations_always_listed(self) -> None:
        result = _err(
            "create_edge",
            "VALIDATION_FAILED",
            "child_group would create a circular reference",
            violations=[
                {
                    "code": "CYCLE",
                    "field": "child_group",
                    "message": "would create a circular reference",
                }
            ],
            attempted={"parent_id": 1, "child_id": 2},
        )
        output = render_result(result)
        assert "[CYCLE]" in output
        assert "child_group" in output
        assert "attempted" not in output

    def test_verbose_shows_attempted_change(self) -> None:
        result = _err(
            "create_edge",
            "VALIDATION_FAILED",
            "bad",
            violations=[],
            attempted={"parent_id": 1, "child_id": 2},
        )
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "attempted" in output
        assert "'child_id': 2" in output

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="test"))
        assert "Unknown error" in output


# ── Mutation renderer ────────────────────────────────────────────────


class TestMutationRenderer:
    def test_create_edge(self) -> None:
        result = _ok(
            "create_edge",
            id=4,
            parent_id=1,
            child_id=2,
            inclusion_mode="selected",
            included_subgroup_ids=[3, 5],
            include_direct_profiles=False,
        )
        output = render_result(result)
        assert output.startswith("OK")
        assert "create_edge" in output
        assert "inclusion_mode: selected" in _flat(output)
        assert "[3,5]" in output
        assert "include_direct_profiles: False" in _flat(output)

    def test_update_shows_changed_fields(self) -> None:
        result = _ok("update_edge", id=4, inclusion_mode="none", fields_changed=["inclusion_mode"])
        output = render_result(result)
        assert 'fields_changed: ["inclusion_mode"]' in _flat(output)

    def test_delete_group_counts(self) -> None:
        result = _ok(
            "delete_group",
            id=2,
            name="Work",
            edges_removed=3,
            memberships_removed=1,
            overrides_pruned=0,
        )
        output = render_result(result)
        assert "edges_removed: 3" in _flat(output)
        assert "overrides_pruned: 0" in _flat(output)

    def test_verbose_meta(self) -> None:
        result = ServiceResult(ok=True, op="create_group", data={"id": 1}, meta={"owner": 1})
        assert "meta" in render_result(result, verbose=True)
        assert "meta" not in render_result(result)


# ── Group renderers ──────────────────────────────────────────────────


class TestGroupRenderers:
    def test_get_group_with_edges(self) -> None:
        result = _ok(
            "get_group",
            **_group(1, "Family"),
            profile_ids=[10, 11],
            edges=[
                {
                    "id": 5,
                    "parent_id": 1,
                    "child_id": 2,
                    "inclusion_mode": "none",
                    "included_subgroup_ids": [],
                    "include_direct_profiles": True,
                }
            ],
        )
        output = render_result(result)
        assert "Family" in output
        assert "Child Id" in output
        assert "none" in output
        assert "[10,11]" in output

    def test_list_groups(self) -> None:
        result = _ok(
            "list_groups", owner_id=1, count=2, items=[_group(1, "Art"), _group(2, "Zoo")]
        )
        output = render_result(result)
        assert "Art" in output
        assert "Zoo" in output
        assert "2 groups" in output
        assert "Created" not in output

    def test_list_groups_verbose_columns(self) -> None:
        result = _ok("list_groups", owner_id=1, count=1, items=[_group(1, "Art")])
        assert "Created" in render_result(result, verbose=True)

    def test_descendant_list_header(self) -> None:
        result = _ok("descendant_list", root=_group(1, "Me"), count=1, items=[_group(2, "Kids")])
        output = render_result(result)
        assert "Descendants of Me (1)" in output
        assert "Kids" in output

    def test_overrides(self) -> None:
        edge = {"id": 5, "parent_id": 1, "child_id": 2}
        items = [
            {
                "id": 1,
                "edge_id": 5,
                "target_group_id": 9,
                "inclusion_mode": "all",
                "included_subgroup_ids": [],
                "include_direct_profiles": False,
            }
        ]
        output = render_result(_ok("list_overrides", edge=edge, count=1, items=items))
        assert "Overrides on edge 5" in output
        assert "Target Group Id" in output
        assert "1 overrides" in output


# ── Visibility renderers ─────────────────────────────────────────────


class TestTreeRenderer:
    def test_nested_tree(self) -> None:
        tree = [
            _node(
                2,
                "Friends",
                profiles=[("Ann", True)],
                children=[_node(3, "Close Friends", profiles=[("Ann", False)])],
            ),
            _node(4, "Work", mode="none"),
        ]
        result = _ok(
            "descendant_tree",
            root=_group(1, "Me"),
            root_profiles=[],
            count=3,
            tree=tree,
        )
        output = render_result(result)
        assert output.splitlines()[0].startswith("Me")
        assert "Friends" in output
        assert "Close Friends" in output
        assert "Ann (repeated)" in output
        assert "(boundary)" in output
        assert "3 groups" in output
        # Close Friends is printed below Friends, and Work after both.
        assert output.index("Close Friends") < output.index("Work")

    def test_root_profiles(self) -> None:
        zed = {"id": 1, "owner_id": 1, "name": "Zed", "attributes": {}}
        root_profiles = [{"profile": zed, "repeated": False}]
        result = _ok(
            "descendant_tree", root=_group(1, "Me"), root_profiles=root_profiles, count=0, tree=[]
        )
        output = render_result(result)
        assert "Zed" in output
        assert "repeated" not in output


class TestProfilesRenderer:
    def test_profiles_table(self) -> None:
        items = [{"id": 1, "owner_id": 1, "name": "Ann", "attributes": {"city": "Oslo"}}]
        result = _ok(
            "visible_profiles", root=_group(1, "Me"), group_ids=[1, 2], count=1, items=items
        )
        output = render_result(result)
        assert "Ann" in output
        assert "1 profiles from 2 groups" in output
        assert "Oslo" not in output
        assert "Oslo" in render_result(result, verbose=True)


class TestIdsRenderer:
    def test_ids(self) -> None:
        result = _ok("ancestor_ids", id=4, direction="ancestors", count=2, ids=[1, 2])
        output = render_result(result)
        assert "direction: ancestors" in _flat(output)
        assert "ids: 1, 2" in _flat(output)

    def test_empty(self) -> None:
        result = _ok("full_reachable_ids", id=4, direction="descendants", count=0, ids=[])
        output = render_result(result)
        assert "count: 0" in _flat(output)
        assert "ids:" not in output


class TestGenericRenderer:
    def test_unknown_op_falls_back(self) -> None:
        result = _ok("init_workspace", root="/tmp/ws", wrote_config=True)
        output = render_result(result)
        assert "init_workspace" in output
        assert "wrote_config: True" in _flat(output)


# ── Quiet mode ───────────────────────────────────────────────────────


class TestQuiet:
    def test_ids_list(self) -> None:
        result = _ok("ancestor_ids", id=4, direction="ancestors", count=2, ids=[1, 2])
        assert render_quiet(result) == "1\n2"

    def test_tree_in_depth_first_order(self) -> None:
        tree = [_node(2, "A", children=[_node(3, "B")]), _node(4, "C")]
        result = _ok("descendant_tree", root=_group(1, "R"), root_profiles=[], count=3, tree=tree)
        assert render_quiet(result) == "2\n3\n4"

    def test_items(self) -> None:
        result = _ok("list_groups", items=[_group(5, "A"), _group(6, "B")])
        assert render_quiet(result) == "5\n6"

    def test_single_id(self) -> None:
        assert render_quiet(_ok("create_group", id=9, name="X")) == "9"

    def test_no_id(self) -> None:
        assert render_quiet(_ok("remove_profile", group_id=1, profile_id=2)) == "OK: remove_profile"

    def test_error(self) -> None:
        output = render_quiet(_err("get_group", "NOT_FOUND", "Group 1 not found"))
        assert output == "ERROR: get_group — Group 1 not found"
