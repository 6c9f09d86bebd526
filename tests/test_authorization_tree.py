"""Tests for authorization tree derivation."""

from __future__ import annotations

import pytest

from releasecore import (
    AuthorizationTreeBuilder,
    DependencyTreeNode,
    ResolutionError,
    find_upcast_occurrences,
)


def _node(resource_id: str, version: str = "1.0.0", *, upcasts=(), deps=(), version_range="*") -> DependencyTreeNode:
    return DependencyTreeNode(
        resource_id=resource_id,
        resource_name=f"alice/{resource_id}",
        resource_type="image",
        version=version,
        version_id=f"{resource_id}@{version}",
        version_range=version_range,
        base_upcast_resources=[{"resource_id": u} for u in upcasts],
        dependencies=tuple(deps),
    )


class TestFindUpcastOccurrences:
    """Tests for the bubbling search."""

    def test_direct_dependency_matches(self) -> None:
        found = find_upcast_occurrences([_node("x")], "x")
        assert [n.version_id for n in found] == ["x@1.0.0"]

    def test_stops_at_node_that_does_not_upcast(self) -> None:
        """A -> B -> C where B does not upcast C: C is not visible from A."""
        tree = [_node("b", deps=[_node("c")])]
        assert find_upcast_occurrences(tree, "c") == []

    def test_descends_through_upcasting_node(self) -> None:
        tree = [_node("b", upcasts=["c"], deps=[_node("c")])]
        assert [n.resource_id for n in find_upcast_occurrences(tree, "c")] == ["c"]

    def test_multiple_depths(self) -> None:
        tree = [
            _node("x", "1.0.0"),
            _node("b", upcasts=["x"], deps=[_node("x", "1.1.0")]),
        ]
        found = find_upcast_occurrences(tree, "x")
        assert [n.version for n in found] == ["1.0.0", "1.1.0"]


class TestAuthorizationTreeBuilder:
    """Tests for building the authorization tree from the catalog."""

    @pytest.mark.asyncio
    async def test_resolves_direct_dependency(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("b", "^1.0.0")], resolves=["b"])
        builder.add("b", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)

        assert len(tree) == 1
        assert tree[0].resource_id == "b"
        assert tree[0].contracts[0].policy_id == "policy-b"
        assert [v.version_id for v in tree[0].versions] == ["b@1.0.0"]
        assert tree[0].version_ranges == ("^1.0.0",)

    @pytest.mark.asyncio
    async def test_unbubbled_obligation_has_no_versions(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("b", "^1.0.0")], resolves=["c"])
        builder.add("b", "1.0.0", deps=[("c", "^1.0.0")])
        builder.add("c", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)

        assert tree[0].resource_id == "c"
        assert tree[0].versions == ()
        assert tree[0].version_ranges == ()

    @pytest.mark.asyncio
    async def test_deep_upcast_hidden_behind_non_upcasting_node(self, builder) -> None:
        """A -> B -> C -> X with only C upcasting X: A never sees X."""
        root = builder.add("a", "1.0.0", deps=[("b", "^1.0.0")], resolves=["x"])
        builder.add("b", "1.0.0", deps=[("c", "^1.0.0")])
        builder.add("c", "1.0.0", deps=[("x", "^1.0.0")], upcasts=["x"])
        builder.add("x", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("a"), root)

        assert tree[0].resource_id == "x"
        assert tree[0].versions == ()

    @pytest.mark.asyncio
    async def test_bubbled_obligation_found_through_upcast(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("b", "^1.0.0")], resolves=["c"])
        builder.add("b", "1.0.0", deps=[("c", "^1.0.0")], upcasts=["c"])
        builder.add("c", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)

        assert [v.version_id for v in tree[0].versions] == ["c@1.0.0"]

    @pytest.mark.asyncio
    async def test_convergent_branches_collapse_to_one_version(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("a", "*"), ("b", "*")], resolves=["x"])
        builder.add("a", "1.0.0", deps=[("x", "^1.0.0")], upcasts=["x"])
        builder.add("b", "1.0.0", deps=[("x", "~1.0.0")], upcasts=["x"])
        builder.add("x", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)

        assert [v.version_id for v in tree[0].versions] == ["x@1.0.0"]
        assert tree[0].version_ranges == ("^1.0.0", "~1.0.0")

    @pytest.mark.asyncio
    async def test_multiple_bubbled_versions(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("a", "*"), ("b", "*")], resolves=["x"])
        builder.add("a", "1.0.0", deps=[("x", "^1.0.0")], upcasts=["x"])
        builder.add("b", "1.0.0", deps=[("x", "^2.0.0")], upcasts=["x"])
        builder.add("x", "1.0.0")
        builder.add("x", "2.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)

        assert [v.version for v in tree[0].versions] == ["1.0.0", "2.0.0"]

    @pytest.mark.asyncio
    async def test_nested_obligations(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("b", "^1.0.0")], resolves=["b"])
        builder.add("b", "1.0.0", deps=[("c", "^1.0.0")], resolves=["c"])
        builder.add("c", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)

        nested = tree[0].versions[0].resolve_releases
        assert len(nested) == 1
        assert nested[0].resource_id == "c"
        assert [v.version_id for v in nested[0].versions] == ["c@1.0.0"]

    @pytest.mark.asyncio
    async def test_no_obligations(self, builder) -> None:
        root = builder.add("r", "1.0.0", deps=[("b", "^1.0.0")])
        builder.add("b", "1.0.0")
        tree = await AuthorizationTreeBuilder(builder.catalog()).build(builder.resource("r"), root)
        assert tree == ()

    def test_derive_requires_records(self, builder) -> None:
        auth = AuthorizationTreeBuilder(builder.catalog())
        with pytest.raises(ResolutionError):
            auth.derive(_node("r"), {})
