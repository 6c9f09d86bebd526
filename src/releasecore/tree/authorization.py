"""Authorization tree derivation.

For every resolve obligation a version declares, find which resolved
versions of the target resource bubble up to it through its dependency
subtree, and recurse into each of them.

Multiple bubbling: if a depth-2 node bubbles X@1.0 and a depth-3 node
bubbles X@1.1, and the depth-1 node resolves X, both 1.0 and 1.1 appear
under that obligation, each with its own nested obligations.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ..catalog import ResourceCatalog
from ..config import ReleaseCoreConfig
from ..exceptions import ResolutionError
from ..models import (
    AuthTreeNode,
    AuthTreeVersion,
    DependencyTreeNode,
    Resource,
    ResourceVersion,
)
from .dependency import DependencyTreeBuilder

logger = logging.getLogger(__name__)


def collect_version_ids(nodes: Iterable[DependencyTreeNode]) -> list[str]:
    """Every distinct version id in the tree, depth-first."""
    seen: dict[str, None] = {}

    def walk(level: Iterable[DependencyTreeNode]) -> None:
        for node in level:
            seen.setdefault(node.version_id, None)
            walk(node.dependencies)

    walk(nodes)
    return list(seen)


def find_upcast_occurrences(
    nodes: Iterable[DependencyTreeNode],
    resource_id: str,
) -> list[DependencyTreeNode]:
    """Occurrences of ``resource_id`` reachable by bubbling.

    A node stops the search below itself as soon as it does not list
    ``resource_id`` among its upcast resources: deeper occurrences belong to
    whichever node resolves them on the way up, not to the caller.
    """
    found: list[DependencyTreeNode] = []
    for node in nodes:
        if node.resource_id == resource_id:
            found.append(node)
        if node.upcasts(resource_id):
            found.extend(find_upcast_occurrences(node.dependencies, resource_id))
    return found


class AuthorizationTreeBuilder:
    """Builds the authorization tree of a resource version."""

    def __init__(
        self,
        catalog: ResourceCatalog,
        dependency_builder: Optional[DependencyTreeBuilder] = None,
        config: Optional[ReleaseCoreConfig] = None,
    ) -> None:
        self._config = config or ReleaseCoreConfig()
        self._catalog = catalog
        self._dependency_builder = dependency_builder or DependencyTreeBuilder(catalog, config=self._config)

    async def build(self, resource: Resource, version: ResourceVersion) -> tuple[AuthTreeNode, ...]:
        tree = await self._dependency_builder.build_with_root(
            resource, version, max_depth=self._config.tree.auth_max_depth
        )

        version_ids = collect_version_ids(tree)
        records = await self._catalog.find_resource_versions_by_ids(version_ids)
        record_map = {r.version_id: r for r in records}
        logger.debug(
            "Deriving auth tree for %s@%s over %d versions",
            resource.resource_id,
            version.version,
            len(record_map),
        )

        return self.derive(tree[0], record_map)

    def derive(
        self,
        node: DependencyTreeNode,
        records: Mapping[str, ResourceVersion],
    ) -> tuple[AuthTreeNode, ...]:
        """Authorization subtree of one dependency tree node (pure, no I/O)."""
        record = records.get(node.version_id)
        if record is None:
            raise ResolutionError(
                f"Version {node.version} of resource {node.resource_id} is missing from the catalog",
                resource_id=node.resource_id,
                version_id=node.version_id,
            )

        auth_nodes = []
        for obligation in record.resolve_resources:
            matches = find_upcast_occurrences(node.dependencies, obligation.resource_id)

            distinct: dict[str, DependencyTreeNode] = {}
            for match in matches:
                distinct.setdefault(match.version_id, match)

            auth_nodes.append(
                AuthTreeNode(
                    resource_id=obligation.resource_id,
                    resource_name=obligation.resource_name,
                    contracts=obligation.contracts,
                    versions=tuple(
                        AuthTreeVersion(
                            version=match.version,
                            version_id=match.version_id,
                            resolve_releases=self.derive(match, records),
                        )
                        for match in distinct.values()
                    ),
                    version_ranges=tuple(dict.fromkeys(m.version_range for m in matches)),
                )
            )
        return tuple(auth_nodes)


__all__ = [
    "AuthorizationTreeBuilder",
    "collect_version_ids",
    "find_upcast_occurrences",
]
