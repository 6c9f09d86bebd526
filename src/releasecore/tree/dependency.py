"""Dependency tree construction.

Two passes:

1. Fetch, breadth-first. Each tree level costs exactly two catalog round
   trips however wide it is: one batch fetch for every distinct resource
   referenced on the level (across all parents) and one for every resolved
   version. The declared dependencies of those versions form the next level.
2. Assemble, depth-first. Immutable DependencyTreeNode objects are built
   bottom-up from the fetched records, in declaration order.

Levels are numbered from 1 (the root's direct dependencies). A level is
expanded only while its number is <= max_depth, which also bounds cyclic
declarations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..catalog import ResourceCatalog
from ..config import ReleaseCoreConfig
from ..exceptions import ArgumentError, ResolutionError
from ..models import (
    Dependency,
    DependencyTreeNode,
    Resource,
    ResourceVersion,
    ResourceVersionSummary,
)
from ..versioning import VersionResolver

logger = logging.getLogger(__name__)

# Position of a node in the tree: indices of each ancestor edge from the root.
_Path = tuple[int, ...]


@dataclass(frozen=True)
class _ResolvedEdge:
    resource: Resource
    summary: ResourceVersionSummary
    version_range: str
    record: ResourceVersion


def _collapse(dependencies: Sequence[Dependency]) -> list[tuple[str, str]]:
    """One edge per resource id: first position, last declared range."""
    ranges: dict[str, str] = {}
    for dep in dependencies:
        ranges[dep.resource_id] = dep.version_range
    return list(ranges.items())


class DependencyTreeBuilder:
    """Expands declared dependency edges into a tree of resolved nodes."""

    def __init__(
        self,
        catalog: ResourceCatalog,
        resolver: Optional[VersionResolver] = None,
        config: Optional[ReleaseCoreConfig] = None,
    ) -> None:
        self._catalog = catalog
        self._resolver = resolver or VersionResolver()
        self._config = config or ReleaseCoreConfig()

    @property
    def default_max_depth(self) -> int:
        return self._config.tree.max_depth

    async def build(
        self,
        dependencies: Iterable[Dependency],
        max_depth: Optional[int] = None,
    ) -> tuple[DependencyTreeNode, ...]:
        """Resolve ``dependencies`` and, recursively, theirs.

        Raises:
            ArgumentError: if max_depth < 1.
            ResolutionError: if any edge cannot be resolved; no partial tree is returned.
        """
        depth = self.default_max_depth if max_depth is None else max_depth
        if depth < 1:
            raise ArgumentError("max_depth must be at least 1", max_depth=depth)

        resolved, children = await self._fetch_levels(tuple(dependencies), depth)
        return self._assemble((), resolved, children)

    async def build_with_root(
        self,
        resource: Resource,
        version: ResourceVersion,
        max_depth: Optional[int] = None,
    ) -> tuple[DependencyTreeNode, ...]:
        """Same as build() but wrapped in a synthetic node for the root release itself."""
        dependencies = await self.build(version.dependencies, max_depth)
        root = DependencyTreeNode(
            resource_id=resource.resource_id,
            resource_name=resource.resource_name,
            resource_type=resource.resource_type,
            version=version.version,
            version_id=version.version_id,
            versions=tuple(resource.versions),
            version_range=version.version,
            base_upcast_resources=tuple(resource.base_upcast_resources),
            dependencies=dependencies,
        )
        return (root,)

    async def _fetch_levels(
        self,
        dependencies: tuple[Dependency, ...],
        max_depth: int,
    ) -> tuple[dict[_Path, _ResolvedEdge], dict[_Path, list[_Path]]]:
        resolved: dict[_Path, _ResolvedEdge] = {}
        children: dict[_Path, list[_Path]] = {}

        # (parent path, that parent's declared dependencies)
        pending: list[tuple[_Path, Sequence[Dependency]]] = [((), dependencies)] if dependencies else []
        level = 1
        while pending and level <= max_depth:
            edges: list[tuple[_Path, str, str]] = []
            for parent, deps in pending:
                for index, (resource_id, version_range) in enumerate(_collapse(deps)):
                    path = parent + (index,)
                    edges.append((path, resource_id, version_range))
                    children.setdefault(parent, []).append(path)

            logger.debug("Resolving tree level %d: %d edges", level, len(edges))
            level_edges = await self._resolve_level(edges)
            resolved.update(level_edges)

            pending = [(path, edge.record.dependencies) for path, edge in level_edges.items() if edge.record.dependencies]
            level += 1

        return resolved, children

    async def _resolve_level(self, edges: list[tuple[_Path, str, str]]) -> dict[_Path, _ResolvedEdge]:
        resources = await self._catalog.find_resources_by_ids(resource_id for _, resource_id, _ in edges)
        resource_map = {r.resource_id: r for r in resources}

        summaries: list[tuple[_Path, Resource, ResourceVersionSummary, str]] = []
        for path, resource_id, version_range in edges:
            resource = resource_map.get(resource_id)
            if resource is None:
                raise ResolutionError(
                    f"Dependency resource {resource_id} does not exist",
                    resource_id=resource_id,
                    version_range=version_range,
                )
            summary = self._resolver.resolve(resource, version_range)
            summaries.append((path, resource, summary, version_range))

        records = await self._catalog.find_resource_versions_by_ids(s.version_id for _, _, s, _ in summaries)
        record_map = {r.version_id: r for r in records}

        level: dict[_Path, _ResolvedEdge] = {}
        for path, resource, summary, version_range in summaries:
            record = record_map.get(summary.version_id)
            if record is None:
                raise ResolutionError(
                    f"Version {summary.version} of resource {resource.resource_id} is missing from the catalog",
                    resource_id=resource.resource_id,
                    version_id=summary.version_id,
                )
            level[path] = _ResolvedEdge(resource, summary, version_range, record)
        return level

    def _assemble(
        self,
        parent: _Path,
        resolved: dict[_Path, _ResolvedEdge],
        children: dict[_Path, list[_Path]],
    ) -> tuple[DependencyTreeNode, ...]:
        nodes = []
        for path in children.get(parent, ()):
            edge = resolved[path]
            nodes.append(
                DependencyTreeNode(
                    resource_id=edge.resource.resource_id,
                    resource_name=edge.resource.resource_name,
                    resource_type=edge.resource.resource_type,
                    version=edge.summary.version,
                    version_id=edge.summary.version_id,
                    versions=tuple(edge.resource.versions),
                    version_range=edge.version_range,
                    base_upcast_resources=tuple(edge.resource.base_upcast_resources),
                    dependencies=self._assemble(path, resolved, children),
                )
            )
        return tuple(nodes)


__all__ = ["DependencyTreeBuilder"]
