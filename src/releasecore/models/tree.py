"""Ephemeral tree nodes computed per query.

Nodes are frozen: builders assemble them bottom-up from already fetched
records and nothing mutates them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict

from ..exceptions import ArgumentError
from .resource import BaseUpcastResource, ResolveContract


class DependencyTreeNode(BaseModel):
    """A resolved dependency and, recursively, its own resolved dependencies."""

    model_config = ConfigDict(frozen=True)

    resource_id: str
    resource_name: str
    resource_type: str
    version: str
    version_id: str
    versions: tuple[str, ...] = ()
    version_range: str
    base_upcast_resources: tuple[BaseUpcastResource, ...] = ()
    dependencies: tuple[DependencyTreeNode, ...] = ()

    def upcasts(self, resource_id: str) -> bool:
        """True when this node lets ``resource_id`` bubble further up."""
        return any(x.resource_id == resource_id for x in self.base_upcast_resources)

    def dump(self, selector: FieldSelector | None = None) -> dict[str, Any]:
        """Render this subtree as plain data, dropping the selector's fields at every level."""
        omit = selector.omit if selector is not None else frozenset()
        data = self.model_dump(mode="json", exclude=set(omit) | {"dependencies"})
        data["dependencies"] = [child.dump(selector) for child in self.dependencies]
        return data


# ``dependencies`` carries the tree structure itself and cannot be projected away.
PROJECTABLE_FIELDS = frozenset(DependencyTreeNode.model_fields) - {"dependencies"}


@dataclass(frozen=True)
class FieldSelector:
    """Fields to leave out when rendering dependency tree nodes."""

    omit: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.omit) - PROJECTABLE_FIELDS)
        if unknown:
            raise ArgumentError(
                f"Cannot omit unknown tree fields: {', '.join(unknown)}",
                fields=unknown,
            )

    @classmethod
    def omitting(cls, fields: Iterable[str] | None) -> FieldSelector:
        return cls(omit=frozenset(fields or ()))


class AuthTreeVersion(BaseModel):
    """One distinct resolved version of a resolve target and its own obligations."""

    model_config = ConfigDict(frozen=True)

    version: str
    version_id: str
    resolve_releases: tuple[AuthTreeNode, ...] = ()


class AuthTreeNode(BaseModel):
    """A resolve obligation and every version of the target that satisfies it.

    An empty ``versions`` tuple is a legitimate state: the obligation is
    declared but nothing in the dependency graph currently bubbles the target.
    """

    model_config = ConfigDict(frozen=True)

    resource_id: str
    resource_name: str | None = None
    contracts: tuple[ResolveContract, ...] = ()
    versions: tuple[AuthTreeVersion, ...] = ()
    version_ranges: tuple[str, ...] = ()


AuthTreeVersion.model_rebuild()


__all__ = [
    "AuthTreeNode",
    "AuthTreeVersion",
    "DependencyTreeNode",
    "FieldSelector",
    "PROJECTABLE_FIELDS",
]
