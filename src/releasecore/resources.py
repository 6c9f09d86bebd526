"""Resource lifecycle and the tree entry points exposed to callers.

Provides:
- ``ResourceService.create_resource`` / ``update_resource``: metadata and policy changes.
- ``ResourceService.record_version``: registers a version and keeps ``latest_version`` current.
- ``ResourceService.get_dependency_tree`` / ``get_auth_tree``: the query surface
  over DependencyTreeBuilder and AuthorizationTreeBuilder.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Iterable, Optional, Sequence

from .catalog import ResourceCatalog
from .config import ReleaseCoreConfig
from .exceptions import ArgumentError
from .interfaces import PolicyCompiler
from .models import (
    AuthTreeNode,
    FieldSelector,
    Policy,
    PolicyStatus,
    Resource,
    ResourceVersion,
    ResourceVersionSummary,
)
from .tree import AuthorizationTreeBuilder, DependencyTreeBuilder
from .versioning import latest_version, normalize_version

logger = logging.getLogger(__name__)


def generate_resource_id(resource_name: str) -> str:
    """Stable resource id derived from the (case-insensitive) resource name."""
    return hashlib.sha1(resource_name.lower().encode("utf-8")).hexdigest()


class ResourceService:
    """Resource operations over an injected catalog."""

    def __init__(
        self,
        catalog: ResourceCatalog,
        policy_compiler: Optional[PolicyCompiler] = None,
        config: Optional[ReleaseCoreConfig] = None,
    ) -> None:
        self._catalog = catalog
        self._policy_compiler = policy_compiler
        self._config = config or ReleaseCoreConfig()
        self._dependency_builder = DependencyTreeBuilder(catalog, config=self._config)
        self._auth_builder = AuthorizationTreeBuilder(
            catalog, dependency_builder=self._dependency_builder, config=self._config
        )

    async def create_resource(
        self,
        *,
        user_id: int,
        username: str,
        name: str,
        resource_type: str,
        intro: str = "",
        cover_images: Sequence[str] = (),
        tags: Sequence[str] = (),
        policies: Sequence[Policy] = (),
    ) -> Resource:
        resource_name = f"{username}/{name}"
        resource = Resource(
            resource_id=generate_resource_id(resource_name),
            resource_name=resource_name,
            resource_type=resource_type,
            user_id=user_id,
            username=username,
            intro=intro,
            cover_images=list(cover_images),
            tags=list(tags),
            policies=list(policies),
        )
        if await self._catalog.resources.find_one(resource_id=resource.resource_id) is not None:
            raise ArgumentError(f"Resource {resource_name} already exists", resource_name=resource_name)
        await self._catalog.resources.save(resource)
        logger.info("Resource %s created (%s)", resource.resource_id, resource_name)
        return resource

    async def update_resource(
        self,
        resource: Resource,
        *,
        intro: Optional[str] = None,
        cover_images: Optional[Sequence[str]] = None,
        tags: Optional[Sequence[str]] = None,
        add_policies: Sequence[dict[str, Any]] = (),
        update_policies: Sequence[dict[str, Any]] = (),
    ) -> Resource:
        """Apply metadata and policy changes.

        ``update_policies`` items are ``{policy_id, status, policy_name?}`` and
        must reference existing policies; ``add_policies`` items are
        ``{policy_text, policy_name}`` and go through the policy compiler.
        """
        changes: dict[str, Any] = {}
        if intro is not None:
            changes["intro"] = intro
        if cover_images is not None:
            changes["cover_images"] = list(cover_images)
        if tags is not None:
            changes["tags"] = list(tags)
        if add_policies or update_policies:
            changes["policies"] = self._merge_policies(resource, add_policies, update_policies)

        updated = resource.model_copy(update=changes)
        await self._catalog.resources.save(updated)
        return updated

    def _merge_policies(
        self,
        resource: Resource,
        add_policies: Sequence[dict[str, Any]],
        update_policies: Sequence[dict[str, Any]],
    ) -> list[Policy]:
        policies = {p.policy_id: p.model_copy() for p in resource.policies}

        for item in update_policies:
            target = policies.get(item.get("policy_id", ""))
            if target is None:
                raise ArgumentError("Unknown policy_id in update_policies", policy=item)
            policies[target.policy_id] = target.model_copy(
                update={
                    "status": PolicyStatus(item.get("status", target.status)),
                    "policy_name": item.get("policy_name", target.policy_name),
                }
            )

        if add_policies and self._policy_compiler is None:
            raise ArgumentError("Adding policies requires a policy compiler")
        for item in add_policies:
            policy = self._policy_compiler.compile_policy_text(item["policy_text"], item.get("policy_name", ""))
            if policy.policy_id in policies:
                raise ArgumentError("Duplicate policy", policy_id=policy.policy_id)
            policies[policy.policy_id] = policy

        return list(policies.values())

    async def record_version(self, resource: Resource, version: ResourceVersion) -> Resource:
        """Register ``version`` on ``resource`` and recompute its latest version.

        The first recorded version fixes the resource's base upcast set from
        its ``upcast_resources``; later versions leave it unchanged.
        """
        normalized = normalize_version(version.version)
        if normalized in {normalize_version(v) for v in resource.versions}:
            raise ArgumentError(
                f"Resource {resource.resource_id} already has version {normalized}",
                resource_id=resource.resource_id,
                version=normalized,
            )
        summaries = [*resource.resource_versions, ResourceVersionSummary(version=normalized, version_id=version.version_id)]
        changes: dict[str, Any] = {
            "resource_versions": summaries,
            "latest_version": latest_version(s.version for s in summaries),
        }
        if not resource.resource_versions:
            changes["base_upcast_resources"] = list(version.upcast_resources)
        updated = resource.model_copy(update=changes)
        await self._catalog.versions.save(version)
        await self._catalog.resources.save(updated)
        return updated

    async def get_dependency_tree(
        self,
        resource: Resource,
        version: ResourceVersion,
        *,
        max_depth: Optional[int] = None,
        omit_fields: Iterable[str] = (),
        include_root: bool = False,
    ) -> list[dict[str, Any]]:
        """Dependency tree rendered as plain data, with ``omit_fields`` projected away."""
        selector = FieldSelector.omitting(omit_fields)
        if include_root:
            nodes = await self._dependency_builder.build_with_root(resource, version, max_depth)
        else:
            nodes = await self._dependency_builder.build(version.dependencies, max_depth)
        return [node.dump(selector) for node in nodes]

    async def get_auth_tree(self, resource: Resource, version: ResourceVersion) -> tuple[AuthTreeNode, ...]:
        return await self._auth_builder.build(resource, version)


__all__ = ["ResourceService", "generate_resource_id"]
