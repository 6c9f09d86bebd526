"""Catalog entities: resources, their versions and the edges they declare."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PolicyStatus(IntEnum):
    DRAFT = 0
    ACTIVE = 1
    RETIRED = 2


class ResourceStatus(IntEnum):
    OFFLINE = 0
    ONLINE = 1


class Policy(BaseModel):
    """Licensing terms attached to a resource.

    The policy text is compiled by an external policy compiler; only the id,
    name and status matter to this package.
    """

    policy_id: str
    policy_name: str = ""
    policy_text: str = ""
    status: PolicyStatus = PolicyStatus.DRAFT


class ResourceVersionSummary(BaseModel):
    version: str
    version_id: str


class BaseUpcastResource(BaseModel):
    """A sub-resource this resource lets bubble up to its ancestors."""

    model_config = ConfigDict(frozen=True)

    resource_id: str
    resource_name: Optional[str] = None


class Dependency(BaseModel):
    """Structural dependency edge: resource id plus a semver range."""

    model_config = ConfigDict(frozen=True)

    resource_id: str
    resource_name: Optional[str] = None
    version_range: str


class ResolveContract(BaseModel):
    """Contract binding of a resolve edge. ``contract_id`` is absent until signed."""

    model_config = ConfigDict(frozen=True)

    policy_id: str
    contract_id: Optional[str] = None


class ResolveResource(BaseModel):
    """A dependency the version takes contractual responsibility for."""

    model_config = ConfigDict(frozen=True)

    resource_id: str
    resource_name: Optional[str] = None
    contracts: tuple[ResolveContract, ...] = ()


class Resource(BaseModel):
    """A publishable resource and the summaries of all its versions."""

    resource_id: str
    resource_name: str
    resource_type: str
    user_id: int = 0
    username: str = ""
    intro: str = ""
    cover_images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    resource_versions: list[ResourceVersionSummary] = Field(default_factory=list)
    base_upcast_resources: list[BaseUpcastResource] = Field(default_factory=list)
    policies: list[Policy] = Field(default_factory=list)
    latest_version: Optional[str] = None

    @property
    def status(self) -> ResourceStatus:
        """ONLINE only with at least one active policy and at least one version."""
        has_active_policy = any(p.status == PolicyStatus.ACTIVE for p in self.policies)
        if has_active_policy and self.resource_versions:
            return ResourceStatus.ONLINE
        return ResourceStatus.OFFLINE

    @property
    def versions(self) -> list[str]:
        return [v.version for v in self.resource_versions]


class ResourceVersion(BaseModel):
    """Immutable version record with the edges declared for that version."""

    model_config = ConfigDict(frozen=True)

    version_id: str
    resource_id: str
    resource_name: str = ""
    resource_type: str = ""
    version: str
    file_sha1: str = ""
    user_id: int = 0
    description: str = ""
    dependencies: tuple[Dependency, ...] = ()
    upcast_resources: tuple[BaseUpcastResource, ...] = ()
    resolve_resources: tuple[ResolveResource, ...] = ()


__all__ = [
    "BaseUpcastResource",
    "Dependency",
    "Policy",
    "PolicyStatus",
    "ResolveContract",
    "ResolveResource",
    "Resource",
    "ResourceStatus",
    "ResourceVersion",
    "ResourceVersionSummary",
]
