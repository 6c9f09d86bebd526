"""Data models for releasecore.

These are Pydantic models shared by the tree builders and scheme orchestration.
"""

from __future__ import annotations

from .resource import (
    BaseUpcastResource,
    Dependency,
    Policy,
    PolicyStatus,
    ResolveContract,
    ResolveResource,
    Resource,
    ResourceStatus,
    ResourceVersion,
    ResourceVersionSummary,
)
from .scheme import (
    AuthScheme,
    AuthSchemeStatus,
    ContractRequest,
    DutyStatement,
    Release,
    ReleaseScheme,
    ReleaseVersionRef,
    ResolveRelease,
    ResolveReleaseRequest,
    SchemeContract,
    SchemeStatus,
    StatementState,
)
from .tree import AuthTreeNode, AuthTreeVersion, DependencyTreeNode, FieldSelector

__all__ = [
    # Catalog
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
    # Trees
    "AuthTreeNode",
    "AuthTreeVersion",
    "DependencyTreeNode",
    "FieldSelector",
    # Schemes
    "AuthScheme",
    "AuthSchemeStatus",
    "ContractRequest",
    "DutyStatement",
    "Release",
    "ReleaseScheme",
    "ReleaseVersionRef",
    "ResolveRelease",
    "ResolveReleaseRequest",
    "SchemeContract",
    "SchemeStatus",
    "StatementState",
]
