"""Releases, release schemes and authorization schemes."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReleaseVersionRef(BaseModel):
    """A version of a release and the resource published under it."""

    version: str
    resource_id: str
    created_at: datetime = Field(default_factory=_utcnow)


class Release(BaseModel):
    release_id: str
    release_name: str
    resource_type: str
    user_id: int = 0
    resource_versions: list[ReleaseVersionRef] = Field(default_factory=list)
    latest_version: Optional[ReleaseVersionRef] = None

    def find_version(self, version: str) -> ReleaseVersionRef | None:
        return next((x for x in self.resource_versions if x.version == version), None)

    @property
    def resource_ids(self) -> set[str]:
        return {x.resource_id for x in self.resource_versions}


class ContractRequest(BaseModel):
    """A policy a caller picks for a resolve entry; ``contract_id`` is set only by signing."""

    model_config = ConfigDict(extra="forbid")

    policy_id: str = Field(min_length=1)
    auth_scheme_id: Optional[str] = None


class ResolveReleaseRequest(BaseModel):
    """One entry of a caller-supplied resolve-list."""

    model_config = ConfigDict(extra="forbid")

    resource_id: str = Field(min_length=1)
    resource_name: Optional[str] = None
    contracts: list[ContractRequest] = Field(min_length=1)

    def to_entry(self) -> ResolveRelease:
        return ResolveRelease(
            resource_id=self.resource_id,
            resource_name=self.resource_name,
            contracts=[SchemeContract(**c.model_dump()) for c in self.contracts],
        )


class SchemeContract(BaseModel):
    """A policy chosen for a resolve entry; bound once the signer sets ``contract_id``."""

    policy_id: str = Field(min_length=1)
    auth_scheme_id: Optional[str] = None
    contract_id: Optional[str] = None


class ResolveRelease(BaseModel):
    """One stored entry of a release scheme's resolve-list."""

    resource_id: str = Field(min_length=1)
    resource_name: Optional[str] = None
    contracts: list[SchemeContract] = Field(min_length=1)

    @property
    def is_bound(self) -> bool:
        return all(c.contract_id for c in self.contracts)


class SchemeStatus(str, Enum):
    PENDING_SIGNATURE = "pending_signature"
    BOUND = "bound"


class ReleaseScheme(BaseModel):
    """Persisted record of a release version's resolve-list and its contracts."""

    scheme_id: str
    release_id: str
    resource_id: str
    version: str
    resolve_releases: list[ResolveRelease] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def status(self) -> SchemeStatus:
        if all(entry.is_bound for entry in self.resolve_releases):
            return SchemeStatus.BOUND
        return SchemeStatus.PENDING_SIGNATURE

    @property
    def unbound_entries(self) -> list[ResolveRelease]:
        return [entry for entry in self.resolve_releases if not entry.is_bound]


class AuthSchemeStatus(IntEnum):
    INITIAL = 0
    PUBLISHED = 1
    OFFLINE = 2


class StatementState(IntEnum):
    """How an auth scheme treats its dependencies."""

    BUBBLE_ALL = 1
    CONTAIN_ALL = 2
    PARTIAL_BUBBLE = 3


class DutyStatement(BaseModel):
    """Explicit statement that the scheme resolves ``resource_id`` itself."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resource_id: str
    auth_scheme_id: str
    policy_segment_id: str


class AuthScheme(BaseModel):
    auth_scheme_id: str
    auth_scheme_name: str
    resource_id: str
    depend_count: int = 0
    statement_state: StatementState = StatementState.BUBBLE_ALL
    bubble_resource_ids: list[str] = Field(default_factory=list)
    duty_statements: list[DutyStatement] = Field(default_factory=list)
    statement_coverage_rate: int = Field(default=0, ge=0, le=100)
    contract_coverage_rate: int = Field(default=0, ge=0, le=100)
    user_id: int = 0
    status: AuthSchemeStatus = AuthSchemeStatus.INITIAL


__all__ = [
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
