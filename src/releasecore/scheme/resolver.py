"""Release scheme orchestration.

Per release version::

    (no scheme) --create--> PENDING_SIGNATURE --sign_and_bind--> BOUND

A scheme is pending while any resolve entry has an unbound contract. Signing
itself is delegated to the injected ContractSigner; a failure there leaves
the scheme pending until retry_sign_contracts() is called.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Iterable, Optional, Sequence

from ..config import ReleaseCoreConfig
from ..exceptions import ArgumentError, NotFoundError, ReleaseCoreError, SigningError
from ..interfaces import ContractSigner, Repository
from ..logging import get_release_logger, safe_preview
from ..models import (
    Release,
    ReleaseScheme,
    ReleaseVersionRef,
    ResolveRelease,
    Resource,
    SchemeStatus,
)
from ..versioning import is_greater, normalize_version
from .validation import validate_resolve_releases

logger = logging.getLogger(__name__)


def generate_scheme_id(release_id: str, version: str) -> str:
    """Deterministic scheme id for a release version."""
    return hashlib.md5(f"{release_id}-{normalize_version(version)}".encode("utf-8")).hexdigest()


async def _gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """asyncio.gather that cancels the remaining awaitables on the first failure.

    Cancelled siblings are awaited before the failure propagates, so none of
    them is left pending or with an unretrieved exception.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class ReleaseSchemeResolver:
    """Validates, persists and signs release schemes."""

    def __init__(
        self,
        releases: Repository[Release],
        resources: Repository[Resource],
        schemes: Repository[ReleaseScheme],
        signer: ContractSigner,
        config: Optional[ReleaseCoreConfig] = None,
    ) -> None:
        self._releases = releases
        self._resources = resources
        self._schemes = schemes
        self._signer = signer
        self._config = config or ReleaseCoreConfig()

    # ── Lookups ──────────────────────────────────────────

    async def _get_release(self, release_id: str) -> Release:
        release = await self._releases.find_one(release_id=release_id)
        if release is None:
            raise NotFoundError(f"Release {release_id} not found", release_id=release_id)
        return release

    async def _get_resource(self, resource_id: str) -> Resource:
        resource = await self._resources.find_one(resource_id=resource_id)
        if resource is None:
            raise NotFoundError(f"Resource {resource_id} not found", resource_id=resource_id)
        return resource

    async def get_release_scheme(self, release_id: str, version: str) -> ReleaseScheme:
        scheme = await self._schemes.find_one(release_id=release_id, version=normalize_version(version))
        if scheme is None:
            raise NotFoundError(
                f"No scheme for release {release_id} version {version}",
                release_id=release_id,
                version=version,
            )
        return scheme

    async def list_release_schemes(
        self,
        scheme_ids: Optional[Sequence[str]] = None,
        release_ids: Optional[Sequence[str]] = None,
        versions: Optional[Sequence[str]] = None,
    ) -> list[ReleaseScheme]:
        """Schemes matching every given filter.

        ``versions`` pairs positionally with ``release_ids``; the two lists
        must have the same length.
        """
        filters = (scheme_ids, release_ids, versions)
        if all(f is None for f in filters):
            raise ArgumentError("One of scheme_ids, release_ids or versions is required")
        if any(f is not None and len(f) == 0 for f in filters):
            raise ArgumentError("Filters must not be empty lists")
        if versions is not None and (release_ids is None or len(versions) != len(release_ids)):
            raise ArgumentError("versions must pair one-to-one with release_ids")

        condition: dict[str, Any] = {}
        if scheme_ids is not None:
            condition["scheme_id"] = list(scheme_ids)
        if release_ids is not None:
            condition["release_id"] = list(release_ids)
        schemes = await self._schemes.find(**condition)

        if versions is not None:
            pairs = set(zip(release_ids or (), (normalize_version(v) for v in versions)))
            schemes = [s for s in schemes if (s.release_id, s.version) in pairs]
        return schemes

    async def get_release_version_resource(self, release_id: str, version: str) -> Resource:
        """The resource published under a given release version."""
        release = await self._get_release(release_id)
        ref = release.find_version(normalize_version(version))
        if ref is None:
            raise ArgumentError(f"Release {release_id} has no version {version}", release_id=release_id, version=version)
        return await self._get_resource(ref.resource_id)

    # ── Validation ───────────────────────────────────────

    @staticmethod
    def _check_resource_type(release: Release, resource: Resource) -> None:
        if resource.resource_type != release.resource_type:
            raise ArgumentError(
                f"Resource type {resource.resource_type!r} does not match release type {release.resource_type!r}",
                resource_type=resource.resource_type,
                release_type=release.resource_type,
            )

    @staticmethod
    def _check_self_resolution(
        release: Release,
        resource_id: str,
        entries: Iterable[ResolveRelease],
    ) -> None:
        own = release.resource_ids | {resource_id}
        conflicts = sorted({e.resource_id for e in entries} & own)
        if conflicts:
            raise ArgumentError(
                "A release cannot resolve its own resources",
                release_id=release.release_id,
                resource_ids=conflicts,
            )

    # ── Operations ───────────────────────────────────────

    async def create_release_scheme(
        self,
        release_id: str,
        resource_id: str,
        version: str,
        resolve_releases: Any,
    ) -> ReleaseScheme:
        """Publish ``resource_id`` as a new version of a release.

        Raises:
            ArgumentError: malformed resolve-list or version, resource already
                in the release, self-resolution, version not greater than the
                latest, or resource type mismatch.
            NotFoundError: release or resource missing.
        """
        entries = validate_resolve_releases(resolve_releases)
        version = normalize_version(version)

        release, resource = await _gather_or_cancel(
            self._get_release(release_id),
            self._get_resource(resource_id),
        )

        if resource_id in release.resource_ids:
            raise ArgumentError(
                f"Resource {resource_id} is already published in release {release_id}",
                release_id=release_id,
                resource_id=resource_id,
            )
        self._check_self_resolution(release, resource_id, entries)
        if release.latest_version is not None and not is_greater(version, release.latest_version.version):
            raise ArgumentError(
                f"Version {version} must be greater than latest version {release.latest_version.version}",
                version=version,
                latest_version=release.latest_version.version,
            )
        self._check_resource_type(release, resource)

        now = datetime.now(timezone.utc)
        scheme = ReleaseScheme(
            scheme_id=generate_scheme_id(release_id, version),
            release_id=release_id,
            resource_id=resource_id,
            version=version,
            resolve_releases=entries,
            created_at=now,
            updated_at=now,
        )
        await self._schemes.save(scheme)

        ref = ReleaseVersionRef(version=version, resource_id=resource_id, created_at=now)
        release.resource_versions.append(ref)
        release.latest_version = ref
        await self._releases.save(release)

        log = get_release_logger(__name__, release_id=release_id)
        log.info("Release scheme created", version=version, scheme_id=scheme.scheme_id)
        return await self._sign(scheme)

    async def update_release_scheme(
        self,
        release_id: str,
        version: str,
        resolve_releases: Any,
    ) -> ReleaseScheme:
        """Replace the resolve-list of an existing release version.

        Contracts already bound for the same (resource, policy) pair are kept.
        """
        entries = validate_resolve_releases(resolve_releases)
        version = normalize_version(version)

        release = await self._get_release(release_id)
        ref = release.find_version(version)
        if ref is None:
            raise ArgumentError(f"Release {release_id} has no version {version}", release_id=release_id, version=version)
        resource = await self._get_resource(ref.resource_id)

        self._check_self_resolution(release, ref.resource_id, entries)
        self._check_resource_type(release, resource)

        now = datetime.now(timezone.utc)
        existing = await self._schemes.find_one(release_id=release_id, version=version)
        if existing is not None:
            entries = _carry_bound_contracts(existing, entries)

        scheme = ReleaseScheme(
            scheme_id=generate_scheme_id(release_id, version),
            release_id=release_id,
            resource_id=ref.resource_id,
            version=version,
            resolve_releases=entries,
            created_at=existing.created_at if existing is not None else now,
            updated_at=now,
        )
        await self._schemes.save(scheme)

        log = get_release_logger(__name__, release_id=release_id)
        log.info("Release scheme updated", version=version, scheme_id=scheme.scheme_id)
        return await self._sign(scheme)

    async def retry_sign_contracts(self, release_id: str, version: str) -> ReleaseScheme:
        """Sign the still unbound contracts of a scheme; a no-op once all are bound.

        Raises:
            NotFoundError: release or scheme missing.
            SigningError: the signer failed.
        """
        await self._get_release(release_id)
        scheme = await self.get_release_scheme(release_id, version)
        if scheme.status == SchemeStatus.BOUND:
            return scheme

        try:
            signed = await self._signer.sign_and_bind(scheme)
        except ReleaseCoreError:
            raise
        except Exception as e:
            raise SigningError(f"Contract signing failed: {e}", scheme_id=scheme.scheme_id) from e
        return await self._store_signed(scheme, signed)

    async def _sign(self, scheme: ReleaseScheme) -> ReleaseScheme:
        if not self._config.scheme.sign_on_create or scheme.status == SchemeStatus.BOUND:
            return scheme
        try:
            signed = await self._signer.sign_and_bind(scheme)
            return await self._store_signed(scheme, signed)
        except Exception:
            # Scheme stays pending; retry_sign_contracts() picks it up.
            logger.exception(
                "Contract signing failed for scheme %s (%s@%s)",
                scheme.scheme_id,
                scheme.release_id,
                scheme.version,
            )
            return scheme

    async def _store_signed(self, scheme: ReleaseScheme, signed: ReleaseScheme) -> ReleaseScheme:
        if signed.scheme_id != scheme.scheme_id:
            raise SigningError(
                "Signer returned a different scheme",
                expected=scheme.scheme_id,
                actual=signed.scheme_id,
            )
        signed = signed.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        await self._schemes.save(signed)
        logger.info(
            "Scheme %s signed, status=%s, unbound=%s",
            signed.scheme_id,
            signed.status.value,
            safe_preview([e.resource_id for e in signed.unbound_entries]),
        )
        return signed


def _carry_bound_contracts(existing: ReleaseScheme, entries: list[ResolveRelease]) -> list[ResolveRelease]:
    bound = {
        (entry.resource_id, contract.policy_id): contract.contract_id
        for entry in existing.resolve_releases
        for contract in entry.contracts
        if contract.contract_id
    }
    merged = []
    for entry in entries:
        contracts = [
            c if c.contract_id else c.model_copy(update={"contract_id": bound.get((entry.resource_id, c.policy_id))})
            for c in entry.contracts
        ]
        merged.append(entry.model_copy(update={"contracts": contracts}))
    return merged


__all__ = ["ReleaseSchemeResolver", "generate_scheme_id"]
