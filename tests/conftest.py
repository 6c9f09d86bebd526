"""Shared fixtures: an in-memory catalog assembled per test."""

from __future__ import annotations

from typing import Iterable

import pytest

from releasecore import (
    BaseUpcastResource,
    Dependency,
    InMemoryRepository,
    ResolveContract,
    ResolveResource,
    Resource,
    ResourceCatalog,
    ResourceVersion,
    ResourceVersionSummary,
)


class CountingRepository(InMemoryRepository):
    """InMemoryRepository that records every batch lookup."""

    def __init__(self, id_field: str, items=()) -> None:
        super().__init__(id_field, items)
        self.batches: list[list[str]] = []

    async def find_by_ids(self, ids):
        ids = list(ids)
        self.batches.append(ids)
        return await super().find_by_ids(ids)


class CatalogBuilder:
    """Declares resources/versions tersely and produces a ResourceCatalog."""

    def __init__(self) -> None:
        self.resources: dict[str, Resource] = {}
        self.records: dict[str, ResourceVersion] = {}

    def add(
        self,
        resource_id: str,
        version: str,
        *,
        deps: Iterable[tuple[str, str]] = (),
        resolves: Iterable[str] = (),
        upcasts: Iterable[str] = (),
        resource_type: str = "image",
    ) -> ResourceVersion:
        version_id = f"{resource_id}@{version}"
        record = ResourceVersion(
            version_id=version_id,
            resource_id=resource_id,
            resource_name=f"alice/{resource_id}",
            resource_type=resource_type,
            version=version,
            dependencies=tuple(Dependency(resource_id=r, version_range=rng) for r, rng in deps),
            resolve_resources=tuple(
                ResolveResource(
                    resource_id=r,
                    resource_name=f"alice/{r}",
                    contracts=(ResolveContract(policy_id=f"policy-{r}"),),
                )
                for r in resolves
            ),
        )
        resource = self.resources.get(resource_id) or Resource(
            resource_id=resource_id,
            resource_name=f"alice/{resource_id}",
            resource_type=resource_type,
        )
        resource.resource_versions.append(ResourceVersionSummary(version=version, version_id=version_id))
        known = {u.resource_id for u in resource.base_upcast_resources}
        for upcast in upcasts:
            if upcast not in known:
                resource.base_upcast_resources.append(BaseUpcastResource(resource_id=upcast))
        self.resources[resource_id] = resource
        self.records[version_id] = record
        return record

    def resource(self, resource_id: str) -> Resource:
        return self.resources[resource_id]

    def version(self, resource_id: str, version: str) -> ResourceVersion:
        return self.records[f"{resource_id}@{version}"]

    def catalog(self) -> ResourceCatalog:
        return ResourceCatalog(
            CountingRepository("resource_id", self.resources.values()),
            CountingRepository("version_id", self.records.values()),
        )


@pytest.fixture
def builder() -> CatalogBuilder:
    return CatalogBuilder()
