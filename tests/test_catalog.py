"""Tests for the in-memory repository and the resource catalog."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from releasecore import CatalogError, InMemoryRepository, Resource, ResourceCatalog


def _resource(resource_id: str, resource_type: str = "image") -> Resource:
    return Resource(resource_id=resource_id, resource_name=f"alice/{resource_id}", resource_type=resource_type)


class TestInMemoryRepository:
    """Tests for InMemoryRepository."""

    @pytest.mark.asyncio
    async def test_find_by_ids_skips_missing(self) -> None:
        repo = InMemoryRepository("resource_id", [_resource("a"), _resource("b")])
        found = await repo.find_by_ids(["b", "ghost", "a", "b"])
        assert [r.resource_id for r in found] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_find_with_membership_condition(self) -> None:
        repo = InMemoryRepository(
            "resource_id", [_resource("a"), _resource("b", "document"), _resource("c")]
        )
        found = await repo.find(resource_id=["a", "b"], resource_type="image")
        assert [r.resource_id for r in found] == ["a"]

    @pytest.mark.asyncio
    async def test_returns_copies(self) -> None:
        repo = InMemoryRepository("resource_id", [_resource("a")])
        first = await repo.find_one(resource_id="a")
        first.tags.append("mutated")
        second = await repo.find_one(resource_id="a")
        assert second.tags == []

    @pytest.mark.asyncio
    async def test_save_replaces(self) -> None:
        repo = InMemoryRepository("resource_id", [_resource("a")])
        await repo.save(_resource("a", "document"))
        assert len(repo) == 1
        assert (await repo.find_one(resource_id="a")).resource_type == "document"


class TestResourceCatalog:
    """Tests for ResourceCatalog batch lookups."""

    @pytest.mark.asyncio
    async def test_dedupes_ids(self) -> None:
        resources = MagicMock()
        resources.find_by_ids = AsyncMock(return_value=[])
        catalog = ResourceCatalog(resources, MagicMock())

        await catalog.find_resources_by_ids(["a", "b", "a"])

        resources.find_by_ids.assert_awaited_once_with(["a", "b"])

    @pytest.mark.asyncio
    async def test_empty_ids_skip_the_store(self) -> None:
        versions = MagicMock()
        versions.find_by_ids = AsyncMock()
        catalog = ResourceCatalog(MagicMock(), versions)

        assert await catalog.find_resource_versions_by_ids([]) == []
        versions.find_by_ids.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_becomes_catalog_error(self) -> None:
        resources = MagicMock()
        resources.find_by_ids = AsyncMock(side_effect=ConnectionError("db down"))
        catalog = ResourceCatalog(resources, MagicMock())

        with pytest.raises(CatalogError) as exc_info:
            await catalog.find_resources_by_ids(["a"])
        assert exc_info.value.details["resource_ids"] == ["a"]
