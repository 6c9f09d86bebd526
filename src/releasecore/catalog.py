"""Resource catalog: batch lookups the tree builders depend on.

The catalog is read-only from the builders' point of view. Its repositories
are injected, so tests and embedding services can swap in any store;
InMemoryRepository is the reference implementation used by fixtures.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel

from .exceptions import CatalogError, ReleaseCoreError
from .interfaces import Repository
from .models import Resource, ResourceVersion

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class InMemoryRepository(Repository[M], Generic[M]):
    """Dict-backed repository keyed by ``id_field``.

    Items are stored and returned as deep copies, so callers never share
    state with the store. Conditions are attribute equality; a list, tuple
    or set value means "attribute is one of these".
    """

    def __init__(self, id_field: str, items: Iterable[M] = ()) -> None:
        self._id_field = id_field
        self._items: dict[str, M] = {}
        for item in items:
            self._items[getattr(item, id_field)] = item.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._items)

    @staticmethod
    def _matches(item: M, condition: dict[str, Any]) -> bool:
        for key, expected in condition.items():
            actual = getattr(item, key, None)
            if isinstance(expected, (list, tuple, set, frozenset)):
                if actual not in expected:
                    return False
            elif actual != expected:
                return False
        return True

    async def find_by_ids(self, ids: Iterable[str]) -> list[M]:
        return [self._items[i].model_copy(deep=True) for i in dict.fromkeys(ids) if i in self._items]

    async def find_one(self, **condition: Any) -> Optional[M]:
        for item in self._items.values():
            if self._matches(item, condition):
                return item.model_copy(deep=True)
        return None

    async def find(self, **condition: Any) -> list[M]:
        return [item.model_copy(deep=True) for item in self._items.values() if self._matches(item, condition)]

    async def save(self, item: M) -> M:
        self._items[getattr(item, self._id_field)] = item.model_copy(deep=True)
        return item


class ResourceCatalog:
    """Batch lookups of resources and resource versions."""

    def __init__(
        self,
        resources: Repository[Resource],
        versions: Repository[ResourceVersion],
    ) -> None:
        self._resources = resources
        self._versions = versions

    @property
    def resources(self) -> Repository[Resource]:
        return self._resources

    @property
    def versions(self) -> Repository[ResourceVersion]:
        return self._versions

    async def find_resources_by_ids(self, ids: Iterable[str]) -> list[Resource]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        logger.debug("Fetching %d resources", len(id_list))
        try:
            return await self._resources.find_by_ids(id_list)
        except ReleaseCoreError:
            raise
        except Exception as e:
            raise CatalogError(f"Resource lookup failed: {e}", resource_ids=id_list) from e

    async def find_resource_versions_by_ids(self, version_ids: Iterable[str]) -> list[ResourceVersion]:
        id_list = list(dict.fromkeys(version_ids))
        if not id_list:
            return []
        logger.debug("Fetching %d resource versions", len(id_list))
        try:
            return await self._versions.find_by_ids(id_list)
        except ReleaseCoreError:
            raise
        except Exception as e:
            raise CatalogError(f"Resource version lookup failed: {e}", version_ids=id_list) from e


__all__ = ["InMemoryRepository", "ResourceCatalog"]
