"""Seams to external collaborators.

- Repository: swappable read/write store for one entity type (persistence
  technology is the embedding service's choice).
- ContractSigner: signs and binds the contracts of a release scheme.
- PolicyCompiler: turns policy text into a Policy (black box here).
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, Optional, Protocol, TypeVar, runtime_checkable

from .models import Policy, ReleaseScheme

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Async repository over a single entity type."""

    @abstractmethod
    async def find_by_ids(self, ids: Iterable[str]) -> list[T]:
        """Batch lookup. Missing ids are skipped; order is not guaranteed."""
        raise NotImplementedError

    @abstractmethod
    async def find_one(self, **condition: Any) -> Optional[T]:
        raise NotImplementedError

    @abstractmethod
    async def find(self, **condition: Any) -> list[T]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, item: T) -> T:
        """Insert or replace ``item``."""
        raise NotImplementedError


@runtime_checkable
class ContractSigner(Protocol):
    """Signs every unbound contract of a scheme and returns the updated scheme.

    Implementations keep the scheme_id unchanged and only fill ``contract_id``s.
    """

    async def sign_and_bind(self, scheme: ReleaseScheme) -> ReleaseScheme: ...


@runtime_checkable
class PolicyCompiler(Protocol):
    """Compiles policy text into a Policy with a stable ``policy_id``."""

    def compile_policy_text(self, policy_text: str, policy_name: str) -> Policy: ...


__all__ = ["ContractSigner", "PolicyCompiler", "Repository"]
