"""Semantic-version resolution.

Ranges follow npm semantics (``^1.0.0``, ``~1.2``, ``>1.0.0 <3``, ``1.x``),
provided by node-semver. Versions are unique per resource, so the highest
satisfying candidate is always unambiguous.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import nodesemver

from .exceptions import ArgumentError, ResolutionError
from .models.resource import Resource, ResourceVersionSummary

logger = logging.getLogger(__name__)

# Strict parsing; "loose" would accept things like "=1.0.0beta".
_LOOSE = False


@dataclass(frozen=True)
class VersionMatch:
    version: str | None
    matched: bool


def _clean(version: str) -> str | None:
    if not isinstance(version, str):
        return None
    return nodesemver.clean(version.strip().lstrip("=v"), _LOOSE)


def is_valid_version(version: str) -> bool:
    return _clean(version) is not None


def normalize_version(version: str) -> str:
    """Normalize a version string: no leading ``v``/``=``, no build metadata.

    Raises:
        ArgumentError: if ``version`` is not a semantic version.
    """
    cleaned = _clean(version)
    if cleaned is None:
        raise ArgumentError(f"Invalid semantic version: {version!r}", version=version)
    return cleaned


def is_valid_range(version_range: str) -> bool:
    if not isinstance(version_range, str):
        return False
    return nodesemver.valid_range(version_range, _LOOSE) is not None


def resolve_max_satisfying(candidates: Iterable[str], version_range: str) -> VersionMatch:
    """Pick the highest candidate satisfying ``version_range``.

    Candidates that are not valid versions are ignored. An invalid range
    matches nothing.
    """
    normalized = [v for v in (_clean(c) for c in candidates) if v is not None]
    if not normalized or not is_valid_range(version_range):
        return VersionMatch(version=None, matched=False)
    best = nodesemver.max_satisfying(normalized, version_range, _LOOSE)
    return VersionMatch(version=best, matched=best is not None)


def is_greater(version: str, other: str) -> bool:
    """Strict semver ``version > other``."""
    return nodesemver.gt(normalize_version(version), normalize_version(other), _LOOSE)


def latest_version(versions: Iterable[str]) -> str | None:
    """Semver maximum of ``versions``; None when empty."""
    latest: str | None = None
    for version in versions:
        candidate = normalize_version(version)
        if latest is None or nodesemver.gt(candidate, latest, _LOOSE):
            latest = candidate
    return latest


class VersionResolver:
    """Resolves a dependency edge to a concrete version of a catalog resource."""

    def resolve_summary(
        self,
        resource_id: str,
        summaries: Sequence[ResourceVersionSummary],
        version_range: str,
    ) -> ResourceVersionSummary:
        """Resolve ``version_range`` against a resource's version summaries.

        Raises:
            ResolutionError: when no summary satisfies the range.
        """
        match = resolve_max_satisfying((s.version for s in summaries), version_range)
        if match.matched:
            for summary in summaries:
                if _clean(summary.version) == match.version:
                    return summary
        logger.warning(
            "No version of %s satisfies %r (known: %s)",
            resource_id,
            version_range,
            [s.version for s in summaries],
        )
        raise ResolutionError(
            f"No version of resource {resource_id} satisfies range {version_range!r}",
            resource_id=resource_id,
            version_range=version_range,
        )

    def resolve(self, resource: Resource, version_range: str) -> ResourceVersionSummary:
        return self.resolve_summary(resource.resource_id, resource.resource_versions, version_range)


__all__ = [
    "VersionMatch",
    "VersionResolver",
    "is_greater",
    "is_valid_range",
    "is_valid_version",
    "latest_version",
    "normalize_version",
    "resolve_max_satisfying",
]
