"""Coverage metrics for authorization schemes and resolve-lists.

Both rates are integer percentages in [0, 100]. Nothing to cover counts as
fully covered.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..models import AuthScheme, DependencyTreeNode, DutyStatement, ResolveRelease
from ..tree import find_upcast_occurrences


def _percent(covered: int, total: int) -> int:
    if total == 0:
        return 100
    return round(covered * 100 / total)


def bubble_eligible_resource_ids(dependencies: Iterable[DependencyTreeNode]) -> list[str]:
    """Resources that reach a node from its dependency subtree.

    That is every direct dependency, plus every resource a direct dependency
    upcasts and that actually occurs (through bubbling) beneath it.
    """
    eligible: dict[str, None] = {}
    for child in dependencies:
        eligible.setdefault(child.resource_id, None)
        for upcast in child.base_upcast_resources:
            if find_upcast_occurrences(child.dependencies, upcast.resource_id):
                eligible.setdefault(upcast.resource_id, None)
    return list(eligible)


def statement_coverage_rate(
    eligible_resource_ids: Iterable[str],
    duty_statements: Iterable[DutyStatement],
) -> int:
    """Share of bubble-eligible resources with an explicit duty statement."""
    eligible = set(eligible_resource_ids)
    stated = {s.resource_id for s in duty_statements}
    return _percent(len(eligible & stated), len(eligible))


def contract_coverage_rate(resolve_releases: Iterable[ResolveRelease]) -> int:
    """Share of resolve entries whose contracts are all bound."""
    entries = list(resolve_releases)
    return _percent(sum(1 for e in entries if e.is_bound), len(entries))


def apply_coverage(
    auth_scheme: AuthScheme,
    resolve_releases: Iterable[ResolveRelease] = (),
    eligible_resource_ids: Optional[Iterable[str]] = None,
) -> AuthScheme:
    """Copy of ``auth_scheme`` with both coverage rates recomputed.

    Without explicit eligible ids, the scheme's own declarations are used:
    everything it either states or bubbles.
    """
    if eligible_resource_ids is None:
        eligible = set(auth_scheme.bubble_resource_ids) | {s.resource_id for s in auth_scheme.duty_statements}
    else:
        eligible = set(eligible_resource_ids)
    return auth_scheme.model_copy(
        update={
            "statement_coverage_rate": statement_coverage_rate(eligible, auth_scheme.duty_statements),
            "contract_coverage_rate": contract_coverage_rate(resolve_releases),
        }
    )


__all__ = [
    "apply_coverage",
    "bubble_eligible_resource_ids",
    "contract_coverage_rate",
    "statement_coverage_rate",
]
