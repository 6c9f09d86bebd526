"""Release scheme validation, orchestration and coverage metrics."""

from .coverage import (
    apply_coverage,
    bubble_eligible_resource_ids,
    contract_coverage_rate,
    statement_coverage_rate,
)
from .resolver import ReleaseSchemeResolver, generate_scheme_id
from .validation import validate_resolve_releases

__all__ = [
    "ReleaseSchemeResolver",
    "apply_coverage",
    "bubble_eligible_resource_ids",
    "contract_coverage_rate",
    "generate_scheme_id",
    "statement_coverage_rate",
    "validate_resolve_releases",
]
