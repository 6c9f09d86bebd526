"""Resolve-list format validation.

Runs before any catalog access, so malformed input never costs a lookup.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..exceptions import ArgumentError
from ..models import ResolveRelease, ResolveReleaseRequest

_RESOLVE_LIST_ADAPTER = TypeAdapter(list[ResolveReleaseRequest])


def validate_resolve_releases(raw: Any) -> list[ResolveRelease]:
    """Validate a resolve-list and return it as models.

    Each entry is ``{resource_id, resource_name?, contracts: [{policy_id,
    auth_scheme_id?}, ...]}``. Unknown keys are rejected, ``contract_id``
    included: contracts are bound only by signing. ``resource_id`` must be
    unique across entries and ``policy_id`` unique within an entry.

    Raises:
        ArgumentError: with an ``errors`` detail listing every problem found.
    """
    try:
        entries = _RESOLVE_LIST_ADAPTER.validate_python(raw)
    except ValidationError as e:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        raise ArgumentError("resolve_releases failed format validation", errors=errors) from e

    errors: list[dict[str, str]] = []
    for resource_id, count in Counter(e.resource_id for e in entries).items():
        if count > 1:
            errors.append({"loc": "resource_id", "msg": f"duplicate resolve entry for {resource_id}"})
    for index, entry in enumerate(entries):
        for policy_id, count in Counter(c.policy_id for c in entry.contracts).items():
            if count > 1:
                errors.append({"loc": f"{index}.contracts", "msg": f"duplicate policy {policy_id}"})

    if errors:
        raise ArgumentError("resolve_releases failed format validation", errors=errors)
    return [entry.to_entry() for entry in entries]


__all__ = ["validate_resolve_releases"]
