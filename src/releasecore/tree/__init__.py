"""Dependency and authorization tree builders."""

from .authorization import AuthorizationTreeBuilder, collect_version_ids, find_upcast_occurrences
from .dependency import DependencyTreeBuilder

__all__ = [
    "AuthorizationTreeBuilder",
    "DependencyTreeBuilder",
    "collect_version_ids",
    "find_upcast_occurrences",
]
