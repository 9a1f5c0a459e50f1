"""Data models module."""

from electron_rebuild.models.rebuild import DependencyClass, RebuildRequest, parse_module_set

__all__ = [
    "DependencyClass",
    "RebuildRequest",
    "parse_module_set",
]
