"""Subprocess execution module."""

from electron_rebuild.core.process.runner import (
    ProcessResult,
    ProcessRunner,
    get_default_runner,
    headers_env,
    host_arch,
    merge_env,
    resolve_tool,
)

__all__ = [
    "ProcessResult",
    "ProcessRunner",
    "get_default_runner",
    "headers_env",
    "host_arch",
    "merge_env",
    "resolve_tool",
]
