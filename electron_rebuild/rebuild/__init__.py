"""Native module rebuilding for Electron.

This module provides:
- Header installation for a target Electron version
- Module ABI probing and the rebuild decision
- Native module rebuild through npm
- A post-copy hook for packaging pipelines
"""

from electron_rebuild.rebuild.abi import (
    ABIProbe,
    CanaryLoadResult,
    RebuildDecision,
    RebuildDecisionResult,
    get_electron_module_version,
    parse_module_version,
    should_rebuild_native_modules,
)
from electron_rebuild.rebuild.headers import (
    HeaderInstaller,
    check_for_installed_headers,
    get_headers_root_dir,
    install_node_headers,
)
from electron_rebuild.rebuild.packager_hook import PackagerHook, create_packager_copy_hook
from electron_rebuild.rebuild.prebuilt import (
    locate_electron_prebuilt,
    read_electron_version,
    resolve_electron_executable,
)
from electron_rebuild.rebuild.rebuilder import Rebuilder, rebuild_native_modules

__all__ = [
    "ABIProbe",
    "CanaryLoadResult",
    "RebuildDecision",
    "RebuildDecisionResult",
    "get_electron_module_version",
    "parse_module_version",
    "should_rebuild_native_modules",
    "HeaderInstaller",
    "check_for_installed_headers",
    "get_headers_root_dir",
    "install_node_headers",
    "PackagerHook",
    "create_packager_copy_hook",
    "locate_electron_prebuilt",
    "read_electron_version",
    "resolve_electron_executable",
    "Rebuilder",
    "rebuild_native_modules",
]
