"""Exception definitions module."""

from electron_rebuild.core.exceptions.errors import (
    CapturedOutputError,
    ConfigurationError,
    ElectronRebuildError,
    HeadersMissingError,
    InstallError,
    ManifestError,
    ModuleVersionParseError,
    PlatformMismatchError,
    PrebuiltNotFoundError,
    ProbeError,
    ProcessError,
    RebuildError,
)

__all__ = [
    "ElectronRebuildError",
    "CapturedOutputError",
    "ProcessError",
    "InstallError",
    "RebuildError",
    "HeadersMissingError",
    "ProbeError",
    "ModuleVersionParseError",
    "PlatformMismatchError",
    "ManifestError",
    "PrebuiltNotFoundError",
    "ConfigurationError",
]
