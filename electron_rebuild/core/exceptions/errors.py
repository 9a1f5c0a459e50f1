"""Custom exception definitions for electron-rebuild."""

from typing import Any


class ElectronRebuildError(Exception):
    """Base exception for all electron-rebuild errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class CapturedOutputError(ElectronRebuildError):
    """Error that carries the captured output of an external tool."""

    def __init__(
        self,
        message: str,
        stdout: str = "",
        stderr: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Error message.
            stdout: Captured standard output.
            stderr: Captured standard error.
            details: Additional error details.
        """
        super().__init__(message, details)
        self.stdout = stdout
        self.stderr = stderr


class ProcessError(CapturedOutputError):
    """Exception raised when a subprocess exits non-zero or cannot be spawned."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int = -1,
        stdout: str = "",
        stderr: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize process error.

        Args:
            message: Error message.
            command: The command that was executed.
            exit_code: Exit code of the process (-1 if it never ran).
            stdout: Captured standard output.
            stderr: Captured standard error.
            details: Additional error details.
        """
        details = details or {}
        if command:
            details["command"] = command
        details["exit_code"] = exit_code
        super().__init__(message, stdout=stdout, stderr=stderr, details=details)
        self.command = command
        self.exit_code = exit_code


class InstallError(CapturedOutputError):
    """Exception raised when fetching the runtime headers fails."""

    def __init__(
        self,
        message: str,
        version: str | None = None,
        stdout: str = "",
        stderr: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if version:
            details["version"] = version
        super().__init__(message, stdout=stdout, stderr=stderr, details=details)


class RebuildError(CapturedOutputError):
    """Exception raised when the native module rebuild command fails."""

    def __init__(
        self,
        message: str,
        modules_path: str | None = None,
        stdout: str = "",
        stderr: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if modules_path:
            details["modules_path"] = modules_path
        super().__init__(message, stdout=stdout, stderr=stderr, details=details)


class HeadersMissingError(ElectronRebuildError):
    """Exception raised when a rebuild is attempted before headers are installed."""

    def __init__(
        self,
        message: str,
        version: str | None = None,
        headers_dir: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize headers missing error.

        Args:
            message: Error message.
            version: Runtime version whose headers are missing.
            headers_dir: Headers directory that was checked.
            details: Additional error details.
        """
        details = details or {}
        if version:
            details["version"] = version
        if headers_dir:
            details["headers_dir"] = headers_dir
        super().__init__(message, details)


class ProbeError(CapturedOutputError):
    """Exception raised when an ABI probe cannot be completed."""

    def __init__(
        self,
        message: str,
        executable: str | None = None,
        stdout: str = "",
        stderr: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if executable:
            details["executable"] = executable
        super().__init__(message, stdout=stdout, stderr=stderr, details=details)


class ModuleVersionParseError(ProbeError):
    """Exception raised when a runtime reports a non-numeric module version."""

    def __init__(
        self,
        message: str,
        raw_output: str = "",
        executable: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["raw_output"] = raw_output
        super().__init__(message, executable=executable, details=details)
        self.raw_output = raw_output


class PlatformMismatchError(ElectronRebuildError):
    """Exception raised when rebuilding for a platform other than the host."""

    def __init__(
        self,
        message: str,
        host_platform: str | None = None,
        target_platform: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if host_platform:
            details["host_platform"] = host_platform
        if target_platform:
            details["target_platform"] = target_platform
        super().__init__(message, details)


class ManifestError(ElectronRebuildError):
    """Exception raised when a package manifest cannot be read."""

    def __init__(
        self,
        message: str,
        manifest_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if manifest_path:
            details["manifest_path"] = manifest_path
        super().__init__(message, details)


class PrebuiltNotFoundError(ElectronRebuildError):
    """Exception raised when no Electron prebuilt can be located."""

    def __init__(
        self,
        message: str,
        search_root: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if search_root:
            details["search_root"] = search_root
        super().__init__(message, details)


class ConfigurationError(ElectronRebuildError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)
