"""Subprocess execution for the external Node toolchain.

All tools (node, node-gyp, npm, the Electron binary) are driven through
ProcessRunner so that environment handling and failure reporting are
uniform. Environments are always computed as new mappings; the process-wide
``os.environ`` is never modified.
"""

import asyncio
import os
import platform as _platform
import shutil
import sys
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from electron_rebuild.core.exceptions.errors import ProcessError
from electron_rebuild.core.logger.logger import get_logger

logger = get_logger(__name__)

# platform.machine() spelling -> Node's process.arch spelling
_NODE_ARCH_MAP = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
    "ppc64le": "ppc64",
    "ppc64": "ppc64",
    "s390x": "s390x",
}


@dataclass
class ProcessResult:
    """Result of a successful process execution.

    Attributes:
        command: The executable that was run.
        args: Arguments passed to the executable.
        stdout: Standard output from the process.
        stderr: Standard error from the process.
        return_code: Exit code of the process.
        duration_seconds: Time taken by the process.
    """

    command: str
    args: list[str] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    return_code: int = 0
    duration_seconds: float = 0.0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return self.stdout + self.stderr

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "command": self.command,
            "args": self.args,
            "return_code": self.return_code,
            "duration_seconds": self.duration_seconds,
        }


def host_arch() -> str:
    """Return the host architecture using Node's naming (x64, ia32, arm64...)."""
    machine = _platform.machine().lower()
    return _NODE_ARCH_MAP.get(machine, machine)


def merge_env(
    base: Mapping[str, str] | None = None,
    overrides: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build a new environment mapping from a base and overrides.

    Args:
        base: Base environment. Defaults to the current process environment.
        overrides: Variables to set on top of the base.

    Returns:
        A fresh dictionary; neither input is modified.
    """
    env = dict(os.environ if base is None else base)
    if overrides:
        env.update(overrides)
    return env


def headers_env(
    headers_dir: Path | str,
    platform: str | None = None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment that points node-gyp's cache at ``headers_dir``.

    node-gyp resolves its cache from HOME, and from USERPROFILE on Windows.

    Args:
        headers_dir: Directory used as the fake home directory.
        platform: Platform name in ``sys.platform`` form. Defaults to the host.
        base: Base environment. Defaults to the current process environment.

    Returns:
        Merged environment mapping.
    """
    platform = platform or sys.platform
    overrides = {"HOME": str(headers_dir)}
    if platform == "win32":
        overrides["USERPROFILE"] = str(headers_dir)
    return merge_env(base, overrides)


def resolve_tool(name: str) -> str:
    """Resolve a tool name through PATH, falling back to the bare name.

    Resolving through PATH picks up ``npm.cmd``-style shims on Windows,
    which ``create_subprocess_exec`` does not find on its own.
    """
    return shutil.which(name) or name


class ProcessRunner:
    """Runs external commands and captures their output."""

    def __init__(self, timeout: int | None = None) -> None:
        """Initialize the runner.

        Args:
            timeout: Maximum time for each command in seconds. None waits
                for the command indefinitely.
        """
        self.timeout = timeout

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        env: Mapping[str, str] | None = None,
        cwd: Path | str | None = None,
    ) -> ProcessResult:
        """Run a command to completion.

        Args:
            command: Executable to run.
            args: Arguments for the executable.
            env: Full environment for the child. None inherits the current one.
            cwd: Working directory.

        Returns:
            ProcessResult for a zero exit.

        Raises:
            ProcessError: If the command cannot be spawned, times out, or
                exits non-zero.
        """
        args = [str(a) for a in args]
        display = " ".join([command, *args])
        logger.debug(f"Running: {display}" + (f" (cwd={cwd})" if cwd else ""))

        start_time = time.time()
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env is not None else None,
            )
        except OSError as e:
            raise ProcessError(
                f"Failed to start {command}: {e}",
                command=display,
                exit_code=-1,
                stderr=str(e),
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ProcessError(
                f"Command timed out after {self.timeout} seconds: {display}",
                command=display,
                exit_code=-1,
                stderr=f"Command timed out after {self.timeout} seconds",
            ) from e

        duration = time.time() - start_time
        stdout_str = stdout.decode("utf-8", errors="replace")
        stderr_str = stderr.decode("utf-8", errors="replace")
        return_code = process.returncode if process.returncode is not None else -1

        if return_code != 0:
            raise ProcessError(
                f"Command failed with exit code {return_code}: {display}",
                command=display,
                exit_code=return_code,
                stdout=stdout_str,
                stderr=stderr_str,
            )

        logger.debug(f"Finished in {duration:.1f}s: {display}")
        return ProcessResult(
            command=command,
            args=args,
            stdout=stdout_str,
            stderr=stderr_str,
            return_code=return_code,
            duration_seconds=duration,
        )


def get_default_runner() -> ProcessRunner:
    """Create a runner configured from settings."""
    from electron_rebuild.core.config.settings import get_settings

    return ProcessRunner(timeout=get_settings().process.timeout)
