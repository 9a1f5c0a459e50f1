"""Native module ABI probing and the rebuild decision.

Electron reports its module ABI through ``process.versions.modules`` when
run as plain Node. A rebuild is needed whenever that number differs from
the ABI the installed native modules were compiled for.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from electron_rebuild.core.config.settings import Settings, get_settings
from electron_rebuild.core.exceptions.errors import (
    ModuleVersionParseError,
    ProbeError,
    ProcessError,
)
from electron_rebuild.core.logger.logger import get_logger
from electron_rebuild.core.process.runner import ProcessRunner, get_default_runner, merge_env, resolve_tool

logger = get_logger(__name__)

# All three are needed for every Electron generation to start as plain Node.
RUN_AS_NODE_ENV = {
    "ATOM_SHELL_INTERNAL_RUN_AS_NODE": "1",
    "ELECTRON_RUN_AS_NODE": "1",
    "ELECTRON_NO_ATTACH_CONSOLE": "1",
}

MODULE_VERSION_SCRIPT = "console.log(process.versions.modules)"

_ABI_PATTERN = re.compile(r"^[0-9]+$")


def parse_module_version(raw_output: str, executable: str | None = None) -> str:
    """Extract the module ABI from a runtime's printed output.

    Args:
        raw_output: Combined stdout and stderr of the probe.
        executable: Probed executable, for error details.

    Returns:
        The ABI version as a string of digits.

    Raises:
        ModuleVersionParseError: If the output is anything but digits.
    """
    version = raw_output.replace("\r", "").replace("\n", "")
    if not _ABI_PATTERN.match(version):
        raise ModuleVersionParseError(
            f"Failed to check Electron's module version number: {version}",
            raw_output=raw_output,
            executable=executable,
        )
    return version


class ABIProbe:
    """Queries the module ABI a runtime executable was built with."""

    def __init__(self, runner: ProcessRunner | None = None) -> None:
        self.runner = runner or get_default_runner()

    async def query(self, executable: Path | str, run_as_node: bool = True) -> str:
        """Ask ``executable`` for its ``process.versions.modules``.

        Args:
            executable: Electron (or Node) executable.
            run_as_node: Set the markers that start Electron as plain Node.

        Returns:
            The ABI version as a string of digits.

        Raises:
            ProbeError: If the executable cannot be run.
            ModuleVersionParseError: If it reports something other than digits.
        """
        executable = str(executable)
        env = merge_env(None, RUN_AS_NODE_ENV if run_as_node else None)

        try:
            result = await self.runner.run(executable, ["-e", MODULE_VERSION_SCRIPT], env=env)
        except ProcessError as e:
            raise ProbeError(
                f"Failed to run {executable} to query its module version",
                executable=executable,
                stdout=e.stdout,
                stderr=e.stderr,
                details={"exit_code": e.exit_code},
            ) from e

        return parse_module_version(result.stdout + result.stderr, executable=executable)


async def get_electron_module_version(
    electron_executable: Path | str,
    runner: ProcessRunner | None = None,
) -> str:
    """Convenience function returning the module ABI of an Electron executable."""
    return await ABIProbe(runner=runner).query(electron_executable)


class CanaryLoadResult(str, Enum):
    """Outcome of loading the canary native module in the host Node."""

    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class RebuildDecisionResult:
    """Outcome of a rebuild decision.

    Attributes:
        rebuild_needed: Whether native modules must be rebuilt.
        canary: Outcome of the canary module load.
        electron_abi: Electron's module ABI, if it was determined.
        host_abi: Host Node's module ABI, if it was determined.
        reason: Human-readable explanation.
    """

    rebuild_needed: bool
    canary: CanaryLoadResult
    electron_abi: str | None = None
    host_abi: str | None = None
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "rebuild_needed": self.rebuild_needed,
            "canary": self.canary.value,
            "electron_abi": self.electron_abi,
            "host_abi": self.host_abi,
            "reason": self.reason,
        }


class RebuildDecision:
    """Decides whether native modules need rebuilding for Electron."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the decision.

        Args:
            runner: Process runner. Defaults to one configured from settings.
            settings: Application settings. Defaults to global settings.
        """
        self.settings = settings or get_settings()
        self.runner = runner or get_default_runner()
        self.probe = ABIProbe(runner=self.runner)

    async def load_canary(self, cwd: Path | None = None) -> tuple[CanaryLoadResult, str]:
        """Try to require the canary native module in the host Node.

        This can crash the Node process outright on some platforms, so any
        failure at all counts as FAILED.

        Returns:
            The load outcome and a short description of any failure.
        """
        canary = self.settings.rebuild.canary_module
        node = resolve_tool(self.settings.rebuild.node)
        try:
            await self.runner.run(node, ["-e", f'require("{canary}")'], cwd=cwd)
        except Exception as e:
            logger.debug(f"Canary module {canary} failed to load: {e}")
            return CanaryLoadResult.FAILED, str(e)
        return CanaryLoadResult.LOADED, ""

    async def host_abi(self) -> str:
        """Module ABI of the host Node, from settings or by asking node."""
        if self.settings.rebuild.host_abi:
            return self.settings.rebuild.host_abi
        node = resolve_tool(self.settings.rebuild.node)
        return await self.probe.query(node, run_as_node=False)

    async def evaluate(
        self,
        electron_executable: Path | str | None,
        explicit_abi: str | None = None,
        cwd: Path | None = None,
    ) -> RebuildDecisionResult:
        """Decide whether a rebuild is needed, with the reasoning.

        Args:
            electron_executable: Electron executable to probe.
            explicit_abi: Electron's ABI, skipping the probe when given.
            cwd: Directory the canary module is resolved from.

        Returns:
            RebuildDecisionResult.

        Raises:
            ProbeError: If an ABI cannot be determined after the canary loaded.
        """
        canary, failure = await self.load_canary(cwd=cwd)
        if canary is CanaryLoadResult.FAILED:
            return RebuildDecisionResult(
                rebuild_needed=True,
                canary=canary,
                reason=f"Canary module failed to load: {failure}",
            )

        if explicit_abi:
            electron_abi = str(explicit_abi)
        elif electron_executable is not None:
            electron_abi = await self.probe.query(electron_executable)
        else:
            raise ProbeError("An Electron executable or explicit module version is required")
        host_abi = await self.host_abi()

        if electron_abi == host_abi:
            return RebuildDecisionResult(
                rebuild_needed=False,
                canary=canary,
                electron_abi=electron_abi,
                host_abi=host_abi,
                reason=f"Electron and Node share module version {host_abi}",
            )

        return RebuildDecisionResult(
            rebuild_needed=True,
            canary=canary,
            electron_abi=electron_abi,
            host_abi=host_abi,
            reason=f"Electron module version {electron_abi} differs from Node's {host_abi}",
        )

    async def is_rebuild_needed(
        self,
        electron_executable: Path | str | None,
        explicit_abi: str | None = None,
    ) -> bool:
        """Return True when native modules must be rebuilt."""
        result = await self.evaluate(electron_executable, explicit_abi=explicit_abi)
        logger.info(result.reason)
        return result.rebuild_needed


async def should_rebuild_native_modules(
    electron_executable: Path | str | None,
    explicit_abi: str | None = None,
    runner: ProcessRunner | None = None,
) -> bool:
    """Convenience function for a one-off rebuild decision."""
    return await RebuildDecision(runner=runner).is_rebuild_needed(electron_executable, explicit_abi)
