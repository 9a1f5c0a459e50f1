"""Native module rebuild against Electron headers.

Runs ``npm rebuild`` (or another npm command) inside a node_modules
directory with Electron as the build target, using the headers cached by
HeaderInstaller.
"""

from pathlib import Path

from electron_rebuild.core.config.settings import Settings, get_settings
from electron_rebuild.core.exceptions.errors import HeadersMissingError, ProcessError, RebuildError
from electron_rebuild.core.logger.logger import get_logger, print_captured_output
from electron_rebuild.core.process.runner import (
    ProcessResult,
    ProcessRunner,
    get_default_runner,
    headers_env,
    host_arch,
    resolve_tool,
)
from electron_rebuild.models.rebuild import RebuildRequest
from electron_rebuild.rebuild.headers import check_for_installed_headers, get_headers_root_dir
from electron_rebuild.rebuild.manifest import dependency_names, load_manifest

logger = get_logger(__name__)


class Rebuilder:
    """Rebuilds native modules for a target Electron version."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the rebuilder.

        Args:
            runner: Process runner. Defaults to one configured from settings.
            settings: Application settings. Defaults to global settings.
        """
        self.settings = settings or get_settings()
        self.runner = runner or get_default_runner()

    def resolve_modules(self, request: RebuildRequest) -> list[str]:
        """Module names to pass to npm, without duplicates.

        Explicit names come first. When a dependency filter is set, the
        selected manifest sections are appended to them.
        """
        modules = list(request.module_set)

        if request.filters_dependencies:
            manifest = load_manifest(request.manifest_path)
            modules.extend(dependency_names(manifest, request.selected_dependency_classes()))

        return list(dict.fromkeys(modules))

    def build_rebuild_args(self, request: RebuildRequest) -> list[str]:
        """Arguments for the npm invocation."""
        return [
            request.command,
            *self.resolve_modules(request),
            "--runtime=electron",
            f"--target={request.version}",
            f"--arch={request.arch or host_arch()}",
            "--update-binary",
        ]

    async def rebuild(self, request: RebuildRequest) -> ProcessResult:
        """Rebuild native modules as described by ``request``.

        Args:
            request: Rebuild parameters.

        Returns:
            ProcessResult of the npm run.

        Raises:
            HeadersMissingError: If headers for the version are not installed.
            ManifestError: If a dependency filter is set and package.json
                cannot be read.
            RebuildError: If npm fails.
        """
        headers_dir = request.headers_dir or get_headers_root_dir(request.version, self.settings)
        if not check_for_installed_headers(request.version, headers_dir):
            raise HeadersMissingError(
                f"Headers for Electron {request.version} are not installed; install them first",
                version=request.version,
                headers_dir=str(headers_dir),
            )

        args = self.build_rebuild_args(request)
        logger.info(f"Rebuilding native modules in {request.modules_path} for Electron {request.version}")

        try:
            result = await self.runner.run(
                resolve_tool(self.settings.rebuild.npm),
                args,
                env=headers_env(headers_dir),
                cwd=request.modules_path,
            )
        except ProcessError as e:
            print_captured_output(e.stdout, e.stderr)
            raise RebuildError(
                f"Failed to rebuild native modules for Electron {request.version}",
                modules_path=str(request.modules_path),
                stdout=e.stdout,
                stderr=e.stderr,
                details={"exit_code": e.exit_code, "command": request.command},
            ) from e

        logger.debug(f"Rebuild finished in {result.duration_seconds:.1f}s")
        return result


async def rebuild_native_modules(
    version: str,
    modules_path: Path,
    which_module: str | None = None,
    headers_dir: Path | None = None,
    arch: str | None = None,
    command: str = "rebuild",
    ignore_dev_deps: bool = False,
    ignore_optional_deps: bool = False,
    runner: ProcessRunner | None = None,
) -> ProcessResult:
    """Convenience function to rebuild native modules.

    Args:
        version: Electron version.
        modules_path: node_modules directory.
        which_module: Comma-separated module names.
        headers_dir: Headers directory.
        arch: Target architecture.
        command: npm command to run.
        ignore_dev_deps: Leave devDependencies out of the module list.
        ignore_optional_deps: Leave optionalDependencies out of the module list.
        runner: Process runner to use.

    Returns:
        ProcessResult of the npm run.
    """
    request = RebuildRequest(
        version=version,
        modules_path=Path(modules_path),
        which_module=which_module,
        headers_dir=headers_dir,
        arch=arch,
        command=command,
        ignore_dev_deps=ignore_dev_deps,
        ignore_optional_deps=ignore_optional_deps,
    )
    return await Rebuilder(runner=runner).rebuild(request)
