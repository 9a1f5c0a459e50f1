"""Hook for packaging pipelines that copy an app before bundling it.

The pipeline calls the hook with the copied app directory and the target
Electron version, platform and architecture, and waits for ``done`` to be
called with an error or with no arguments.
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from electron_rebuild.core.exceptions.errors import PlatformMismatchError
from electron_rebuild.core.logger.logger import get_logger
from electron_rebuild.models.rebuild import RebuildRequest
from electron_rebuild.rebuild.headers import HeaderInstaller
from electron_rebuild.rebuild.prebuilt import locate_electron_prebuilt, resolve_electron_executable
from electron_rebuild.rebuild.rebuilder import Rebuilder

logger = get_logger(__name__)

DoneCallback = Callable[..., None]
PostFix = Callable[[Path, bool, Path | None], Awaitable[None]]
PrebuiltLocator = Callable[[], Path | None]


class PackagerHook:
    """Rebuilds native modules inside a packaging pipeline's build copy."""

    def __init__(
        self,
        dist_url: str | None = None,
        ignore_dev_deps: bool = False,
        ignore_optional_deps: bool = False,
        pre_gyp_fix: bool = False,
        post_fix: PostFix | None = None,
        installer: HeaderInstaller | None = None,
        rebuilder: Rebuilder | None = None,
        locate_prebuilt: PrebuiltLocator = locate_electron_prebuilt,
        host_platform: str | None = None,
    ) -> None:
        """Initialize the hook.

        Args:
            dist_url: Header distribution URL.
            ignore_dev_deps: Leave devDependencies out of the rebuild.
            ignore_optional_deps: Leave optionalDependencies out of the rebuild.
            pre_gyp_fix: Whether the post-fix step should patch pre-gyp paths.
            post_fix: Step run on the rebuilt modules directory, called with
                the modules path, ``pre_gyp_fix`` and the Electron executable.
            installer: Header installer.
            rebuilder: Native module rebuilder.
            locate_prebuilt: Finds the Electron prebuilt package directory.
            host_platform: Platform of this machine in ``sys.platform`` form.
        """
        self.dist_url = dist_url
        self.ignore_dev_deps = ignore_dev_deps
        self.ignore_optional_deps = ignore_optional_deps
        self.pre_gyp_fix = pre_gyp_fix
        self.post_fix = post_fix
        self.installer = installer or HeaderInstaller()
        self.rebuilder = rebuilder or Rebuilder()
        self.locate_prebuilt = locate_prebuilt
        self.host_platform = host_platform or sys.platform
        self._tasks: set[asyncio.Task] = set()

    def _electron_executable(self) -> Path | None:
        prebuilt_dir = self.locate_prebuilt()
        executable = resolve_electron_executable(prebuilt_dir) if prebuilt_dir else None
        if executable is None:
            logger.error(
                "Couldn't find electron-prebuilt in the temporary packager directory, "
                "this probably means something is wrong"
            )
        return executable

    async def run(
        self,
        build_path: Path | str,
        electron_version: str,
        platform: str,
        arch: str,
    ) -> None:
        """Install headers, rebuild and post-fix the build copy's modules.

        Raises:
            PlatformMismatchError: If ``platform`` is not the host platform.
            ElectronRebuildError: From whichever step fails first.
        """
        if platform != self.host_platform:
            raise PlatformMismatchError(
                "You can't rebuild native modules for a platform that is not your current platform",
                host_platform=self.host_platform,
                target_platform=platform,
            )

        electron_path = self._electron_executable()
        modules_path = Path(build_path).resolve() / "node_modules"
        logger.info(f"Rebuilding native modules in: {build_path}")

        headers_dir = await self.installer.install(electron_version, dist_url=self.dist_url, arch=arch)
        await self.rebuilder.rebuild(
            RebuildRequest(
                version=electron_version,
                modules_path=modules_path,
                headers_dir=headers_dir,
                arch=arch,
                ignore_dev_deps=self.ignore_dev_deps,
                ignore_optional_deps=self.ignore_optional_deps,
            )
        )

        if self.post_fix is not None:
            await self.post_fix(modules_path, self.pre_gyp_fix, electron_path)

        logger.info("Rebuild completed successfully")

    async def _run_and_report(
        self,
        build_path: Path | str,
        electron_version: str,
        platform: str,
        arch: str,
        done: DoneCallback,
    ) -> None:
        try:
            await self.run(build_path, electron_version, platform, arch)
        except Exception as e:
            done(e)
            return
        done()

    def __call__(
        self,
        build_path: Path | str,
        electron_version: str,
        platform: str,
        arch: str,
        done: DoneCallback,
    ) -> None:
        """Packaging pipeline entry point.

        Without a running event loop the rebuild runs to completion before
        returning. Inside a running loop it is scheduled as a task and
        reports through ``done`` when finished.
        """
        coro = self._run_and_report(build_path, electron_version, platform, arch, done)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_finished)

    def _task_finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Packager hook callback raised: {error}", exc_info=error)


def create_packager_copy_hook(
    dist_url: str | None = None,
    ignore_dev_deps: bool = False,
    ignore_optional_deps: bool = False,
    pre_gyp_fix: bool = False,
    post_fix: PostFix | None = None,
) -> PackagerHook:
    """Create a post-copy hook for a packaging pipeline.

    Args:
        dist_url: Header distribution URL.
        ignore_dev_deps: Leave devDependencies out of the rebuild.
        ignore_optional_deps: Leave optionalDependencies out of the rebuild.
        pre_gyp_fix: Whether the post-fix step should patch pre-gyp paths.
        post_fix: Step run on the rebuilt modules directory.

    Returns:
        Callable taking ``(build_path, electron_version, platform, arch, done)``.
    """
    return PackagerHook(
        dist_url=dist_url,
        ignore_dev_deps=ignore_dev_deps,
        ignore_optional_deps=ignore_optional_deps,
        pre_gyp_fix=pre_gyp_fix,
        post_fix=post_fix,
    )
