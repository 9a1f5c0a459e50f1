"""Electron header installation.

node-gyp keeps downloaded headers under ``<home>/.node-gyp/<version>``.
Pointing HOME at a dedicated headers directory keeps Electron's headers
apart from the ones node-gyp uses for the host Node.
"""

from pathlib import Path

from electron_rebuild.core.config.settings import Settings, get_settings
from electron_rebuild.core.exceptions.errors import InstallError, ProcessError
from electron_rebuild.core.logger.logger import get_logger, print_captured_output
from electron_rebuild.core.process.runner import (
    ProcessRunner,
    get_default_runner,
    headers_env,
    host_arch,
    resolve_tool,
)

logger = get_logger(__name__)

CANARY_FILE = "common.gypi"


def get_headers_root_dir(version: str, settings: Settings | None = None) -> Path:
    """Return the headers directory used for ``version``.

    The root is shared across versions; node-gyp separates them below it.
    """
    settings = settings or get_settings()
    return settings.headers_dir


def header_canary_paths(version: str, headers_dir: Path) -> list[Path]:
    """Canary file locations for the plain and io.js spellings of ``version``."""
    gyp_dir = Path(headers_dir) / ".node-gyp"
    return [
        gyp_dir / version / CANARY_FILE,
        gyp_dir / f"iojs-{version}" / CANARY_FILE,
    ]


def check_for_installed_headers(version: str, headers_dir: Path) -> bool:
    """Check whether headers for ``version`` are present in ``headers_dir``.

    Only the existence of the canary file is checked; a partial download
    would be reported as installed.
    """
    return any(path.exists() for path in header_canary_paths(version, headers_dir))


class HeaderInstaller:
    """Fetches Electron headers with node-gyp when they are not cached."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the installer.

        Args:
            runner: Process runner. Defaults to one configured from settings.
            settings: Application settings. Defaults to global settings.
        """
        self.settings = settings or get_settings()
        self.runner = runner or get_default_runner()

    def build_install_args(self, version: str, arch: str, dist_url: str) -> list[str]:
        """Arguments for ``node-gyp install``."""
        return [
            "install",
            f"--target={version}",
            f"--arch={arch}",
            f"--dist-url={dist_url}",
        ]

    async def install(
        self,
        version: str,
        dist_url: str | None = None,
        headers_dir: Path | None = None,
        arch: str | None = None,
    ) -> Path:
        """Make sure headers for ``version`` are installed.

        Args:
            version: Electron version.
            dist_url: Header distribution URL. Defaults to the configured one.
            headers_dir: Headers directory. Defaults to the configured one.
            arch: Target architecture. Defaults to the host architecture.

        Returns:
            The headers directory that holds the headers.

        Raises:
            InstallError: If node-gyp fails.
        """
        headers_dir = Path(headers_dir) if headers_dir else get_headers_root_dir(version, self.settings)

        if check_for_installed_headers(version, headers_dir):
            logger.debug(f"Headers for {version} already present in {headers_dir}")
            return headers_dir

        arch = arch or host_arch()
        dist_url = dist_url or self.settings.rebuild.dist_url
        args = self.build_install_args(version, arch, dist_url)

        logger.info(f"Installing headers for Electron {version} ({arch}) into {headers_dir}")
        try:
            await self.runner.run(
                resolve_tool(self.settings.rebuild.node_gyp),
                args,
                env=headers_env(headers_dir),
            )
        except ProcessError as e:
            print_captured_output(e.stdout, e.stderr)
            raise InstallError(
                f"Failed to install headers for Electron {version}",
                version=version,
                stdout=e.stdout,
                stderr=e.stderr,
                details={"exit_code": e.exit_code, "headers_dir": str(headers_dir)},
            ) from e

        return headers_dir


async def install_node_headers(
    version: str,
    dist_url: str | None = None,
    headers_dir: Path | None = None,
    arch: str | None = None,
    runner: ProcessRunner | None = None,
) -> Path:
    """Convenience function to install headers for ``version``.

    Args:
        version: Electron version.
        dist_url: Header distribution URL.
        headers_dir: Headers directory.
        arch: Target architecture.
        runner: Process runner to use.

    Returns:
        The headers directory that holds the headers.
    """
    installer = HeaderInstaller(runner=runner)
    return await installer.install(version, dist_url=dist_url, headers_dir=headers_dir, arch=arch)
