"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Generator

import pytest

from electron_rebuild.core.config.settings import (
    LoggingSettings,
    ProcessSettings,
    RebuildSettings,
    Settings,
)
from electron_rebuild.core.process.runner import ProcessResult, ProcessRunner


class RecordingRunner(ProcessRunner):
    """ProcessRunner double that records calls instead of spawning processes.

    Each queued response is either a ``(stdout, stderr)`` tuple or an
    exception to raise. Once the queue is empty, calls succeed with no output.
    """

    def __init__(self, responses: Sequence[Any] | None = None) -> None:
        super().__init__()
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        env: Mapping[str, str] | None = None,
        cwd: Path | str | None = None,
    ) -> ProcessResult:
        self.calls.append(
            {
                "command": command,
                "args": list(args),
                "env": dict(env) if env is not None else None,
                "cwd": cwd,
            }
        )
        response = self.responses.pop(0) if self.responses else ("", "")
        if isinstance(response, BaseException):
            raise response
        stdout, stderr = response
        return ProcessResult(command=command, args=list(args), stdout=stdout, stderr=stderr)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test.

    Yields:
        Path to the temporary directory.
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def headers_dir(temp_dir: Path) -> Path:
    """Empty headers directory."""
    path = temp_dir / "headers"
    path.mkdir()
    return path


@pytest.fixture
def settings(headers_dir: Path) -> Settings:
    """Settings pointing at the temporary headers directory.

    Args:
        headers_dir: Headers directory fixture.

    Returns:
        Settings instance.
    """
    return Settings(
        rebuild=RebuildSettings(
            headers_dir=headers_dir,
            node="node",
            node_gyp="node-gyp",
            npm="npm",
            canary_module="nslog",
            host_abi=None,
        ),
        process=ProcessSettings(timeout=None),
        logging=LoggingSettings(use_rich=False),
    )


@pytest.fixture
def runner() -> RecordingRunner:
    """Recording runner whose calls all succeed."""
    return RecordingRunner()


@pytest.fixture
def make_runner():
    """Factory for recording runners with queued responses."""
    return RecordingRunner


def install_fake_headers(headers_dir: Path, version: str, io_variant: bool = False) -> Path:
    """Create the canary file node-gyp leaves behind after installing headers."""
    name = f"iojs-{version}" if io_variant else version
    version_dir = headers_dir / ".node-gyp" / name
    version_dir.mkdir(parents=True, exist_ok=True)
    canary = version_dir / "common.gypi"
    canary.write_text("{}\n")
    return canary


@pytest.fixture
def installed_headers():
    """Helper that marks headers for a version as installed."""
    return install_fake_headers


@pytest.fixture
def app_dir(temp_dir: Path) -> Path:
    """Electron app with a package.json and an empty node_modules."""
    path = temp_dir / "app"
    (path / "node_modules").mkdir(parents=True)
    (path / "package.json").write_text(
        '{\n'
        '  "name": "app",\n'
        '  "dependencies": {"serialport": "^9.0.0", "leveldown": "^5.0.0"},\n'
        '  "devDependencies": {"spellchecker": "^3.0.0"},\n'
        '  "optionalDependencies": {"fsevents": "^2.0.0"}\n'
        '}\n'
    )
    return path
