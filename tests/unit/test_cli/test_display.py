"""Tests for CLI display module."""

from unittest.mock import MagicMock, patch

from rich.console import Console

from electron_rebuild.cli.display import (
    create_progress,
    show_banner,
    show_decision,
    show_error,
    show_info,
    show_success,
)
from electron_rebuild.rebuild.abi import CanaryLoadResult, RebuildDecisionResult


def render(func, *args) -> str:
    """Run a display function against a recording console."""
    console = Console(record=True, width=100)
    with patch("electron_rebuild.cli.display.console", console):
        func(*args)
    return console.export_text()


class TestDisplayFunctions:
    """Test display functions."""

    def test_show_banner(self) -> None:
        """Test banner display."""
        assert "electron-rebuild" in render(show_banner)

    def test_show_success(self) -> None:
        """Test success message display."""
        output = render(show_success, "Headers Ready", "Headers are in /tmp/headers")
        assert "Headers Ready" in output
        assert "/tmp/headers" in output

    def test_show_error_escapes_markup(self) -> None:
        """Test tool output with brackets is shown literally."""
        output = render(show_error, "Rebuild Failed", "gyp ERR! [build] failed")
        assert "[build]" in output

    def test_show_info(self) -> None:
        """Test info message display."""
        assert "Nothing To Do" in render(show_info, "Nothing To Do", "Up to date")

    def test_create_progress(self) -> None:
        """Test progress spinner creation."""
        with patch("electron_rebuild.cli.display.console", MagicMock()):
            progress = create_progress()
        assert progress is not None


class TestShowDecision:
    """Test the rebuild decision table."""

    def test_rebuild_needed(self) -> None:
        """Test a differing ABI is shown as needing a rebuild."""
        result = RebuildDecisionResult(
            rebuild_needed=True,
            canary=CanaryLoadResult.LOADED,
            electron_abi="89",
            host_abi="83",
            reason="Electron module version 89 differs from Node's 83",
        )

        output = render(show_decision, result)

        assert "REBUILD NEEDED" in output
        assert "89" in output
        assert "83" in output

    def test_up_to_date(self) -> None:
        """Test a matching ABI is shown as up to date."""
        result = RebuildDecisionResult(
            rebuild_needed=False,
            canary=CanaryLoadResult.LOADED,
            electron_abi="89",
            host_abi="89",
        )

        output = render(show_decision, result)

        assert "UP TO DATE" in output
        assert "N/A" not in output

    def test_canary_failure_without_abis(self) -> None:
        """Test missing ABIs are shown as N/A."""
        result = RebuildDecisionResult(rebuild_needed=True, canary=CanaryLoadResult.FAILED)
        assert "N/A" in render(show_decision, result)
