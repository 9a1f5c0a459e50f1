"""Tests for logging setup."""

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from electron_rebuild.core.config.settings import LoggingSettings
from electron_rebuild.core.logger.logger import print_captured_output, setup_logging


@pytest.fixture
def restore_root_handlers():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_plain_handler_and_level(self, restore_root_handlers):
        """Test a plain stream handler at the configured level."""
        setup_logging(LoggingSettings(level="WARNING", use_rich=False))

        root = restore_root_handlers
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert type(root.handlers[0]) is logging.StreamHandler

    def test_log_file(self, restore_root_handlers, temp_dir: Path):
        """Test a log file handler is added and its directory created."""
        log_file = temp_dir / "logs" / "electron-rebuild.log"
        setup_logging(LoggingSettings(use_rich=False, file=str(log_file)))

        logging.getLogger("electron_rebuild.test").info("headers installed")
        for handler in restore_root_handlers.handlers:
            handler.flush()

        assert log_file.exists()
        assert "headers installed" in log_file.read_text(encoding="utf-8")


class TestPrintCapturedOutput:
    """Tests for print_captured_output."""

    @patch("electron_rebuild.core.logger.logger.get_console")
    def test_prints_both_streams(self, mock_get_console: MagicMock):
        """Test stdout then stderr are printed without markup."""
        console = mock_get_console.return_value

        print_captured_output("gyp info ok", "gyp ERR! [build] failed")

        printed = [c.args[0] for c in console.print.call_args_list]
        assert printed == ["gyp info ok", "gyp ERR! [build] failed"]
        assert all(c.kwargs["markup"] is False for c in console.print.call_args_list)

    @patch("electron_rebuild.core.logger.logger.get_console")
    def test_skips_empty_streams(self, mock_get_console: MagicMock):
        """Test nothing is printed for empty output."""
        print_captured_output("", "")
        mock_get_console.return_value.print.assert_not_called()
