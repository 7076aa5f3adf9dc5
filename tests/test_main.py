"""
Tests for application setup.
"""
import logging

from filekeeper import main


class TestLoggingSetup:
    """Tests for third-party logger levels."""

    def test_only_installed_libraries_are_quieted(self):
        assert main.noisy_loggers == ["passlib"]

    def test_passlib_logs_warnings_only(self):
        assert logging.getLogger("passlib").level == logging.WARNING
