"""
Tests for logging configuration.
"""
import json
import logging

import pytest
import structlog

from filltrip.logging import configure_logging, get_logger


class TestConfigureLogging:
    """Test structlog setup."""

    def teardown_method(self):
        """Restore structlog defaults."""
        structlog.reset_defaults()

    def test_invalid_level(self):
        """Test that unknown level names are rejected."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging("LOUD")

    def test_level_applied_to_root_logger(self):
        """Test that the stdlib root logger gets the level."""
        configure_logging("warning")

        assert logging.getLogger().level == logging.WARNING

    def test_json_output(self, capsys):
        """Test JSON lines carry structured context."""
        configure_logging("INFO", format_json=True, include_timestamp=False)

        get_logger("filltrip.test").info("Trip recorded", trip_id=7)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "Trip recorded"
        assert entry["trip_id"] == 7
        assert entry["level"] == "info"
        assert entry["logger"] == "filltrip.test"

    def test_filtered_below_level(self, capsys):
        """Test messages below the configured level are dropped."""
        configure_logging("WARNING", format_json=True)

        get_logger("filltrip.test").info("quiet")

        assert "quiet" not in capsys.readouterr().err
