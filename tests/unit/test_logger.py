"""
Unit tests for subsystem logging.
"""

import logging

import pytest

from proxybid.utils.logger import (
    SUBSYSTEMS,
    get_logger,
    parse_subsystem_levels,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    setup_logging(level=logging.WARNING)


class TestSubsystemLevels:
    """Tests for per-subsystem level overrides."""

    def test_parse(self):
        assert parse_subsystem_levels("assets=DEBUG, auction=warning") == {
            "assets": logging.DEBUG,
            "auction": logging.WARNING,
        }

    def test_parse_empty(self):
        assert parse_subsystem_levels("") == {}

    @pytest.mark.parametrize("text", ["mempool=DEBUG", "assets", "assets=LOUD", "assets="])
    def test_parse_rejects(self, text):
        with pytest.raises(ValueError):
            parse_subsystem_levels(text)

    def test_override_reaches_child_loggers(self):
        setup_logging(level=logging.WARNING, subsystem_levels={"assets": logging.DEBUG})

        assert get_logger("assets.token").isEnabledFor(logging.DEBUG)
        assert not get_logger("auction").isEnabledFor(logging.INFO)
        assert logging.getLogger("proxybid").handlers[0].level == logging.DEBUG

    def test_reset_clears_overrides(self):
        setup_logging(level=logging.INFO, subsystem_levels={"cli": logging.ERROR})
        setup_logging(level=logging.INFO)
        assert get_logger("cli").isEnabledFor(logging.INFO)


class TestGetLogger:
    """Tests for logger lookup."""

    def test_known_subsystems(self):
        for subsystem in SUBSYSTEMS:
            assert get_logger(subsystem).name == f"proxybid.{subsystem}"

    def test_unknown_subsystem(self):
        with pytest.raises(ValueError):
            get_logger("consensus")
