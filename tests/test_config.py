"""Tests for src.config — settings validation."""

import pytest
from pydantic import ValidationError

from src.config import Settings, settings


def test_loaded_from_env():
    assert settings.HOUSEHOLD_ID == "household-test"
    assert settings.HOUSEHOLD_TIMEZONE == "America/New_York"
    assert settings.WEEK_START_DAY == 0
    assert settings.COMPETITOR_IDS == ["A", "B"]


def test_defaults():
    s = Settings()
    assert s.DEFAULT_PRIZE == "Sleep-in weekend"
    assert s.LOG_LEVEL == "INFO"
    assert s.COMPETITOR_IDS == ["competitor-a", "competitor-b"]


def test_week_start_parsed_from_string():
    assert Settings(WEEK_START_DAY="1").WEEK_START_DAY == 1


@pytest.mark.parametrize("bad", ["7", "-1"])
def test_week_start_out_of_range(bad):
    with pytest.raises(ValidationError):
        Settings(WEEK_START_DAY=bad)


def test_unknown_timezone_rejected():
    with pytest.raises(ValidationError):
        Settings(HOUSEHOLD_TIMEZONE="Atlantis/Capital")


def test_competitor_ids_parsed():
    assert Settings(COMPETITOR_IDS=" a , b ,").COMPETITOR_IDS == ["a", "b"]
    assert Settings(COMPETITOR_IDS="").COMPETITOR_IDS == []


def test_log_level_normalized():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
