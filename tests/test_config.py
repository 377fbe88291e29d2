from __future__ import annotations

import os
from pathlib import Path

import pytest

from agency_calendar.config import (
    DEFAULT_CONFIG,
    MONDAY,
    SUNDAY,
    ConfigError,
    LayoutConfig,
    load_env_file,
    load_layout_config,
)


def test_load_env_file_sets_missing_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("CALENDAR_START_HOUR=7\n# comment\nCALENDAR_END_HOUR = 20\n", encoding="utf-8")

    monkeypatch.delenv("CALENDAR_START_HOUR", raising=False)
    monkeypatch.setenv("CALENDAR_END_HOUR", "keep")

    load_env_file(env_file)

    assert os.environ["CALENDAR_START_HOUR"] == "7"
    assert os.environ["CALENDAR_END_HOUR"] == "keep"


def test_load_env_file_is_noop_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    missing = tmp_path / "missing.env"
    monkeypatch.delenv("CALENDAR_TIMEZONE", raising=False)

    load_env_file(missing)

    assert "CALENDAR_TIMEZONE" not in os.environ


def test_invalid_line_raises(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("INVALID", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid line"):
        load_env_file(env_file)


def test_defaults_match_reference_window() -> None:
    assert DEFAULT_CONFIG.start_hour == 6
    assert DEFAULT_CONFIG.end_hour == 21
    assert DEFAULT_CONFIG.max_visible_tracks == 3
    assert DEFAULT_CONFIG.week_start == SUNDAY
    assert DEFAULT_CONFIG.day_walk_cap == 730
    assert DEFAULT_CONFIG.window_start_minutes == 360
    assert DEFAULT_CONFIG.window_end_minutes == 1320
    assert DEFAULT_CONFIG.window_minutes == 960
    assert DEFAULT_CONFIG.tzinfo is None


def test_load_layout_config_reads_environment() -> None:
    config = load_layout_config(
        {
            "CALENDAR_START_HOUR": "8",
            "CALENDAR_END_HOUR": "18",
            "CALENDAR_MAX_VISIBLE_TRACKS": "4",
            "CALENDAR_WEEK_START": "Monday",
            "CALENDAR_DAY_WALK_CAP": "365",
            "CALENDAR_MIN_EVENT_HEIGHT": "15",
            "CALENDAR_TIMEZONE": "Europe/Berlin",
        }
    )

    assert config == LayoutConfig(
        start_hour=8,
        end_hour=18,
        max_visible_tracks=4,
        week_start=MONDAY,
        day_walk_cap=365,
        min_event_height=15,
        timezone="Europe/Berlin",
    )
    assert config.tzinfo is not None
    assert config.tzinfo.key == "Europe/Berlin"


def test_load_layout_config_ignores_blank_values() -> None:
    assert load_layout_config({"CALENDAR_START_HOUR": " ", "CALENDAR_TIMEZONE": ""}) == DEFAULT_CONFIG


def test_numeric_week_start_is_accepted() -> None:
    assert load_layout_config({"CALENDAR_WEEK_START": "0"}).week_start == MONDAY


@pytest.mark.parametrize(
    "environ, message",
    [
        ({"CALENDAR_START_HOUR": "six"}, "must be an integer"),
        ({"CALENDAR_WEEK_START": "someday"}, "weekday name or number"),
        ({"CALENDAR_START_HOUR": "22", "CALENDAR_END_HOUR": "8"}, "must not be before"),
        ({"CALENDAR_TIMEZONE": "Mars/Olympus_Mons"}, "Unknown timezone"),
        ({"CALENDAR_MAX_VISIBLE_TRACKS": "0"}, "max_visible_tracks"),
    ],
)
def test_malformed_settings_raise(environ: dict[str, str], message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        load_layout_config(environ)
