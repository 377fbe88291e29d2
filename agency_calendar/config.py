"""Layout tunables and helpers for loading them from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG",
    "LayoutConfig",
    "MONDAY",
    "SUNDAY",
    "load_env_file",
    "load_layout_config",
]

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)

_WEEKDAY_NAMES = {
    "monday": MONDAY,
    "tuesday": TUESDAY,
    "wednesday": WEDNESDAY,
    "thursday": THURSDAY,
    "friday": FRIDAY,
    "saturday": SATURDAY,
    "sunday": SUNDAY,
}


class ConfigError(RuntimeError):
    """Raised when configuration values are malformed."""


@dataclass(frozen=True)
class LayoutConfig:
    """Tunables shared by every layout stage.

    ``week_start`` uses Python weekday numbering (Monday is 0, Sunday is 6).
    ``timezone`` is an IANA name; ``None`` means the system local zone.
    """

    start_hour: int = 6
    end_hour: int = 21
    max_visible_tracks: int = 3
    week_start: int = SUNDAY
    day_walk_cap: int = 730
    min_event_height: int = 20
    initial_track_capacity: int = 10
    timezone: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour <= 23 or not 0 <= self.end_hour <= 23:
            raise ConfigError("start_hour and end_hour must be within 0..23")
        if self.end_hour < self.start_hour:
            raise ConfigError(
                f"end_hour ({self.end_hour}) must not be before start_hour ({self.start_hour})"
            )
        if self.max_visible_tracks < 1:
            raise ConfigError("max_visible_tracks must be at least 1")
        if self.week_start not in range(7):
            raise ConfigError(f"week_start must be a weekday number 0..6, got {self.week_start!r}")
        if self.day_walk_cap < 1:
            raise ConfigError("day_walk_cap must be at least 1")
        if self.min_event_height < 0:
            raise ConfigError("min_event_height must not be negative")
        if self.initial_track_capacity < 1:
            raise ConfigError("initial_track_capacity must be at least 1")
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ConfigError(f"Unknown timezone: {self.timezone!r}") from exc

    @property
    def tzinfo(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None

    @property
    def window_start_minutes(self) -> int:
        return self.start_hour * 60

    @property
    def window_end_minutes(self) -> int:
        # The last visible hour is drawn in full.
        return (self.end_hour + 1) * 60

    @property
    def window_minutes(self) -> int:
        return self.window_end_minutes - self.window_start_minutes


DEFAULT_CONFIG: Final[LayoutConfig] = LayoutConfig()


def load_env_file(env_file: str | Path | None = None) -> None:
    """Load environment variables from ``env_file`` if provided.

    When ``env_file`` is :data:`None`, the loader looks for a ``.env`` file in the
    current working directory. Existing environment variables are never overwritten.
    """

    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if not path.exists() or not path.is_file():
        return

    for key, value in _iter_env_entries(path):
        os.environ.setdefault(key, value)


def load_layout_config(environ: Mapping[str, str] | None = None) -> LayoutConfig:
    """Build a :class:`LayoutConfig` from ``CALENDAR_*`` environment variables.

    Unset variables keep their defaults.
    """

    env = os.environ if environ is None else environ
    overrides: dict[str, object] = {}

    for field_name, env_name in (
        ("start_hour", "CALENDAR_START_HOUR"),
        ("end_hour", "CALENDAR_END_HOUR"),
        ("max_visible_tracks", "CALENDAR_MAX_VISIBLE_TRACKS"),
        ("day_walk_cap", "CALENDAR_DAY_WALK_CAP"),
        ("min_event_height", "CALENDAR_MIN_EVENT_HEIGHT"),
    ):
        raw = env.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            overrides[field_name] = int(raw)
        except ValueError as exc:
            raise ConfigError(f"{env_name} must be an integer, got {raw!r}") from exc

    week_start = env.get("CALENDAR_WEEK_START")
    if week_start and week_start.strip():
        overrides["week_start"] = _parse_weekday(week_start)

    timezone = env.get("CALENDAR_TIMEZONE")
    if timezone and timezone.strip():
        overrides["timezone"] = timezone.strip()

    return LayoutConfig(**overrides)  # type: ignore[arg-type]


def _parse_weekday(raw: str) -> int:
    value = raw.strip().lower()
    if value in _WEEKDAY_NAMES:
        return _WEEKDAY_NAMES[value]
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"CALENDAR_WEEK_START must be a weekday name or number, got {raw!r}") from exc


def _iter_env_entries(path: Path) -> Iterable[tuple[str, str]]:
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise ConfigError(
                f"Invalid line in {path.name!r}: {raw_line!r}. Expected KEY=VALUE format."
            )
        key, raw_value = line.split("=", 1)
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if not key:
            raise ConfigError(f"Environment variable key is missing in line: {raw_line!r}")
        yield key, value
