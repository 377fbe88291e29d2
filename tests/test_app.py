from __future__ import annotations

import io
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from agency_calendar import app
from agency_calendar.config import ConfigError
from agency_calendar.events import EventType

NOW = datetime(2025, 11, 14, 12, 30)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("CALENDAR_"):
            monkeypatch.delenv(key)


def write_json(path: Path, payload: Any) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def busy_day_events() -> list[dict[str, Any]]:
    return [
        {
            "id": f"call-{n}",
            "title": f"Call {n}",
            "type": "manual",
            "startDate": f"2025-11-14T{9 + n:02d}:00:00",
            "endDate": f"2025-11-14T{10 + n:02d}:00:00",
        }
        for n in range(5)
    ]


def test_month_layout_is_written_as_json(tmp_path: Path) -> None:
    events_file = write_json(tmp_path / "events.json", busy_day_events())
    output = tmp_path / "out" / "layout.json"

    exit_code = app.main(
        [str(events_file), "--date", "2025-11-14", "--output", str(output)],
        now_provider=lambda: NOW,
    )

    assert exit_code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["view"] == "month"
    assert payload["month_date"] == "2025-11-01T00:00:00"
    assert len(payload["rows"]) == 6
    assert payload["overflow"] == {"2025-11-14": 2}


def test_layout_goes_to_stdout_without_output_flag(tmp_path: Path) -> None:
    events_file = write_json(tmp_path / "events.json", busy_day_events()[:1])
    stdout = io.StringIO()

    exit_code = app.main(
        [str(events_file), "--view", "week", "--date", "2025-11-14"],
        now_provider=lambda: NOW,
        stdout=stdout,
    )

    assert exit_code == 0
    payload = json.loads(stdout.getvalue())
    assert payload["view"] == "week"
    assert payload["styles"] == {"call-0": {"2025-11-14": {"top": 180, "height": 60, "hidden": False}}}
    assert payload["now_offsets"] == {"2025-11-14": 390}


def test_document_with_entities_is_aggregated_and_filtered(tmp_path: Path) -> None:
    document = {
        "events": [],
        "projects": [{"id": "p1", "brandId": "brand-a"}],
        "boards": [{"id": "b1", "projectId": "p1"}],
        "tasks": [{"id": "t1", "boardId": "b1", "title": "Ship", "dueDate": "2025-11-20"}],
        "clients": [{"id": "c1", "brandId": "brand-b"}],
        "invoices": [{"id": "i1", "clientId": "c1", "invoiceNumber": "42", "date": "2025-11-21"}],
    }
    events_file = write_json(tmp_path / "doc.json", document)
    stdout = io.StringIO()

    exit_code = app.main(
        [str(events_file), "--view", "3-month", "--date", "2025-11-14", "--scope", "brand-a", "--types", "task,invoice"],
        now_provider=lambda: NOW,
        stdout=stdout,
    )

    assert exit_code == 0
    payload = json.loads(stdout.getvalue())
    assert len(payload["months"]) == 3
    assert payload["months"][0]["events_by_day"] == {"2025-11-20": ["task"]}


def test_invalid_json_returns_error(tmp_path: Path) -> None:
    events_file = tmp_path / "broken.json"
    events_file.write_text("{not json", encoding="utf-8")

    assert app.main([str(events_file)], now_provider=lambda: NOW) == 1


def test_missing_file_returns_error(tmp_path: Path) -> None:
    assert app.main([str(tmp_path / "absent.json")], now_provider=lambda: NOW) == 1


def test_bad_settings_return_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    events_file = write_json(tmp_path / "events.json", [])
    monkeypatch.setenv("CALENDAR_END_HOUR", "late")

    assert app.main([str(events_file)], now_provider=lambda: NOW) == 1


def test_unparseable_date_flag_returns_error(tmp_path: Path) -> None:
    events_file = write_json(tmp_path / "events.json", [])

    assert app.main([str(events_file), "--date", "someday"], now_provider=lambda: NOW) == 1


def test_parse_types() -> None:
    assert app.parse_types(None) is None
    assert app.parse_types("task, invoice") == frozenset({EventType.TASK, EventType.INVOICE})
    with pytest.raises(ConfigError):
        app.parse_types("task,meeting")


def test_env_file_settings_apply(tmp_path: Path) -> None:
    env_file = tmp_path / "calendar.env"
    env_file.write_text("CALENDAR_START_HOUR=8\nCALENDAR_END_HOUR=18\n", encoding="utf-8")
    events_file = write_json(tmp_path / "events.json", [])

    args = app.build_parser().parse_args([str(events_file), "--env-file", str(env_file)])
    settings = app.resolve_settings(args, now_provider=lambda: NOW)

    assert (settings.layout.start_hour, settings.layout.end_hour) == (8, 18)
    assert settings.reference_date == NOW
    assert settings.view is app.ViewMode.MONTH


def test_preview_is_rendered_for_month_view(tmp_path: Path) -> None:
    events_file = write_json(tmp_path / "events.json", busy_day_events())
    preview_dir = tmp_path / "previews"

    exit_code = app.main(
        [str(events_file), "--date", "2025-11-14", "--preview-dir", str(preview_dir)],
        now_provider=lambda: NOW,
        stdout=io.StringIO(),
    )

    assert exit_code == 0
    assert (preview_dir / "month_2025-11.png").exists()


def test_preview_is_skipped_for_other_views(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    events_file = write_json(tmp_path / "events.json", [])
    preview_dir = tmp_path / "previews"

    exit_code = app.main(
        [str(events_file), "--view", "day", "--preview-dir", str(preview_dir)],
        now_provider=lambda: NOW,
        stdout=io.StringIO(),
    )

    assert exit_code == 0
    assert "only rendered for the month view" in caplog.text
    assert not list(preview_dir.glob("*.png"))
