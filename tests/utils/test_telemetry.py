from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from reactide.settings import RuntimeSettings
from reactide.utils import telemetry


def test_structured_event_roundtrip(runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REACTIDE_TELEMETRY", "1")
    telemetry.record_structured_event(
        runtime_settings,
        "build",
        status="success",
        component="orchestrator",
        duration_ms=12.5,
        payload={"project": "demo", "strategy": "builtin"},
    )
    telemetry.record_structured_event(runtime_settings, "stop", status="success", payload={"strategy": "builtin"})
    events = list(telemetry.iter_events(runtime_settings))
    assert [event["event"] for event in events] == ["build", "stop"]
    assert events[0]["durationMs"] == 12.5
    assert events[0]["component"] == "orchestrator"


def test_summary_groups_outcomes_per_strategy() -> None:
    events = [
        {"event": "build", "status": "success", "durationMs": 10.0, "payload": {"strategy": "builtin"}},
        {"event": "build", "status": "error", "durationMs": 30.0, "payload": {"strategy": "builtin"}},
        {"event": "build", "status": "success", "durationMs": 200.0, "payload": {"strategy": "toolchain"}},
        {"event": "run", "status": "skipped", "payload": {"strategy": "toolchain"}},
        {"event": "project.create", "status": "success", "durationMs": 4.0, "payload": {"name": "demo"}},
    ]
    summary = telemetry.summarize(events)
    assert summary["total"] == 5
    assert summary["by_event"] == {"build": 3, "run": 1, "project.create": 1}
    assert summary["by_strategy"] == {
        "builtin": {"build": {"success": 1, "error": 1}},
        "toolchain": {"build": {"success": 1}, "run": {"skipped": 1}},
    }
    assert summary["avg_duration_ms"] == {"build": 80.0, "project.create": 4.0}


def test_disabled_telemetry_writes_nothing(runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REACTIDE_TELEMETRY", "off")
    telemetry.record_structured_event(runtime_settings, "build")
    assert list(telemetry.iter_events(runtime_settings)) == []


def test_invalid_records_are_rejected(runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REACTIDE_TELEMETRY", "1")
    with pytest.raises(telemetry.TelemetryError):
        telemetry.record_structured_event(runtime_settings, " ")
    with pytest.raises(telemetry.TelemetryError):
        telemetry.record_structured_event(runtime_settings, "build", level="debug")
    with pytest.raises(telemetry.TelemetryError):
        telemetry.record_structured_event(runtime_settings, "build", duration_ms=-1)
    assert list(telemetry.iter_events(runtime_settings)) == []


def test_unwritable_log_dir_raises_telemetry_error(
    runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("REACTIDE_TELEMETRY", "1")
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    settings = replace(runtime_settings, log_dir=blocker)
    with pytest.raises(telemetry.TelemetryError, match="cannot write"):
        telemetry.record_structured_event(settings, "build", status="success")


def test_clear_and_corrupt_lines(runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REACTIDE_TELEMETRY", "1")
    telemetry.record_structured_event(runtime_settings, "run")
    log_path = telemetry.telemetry_path(runtime_settings)
    with log_path.open("a", encoding="utf-8") as fh:
        fh.write("not json\n\n")
    assert [event["event"] for event in telemetry.iter_events(runtime_settings)] == ["run"]
    telemetry.clear(runtime_settings)
    assert not log_path.exists()
    telemetry.clear(runtime_settings)
