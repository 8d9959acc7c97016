"""JSONL telemetry of build, run and project outcomes (opt-out via ``REACTIDE_TELEMETRY``)."""

from __future__ import annotations

import json
import os
import time
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Iterator

from jsonschema import Draft202012Validator, ValidationError

from reactide.settings import RuntimeSettings

TELEMETRY_FILENAME = "telemetry.jsonl"

# Events whose payload names the build strategy; ``summarize`` groups these per strategy.
STRATEGY_EVENTS = ("build", "run", "stop")

_DISABLE_VALUES = {"0", "false", "no", "off"}


class TelemetryError(RuntimeError):
    """Raised when an event is malformed or the telemetry log cannot be written."""


def telemetry_enabled() -> bool:
    value = os.getenv("REACTIDE_TELEMETRY", "1").lower()
    return value not in _DISABLE_VALUES


def telemetry_path(settings: RuntimeSettings) -> Path:
    return settings.log_dir / TELEMETRY_FILENAME


def record_structured_event(
    settings: RuntimeSettings,
    event: str,
    *,
    payload: dict[str, Any] | None = None,
    level: str = "info",
    status: str | None = None,
    component: str | None = None,
    duration_ms: float | None = None,
) -> None:
    if not telemetry_enabled():
        return
    record: dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        "payload": payload or {},
        "level": level,
    }
    if status:
        record["status"] = status
    if component:
        record["component"] = component
    if duration_ms is not None:
        record["durationMs"] = duration_ms
    try:
        _telemetry_validator().validate(record)
    except ValidationError as exc:
        raise TelemetryError(f"invalid telemetry event '{event}': {exc.message}") from exc
    log_path = telemetry_path(settings)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as exc:
        raise TelemetryError(f"cannot write {log_path}: {exc}") from exc


def iter_events(settings: RuntimeSettings) -> Iterator[dict[str, Any]]:
    log_path = telemetry_path(settings)
    if not log_path.exists():
        return iter(())
    return _read_events(log_path)


def _read_events(log_path: Path) -> Iterator[dict[str, Any]]:
    with log_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue


def summarize(events: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Aggregate events into counts and per-strategy outcomes.

    ``by_strategy`` maps each strategy to ``{"build": {"success": n, ...}, ...}``
    and ``avg_duration_ms`` holds the mean duration of every timed event.
    """

    total = 0
    by_event: dict[str, int] = {}
    by_strategy: dict[str, dict[str, dict[str, int]]] = {}
    durations: dict[str, list[float]] = {}
    for evt in events:
        total += 1
        name = evt.get("event", "unknown")
        by_event[name] = by_event.get(name, 0) + 1
        if isinstance(evt.get("durationMs"), (int, float)):
            durations.setdefault(name, []).append(float(evt["durationMs"]))
        strategy = (evt.get("payload") or {}).get("strategy")
        if name in STRATEGY_EVENTS and strategy:
            outcomes = by_strategy.setdefault(strategy, {}).setdefault(name, {})
            status = evt.get("status", "unknown")
            outcomes[status] = outcomes.get(status, 0) + 1
    return {
        "total": total,
        "by_event": by_event,
        "by_strategy": by_strategy,
        "avg_duration_ms": {name: round(sum(values) / len(values), 3) for name, values in durations.items()},
    }


def clear(settings: RuntimeSettings) -> None:
    log_path = telemetry_path(settings)
    if log_path.exists():
        log_path.unlink()


@lru_cache(maxsize=1)
def _telemetry_validator() -> Draft202012Validator:
    schema_resource = resources.files("reactide.resources") / "telemetry.schema.json"
    with schema_resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


__all__ = [
    "STRATEGY_EVENTS",
    "TELEMETRY_FILENAME",
    "TelemetryError",
    "clear",
    "iter_events",
    "record_structured_event",
    "summarize",
    "telemetry_enabled",
    "telemetry_path",
]
