"""Runtime settings for the reactide build-and-serve pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from reactide import __version__

STRATEGY_CHOICES = ("builtin", "toolchain")
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    projects_dir: Path
    state_dir: Path
    log_dir: Path
    server_host: str = "127.0.0.1"
    server_port: int = DEFAULT_PORT
    strategy: str = "builtin"
    cli_version: str = __version__

    @property
    def project_registry_file(self) -> Path:
        return self.state_dir / "projects.json"


def _default_home_dir() -> Path:
    override = os.environ.get("REACTIDE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".reactide"


def _env_port() -> int:
    raw = os.environ.get("REACTIDE_PORT", "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_PORT


def _env_strategy() -> str:
    value = os.environ.get("REACTIDE_STRATEGY", "builtin").strip().lower()
    return value if value in STRATEGY_CHOICES else "builtin"


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    return RuntimeSettings(
        home_dir=base,
        projects_dir=base / "projects",
        state_dir=base / "state",
        log_dir=base / "logs",
        server_host=os.environ.get("REACTIDE_HOST", "127.0.0.1"),
        server_port=_env_port(),
        strategy=_env_strategy(),
    )


SETTINGS = load_settings()
