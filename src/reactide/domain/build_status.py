"""Build/run status values published by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BuildState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class BuildStatus:
    state: BuildState
    message: str = ""

    @classmethod
    def idle(cls) -> "BuildStatus":
        return cls(BuildState.IDLE)

    @classmethod
    def building(cls) -> "BuildStatus":
        return cls(BuildState.BUILDING)

    @classmethod
    def running(cls) -> "BuildStatus":
        return cls(BuildState.RUNNING)

    @classmethod
    def success(cls, message: str) -> "BuildStatus":
        return cls(BuildState.SUCCESS, message)

    @classmethod
    def error(cls, message: str) -> "BuildStatus":
        return cls(BuildState.ERROR, message)

    @property
    def is_busy(self) -> bool:
        return self.state in {BuildState.BUILDING, BuildState.RUNNING}

    def to_dict(self) -> dict[str, str]:
        return {"state": self.state.value, "message": self.message}


__all__ = ["BuildState", "BuildStatus"]
