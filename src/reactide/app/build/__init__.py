"""Build/run orchestration over interchangeable build strategies."""

from .orchestrator import (
    BUILD_FAILURE_MESSAGE,
    BUILD_SUCCESS_MESSAGE,
    NO_BUILD_MESSAGE,
    BuildOrchestrator,
    OrchestratorSnapshot,
)
from .strategies import BuiltinStrategy, ToolchainStrategy, create_strategy, strategy_for

__all__ = [
    "BUILD_FAILURE_MESSAGE",
    "BUILD_SUCCESS_MESSAGE",
    "BuildOrchestrator",
    "BuiltinStrategy",
    "NO_BUILD_MESSAGE",
    "OrchestratorSnapshot",
    "ToolchainStrategy",
    "create_strategy",
    "strategy_for",
]
