"""External toolchain adapter."""

from .adapter import ToolchainAdapter, default_commands

__all__ = ["ToolchainAdapter", "default_commands"]
