"""Concrete build strategies: built-in bundler + static server, or external toolchain."""

from __future__ import annotations

from pathlib import Path

from reactide.app.bundler import BundleEngine
from reactide.app.server import StaticFileServer
from reactide.app.toolchain import ToolchainAdapter
from reactide.domain.project import Project, ProjectDescriptor, output_dir_for
from reactide.ports.build_strategy import BuildStrategy, LogSink
from reactide.settings import STRATEGY_CHOICES, RuntimeSettings


def _count_files(directory: Path) -> int:
    return sum(1 for item in directory.rglob("*") if item.is_file())


class BuiltinStrategy(BuildStrategy):
    """Bundles with :class:`BundleEngine` and previews with :class:`StaticFileServer`."""

    name = "builtin"

    def __init__(self, *, host: str = "127.0.0.1", port: int = 3000, engine: BundleEngine | None = None) -> None:
        self._host = host
        self._port = port
        self._engine = engine or BundleEngine()
        self._server: StaticFileServer | None = None

    @property
    def server(self) -> StaticFileServer | None:
        return self._server

    def output_dir(self, project: Project) -> Path:
        return output_dir_for(project)

    def build(self, project: Project, on_log: LogSink) -> bool:
        output = self.output_dir(project)
        on_log("Bundling JavaScript and CSS...")
        if not self._engine.bundle(project.root, output, on_log):
            return False
        on_log(f"Generated {_count_files(output)} files in /{output.name}")
        return True

    def serve(self, project: Project, on_log: LogSink) -> None:
        root = self.output_dir(project)
        if self._server is None:
            self._server = StaticFileServer(root, host=self._host, port=self._port)
        else:
            self._server.stop()
            self._server.root = root
        self._server.start()

    def stop(self) -> None:
        if self._server is not None:
            self._server.stop()

    def is_running(self) -> bool:
        return self._server is not None and self._server.is_running()

    def address(self) -> str | None:
        if self._server is None or not self._server.is_running():
            return None
        return self._server.url


class ToolchainStrategy(BuildStrategy):
    """Delegates to install/build/dev commands declared for the project."""

    name = "toolchain"

    def __init__(self, adapter: ToolchainAdapter | None = None) -> None:
        self._adapter = adapter or ToolchainAdapter()

    @property
    def adapter(self) -> ToolchainAdapter:
        return self._adapter

    def output_dir(self, project: Project) -> Path:
        return output_dir_for(project)

    def build(self, project: Project, on_log: LogSink) -> bool:
        descriptor = ProjectDescriptor.load(project.root)
        return self._adapter.build(project.root, on_log, descriptor.toolchain)

    def serve(self, project: Project, on_log: LogSink) -> None:
        descriptor = ProjectDescriptor.load(project.root)
        self._adapter.start(project.root, on_log, descriptor.toolchain)

    def stop(self) -> None:
        self._adapter.stop()

    def is_running(self) -> bool:
        return self._adapter.is_running()


def create_strategy(name: str, settings: RuntimeSettings, *, port: int | None = None) -> BuildStrategy:
    if name not in STRATEGY_CHOICES:
        raise ValueError(f"Unknown build strategy '{name}'; expected one of {', '.join(STRATEGY_CHOICES)}")
    if name == "toolchain":
        return ToolchainStrategy()
    return BuiltinStrategy(host=settings.server_host, port=settings.server_port if port is None else port)


def strategy_for(project: Project, settings: RuntimeSettings, *, override: str | None = None, port: int | None = None) -> BuildStrategy:
    """Pick the strategy: explicit override, then ``reactide.yaml``, then settings."""

    name = override or ProjectDescriptor.load(project.root).strategy or settings.strategy
    return create_strategy(name, settings, port=port)


__all__ = ["BuiltinStrategy", "ToolchainStrategy", "create_strategy", "strategy_for"]
