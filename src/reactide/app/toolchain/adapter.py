"""Delegates build and dev-server work to an externally installed toolchain."""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from pathlib import Path
from typing import Callable, IO, List, Optional

from reactide.domain.errors import ToolchainProcessError
from reactide.domain.project import DEFAULT_TOOLCHAIN, ToolchainCommands

LogSink = Callable[[str], None]


def default_commands() -> ToolchainCommands:
    return ToolchainCommands(**{key: list(value) for key, value in DEFAULT_TOOLCHAIN.items()})


class ToolchainAdapter:
    """Runs install/build commands and tracks at most one long-running dev server."""

    def __init__(self, commands: ToolchainCommands | None = None, *, env: dict[str, str] | None = None) -> None:
        self._commands = commands or default_commands()
        self._extra_env = dict(env or {})
        self._process: Optional[subprocess.Popen[str]] = None
        self._pump: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def commands(self) -> ToolchainCommands:
        return self._commands

    def build(self, project_root: Path, on_log: LogSink, commands: ToolchainCommands | None = None) -> bool:
        """Run install then build; both must exit 0."""

        commands = commands or self._commands
        install_code = self.run_streaming(commands.install, project_root, on_log)
        if install_code != 0:
            on_log(f"Install command failed with exit code {install_code}")
            return False
        build_code = self.run_streaming(commands.build, project_root, on_log)
        if build_code != 0:
            on_log(f"Build command failed with exit code {build_code}")
            return False
        return True

    def run_streaming(self, argv: List[str], cwd: Path, on_log: LogSink) -> int:
        """Run ``argv`` to completion, forwarding merged output line by line."""

        on_log("$ " + " ".join(argv))
        process = self._spawn(argv, cwd)
        if process.stdout is None:
            return process.wait()
        with process.stdout:
            for line in process.stdout:
                on_log(line.rstrip("\r\n"))
        return process.wait()

    def start(self, project_root: Path, on_log: LogSink, commands: ToolchainCommands | None = None) -> None:
        """Spawn the dev-server command; output is pumped on a background thread."""

        commands = commands or self._commands
        self.stop()
        on_log("$ " + " ".join(commands.dev))
        with self._lock:
            process = self._spawn(commands.dev, project_root)
            pump = threading.Thread(
                target=self._pump_output,
                args=(process, on_log),
                name="reactide-toolchain-pump",
                daemon=True,
            )
            self._process = process
            self._pump = pump
            pump.start()

    def stop(self) -> None:
        """Force-terminate the tracked process, if any."""

        with self._lock:
            process, pump = self._process, self._pump
            self._process = None
            self._pump = None
        if process is None:
            return
        if process.poll() is None:
            self._kill(process)
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait(timeout=5)
        if pump is not None:
            pump.join(timeout=5)

    def is_running(self) -> bool:
        process = self._process
        return process is not None and process.poll() is None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _spawn(self, argv: List[str], cwd: Path) -> subprocess.Popen[str]:
        if not argv:
            raise ToolchainProcessError("toolchain command is empty", argv=argv)
        try:
            return subprocess.Popen(
                argv,
                cwd=cwd,
                env=self._build_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                start_new_session=os.name == "posix",
            )
        except (FileNotFoundError, PermissionError, NotADirectoryError) as exc:
            raise ToolchainProcessError(
                f"Toolchain executable missing or not runnable: {argv[0]} ({exc})",
                argv=argv,
            ) from exc

    def _pump_output(self, process: subprocess.Popen[str], on_log: LogSink) -> None:
        stream: IO[str] | None = process.stdout
        if stream is None:
            return
        try:
            with stream:
                for line in stream:
                    on_log(line.rstrip("\r\n"))
        except (OSError, ValueError):
            # stream closed underneath us by a forced stop
            pass
        on_log(f"Process exited with code {process.wait()}")

    def _kill(self, process: subprocess.Popen[str]) -> None:
        if os.name == "posix":
            try:
                os.killpg(process.pid, signal.SIGKILL)
                return
            except (ProcessLookupError, PermissionError):
                pass
        process.kill()

    def _build_env(self) -> dict[str, str]:
        env = os.environ.copy()
        env.setdefault("PYTHONUNBUFFERED", "1")
        env.setdefault("BROWSER", "none")
        env.update(self._extra_env)
        return env


__all__ = ["ToolchainAdapter", "default_commands"]
