from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "global-home"
os.environ.setdefault("REACTIDE_HOME", str(SANDBOX_HOME))
os.environ.setdefault("REACTIDE_TELEMETRY", "1")
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
for entry in (SRC, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

from reactide import __version__  # noqa: E402
from reactide.settings import RuntimeSettings  # noqa: E402


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    base = tmp_path / "runtime"
    settings = RuntimeSettings(
        home_dir=base,
        projects_dir=base / "projects",
        state_dir=base / "state",
        log_dir=base / "logs",
        server_host="127.0.0.1",
        server_port=0,
        strategy="builtin",
        cli_version=__version__,
    )
    for directory in (settings.projects_dir, settings.state_dir, settings.log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return settings


@pytest.fixture()
def react_project(tmp_path: Path) -> Path:
    """Minimal two-file TypeScript project without styles."""

    root = tmp_path / "demo"
    (root / "src").mkdir(parents=True)
    (root / "src" / "App.tsx").write_text(
        "import { useState } from 'react';\n"
        "\n"
        "interface Props {\n"
        "  title: string;\n"
        "}\n"
        "\n"
        "function App(props: Props) {\n"
        "  const [count, setCount] = useState<number>(0);\n"
        "  return <h1 onClick={() => setCount(count + 1)}>{count}</h1>;\n"
        "}\n"
        "\n"
        "export default App;\n",
        encoding="utf-8",
    )
    (root / "src" / "main.tsx").write_text(
        "import React from 'react';\n"
        "import ReactDOM from 'react-dom/client';\n"
        "import App from './App';\n"
        "\n"
        "const node = document.getElementById('root')!;\n"
        "ReactDOM.createRoot(node).render(<App />);\n",
        encoding="utf-8",
    )
    return root
