"""Self-contained bundler: turns ``src/`` + ``public/`` into a static bundle."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from reactide.domain.errors import ProjectIOError
from reactide.domain.project import PUBLIC_DIR, SOURCE_DIR, check_output_dir

from .transpile import collect_runtime_bindings, transform_source

SCRIPT_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")
STYLE_EXTENSIONS = (".css",)

ENTRY_DOCUMENT = "index.html"
SCRIPT_BUNDLE = "bundle.js"
STYLE_BUNDLE = "bundle.css"
MOUNT_ELEMENT_ID = "root"
ENTRY_SYMBOL = "App"

BUNDLE_HEADER = "// Generated by reactide from src/. Edits are lost on the next build.\n"

RUNTIME_PREAMBLE = (
    "import React from 'https://esm.sh/react@18.2.0';\n"
    "import ReactDOM from 'https://esm.sh/react-dom@18.2.0/client';\n"
)

_DEFAULT_DOCUMENT = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title}</title>
  </head>
  <body>
    <div id="{mount_id}"></div>
  </body>
</html>
"""

_MOUNT_TRAILER = """// Auto-mount
{{
  const mountNode = document.getElementById('{mount_id}');
  if (mountNode && typeof {symbol} !== 'undefined') {{
    ReactDOM.createRoot(mountNode).render(React.createElement({symbol}));
  }}
}}
"""

LogSink = Callable[[str], None]


def script_priority(name: str) -> int:
    """Concatenation rank of a script by file name; higher ranks go later.

    This is a naming heuristic, not dependency analysis: the mount trailer
    references ``App`` so entry-ish files are pushed towards the end.
    """

    lowered = name.lower()
    if "main" in lowered:
        return 3
    if "app" in lowered:
        return 2
    if "index" in lowered:
        return 1
    return 0


def order_scripts(files: List[Path]) -> List[Path]:
    return sorted(files, key=lambda path: script_priority(path.name))


def collect_sources(src_dir: Path, extensions: tuple[str, ...]) -> List[Path]:
    """Recursively collect files by extension, skipping dot-directories, in name order."""

    collected: List[Path] = []
    for entry in sorted(src_dir.iterdir(), key=lambda item: item.name):
        if entry.is_dir():
            if not entry.name.startswith("."):
                collected.extend(collect_sources(entry, extensions))
        elif entry.is_file() and entry.name.endswith(extensions):
            collected.append(entry)
    return collected


def inject_references(document: str) -> str:
    return document.replace(
        "</head>", f'<link rel="stylesheet" href="/{STYLE_BUNDLE}" /></head>'
    ).replace(
        "</body>", f'<script type="module" src="/{SCRIPT_BUNDLE}"></script></body>'
    )


@dataclass
class BundleEngine:
    """Lexical transpile-and-concatenate bundler.

    Failures of any kind are reported as ``False``; whatever was already
    written to the output directory stays there.
    """

    mount_id: str = MOUNT_ELEMENT_ID
    entry_symbol: str = ENTRY_SYMBOL

    def bundle(self, project_root: Path, output_dir: Path, on_log: Optional[LogSink] = None) -> bool:
        log = on_log or (lambda _line: None)
        try:
            self._bundle(project_root, output_dir, log)
        except Exception as exc:  # noqa: BLE001 - failures become a boolean result
            log(f"Bundle failed: {exc}")
            return False
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _bundle(self, project_root: Path, output_dir: Path, log: LogSink) -> None:
        check_output_dir(project_root, output_dir)
        if output_dir.exists():
            log("Cleaning old build...")
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)

        src_dir = project_root / SOURCE_DIR
        public_dir = project_root / PUBLIC_DIR
        if not src_dir.is_dir():
            raise ProjectIOError(f"source directory not found: {src_dir}")

        document = self._load_entry_document(project_root, public_dir)

        log("Bundling JavaScript...")
        scripts = order_scripts(collect_sources(src_dir, SCRIPT_EXTENSIONS))
        (output_dir / SCRIPT_BUNDLE).write_text(self.render_script_bundle(src_dir, scripts), encoding="utf-8")

        styles = collect_sources(src_dir, STYLE_EXTENSIONS)
        stylesheet = self.render_style_bundle(src_dir, styles)
        if stylesheet:
            log("Bundling CSS...")
            (output_dir / STYLE_BUNDLE).write_text(stylesheet, encoding="utf-8")

        (output_dir / ENTRY_DOCUMENT).write_text(inject_references(document), encoding="utf-8")

        if public_dir.is_dir():
            log("Copying public assets...")
            self._copy_assets(public_dir, output_dir)

    def _load_entry_document(self, project_root: Path, public_dir: Path) -> str:
        template = public_dir / ENTRY_DOCUMENT
        if template.is_file():
            return template.read_text(encoding="utf-8")
        return _DEFAULT_DOCUMENT.format(title=project_root.name, mount_id=self.mount_id)

    def render_script_bundle(self, src_dir: Path, scripts: List[Path]) -> str:
        sources = [(script, script.read_text(encoding="utf-8")) for script in scripts]
        declarations = collect_runtime_bindings(text for _, text in sources)
        parts = [BUNDLE_HEADER + RUNTIME_PREAMBLE + "".join(line + "\n" for line in declarations)]
        for script, text in sources:
            body = transform_source(text)
            parts.append(f"// File: {script.relative_to(src_dir).as_posix()}\n{body.rstrip()}\n")
        parts.append(_MOUNT_TRAILER.format(mount_id=self.mount_id, symbol=self.entry_symbol))
        return "\n".join(parts)

    def render_style_bundle(self, src_dir: Path, styles: List[Path]) -> str:
        chunks = [
            f"/* File: {style.relative_to(src_dir).as_posix()} */\n{style.read_text(encoding='utf-8').rstrip()}\n"
            for style in styles
        ]
        return "\n".join(chunks)

    def _copy_assets(self, source: Path, target: Path) -> None:
        for entry in sorted(source.iterdir(), key=lambda item: item.name):
            destination = target / entry.name
            if entry.is_dir():
                destination.mkdir(parents=True, exist_ok=True)
                self._copy_assets(entry, destination)
            elif entry.is_file() and entry.name != ENTRY_DOCUMENT:
                shutil.copy2(entry, destination)


__all__ = [
    "BUNDLE_HEADER",
    "BundleEngine",
    "ENTRY_DOCUMENT",
    "RUNTIME_PREAMBLE",
    "SCRIPT_BUNDLE",
    "STYLE_BUNDLE",
    "collect_sources",
    "inject_references",
    "order_scripts",
    "script_priority",
]
