"""Sandboxed static file server used to preview a build output directory."""

from __future__ import annotations

import shutil
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from socketserver import ThreadingMixIn
from urllib.parse import unquote, urlparse

from reactide.domain.errors import PathNotFoundError

INDEX_DOCUMENT = "index.html"
DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".js": "application/javascript",
    ".jsx": "application/javascript",
    ".ts": "application/typescript",
    ".tsx": "application/typescript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".eot": "application/vnd.ms-fontobject",
}


def mime_type_for(name: str) -> str:
    return MIME_TYPES.get(Path(name).suffix.lower(), DEFAULT_MIME_TYPE)


def _is_contained(canonical_root: Path, candidate: Path) -> bool:
    return candidate == canonical_root or canonical_root in candidate.parents


def resolve_request_path(root: Path, request_path: str) -> Path:
    """Map a request path onto ``root`` and return its canonical location.

    Raises :class:`PathNotFoundError` when the target does not exist or when
    its canonical form (symlinks and ``..`` resolved) is outside the
    canonical root.
    """

    path = unquote(urlparse(request_path).path) or "/"
    if path == "/":
        path = "/" + INDEX_DOCUMENT
    canonical_root = root.resolve()
    candidate = root / path.lstrip("/")
    try:
        if not candidate.exists():
            raise PathNotFoundError(path)
        resolved = candidate.resolve()
    except (OSError, ValueError) as exc:
        raise PathNotFoundError(path) from exc
    if not _is_contained(canonical_root, resolved):
        raise PathNotFoundError(path)
    return resolved


class ThreadedHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True


class StaticFileServer:
    """Serves one root directory; ``start``/``stop`` are idempotent."""

    def __init__(self, root: Path, *, host: str = "127.0.0.1", port: int = 3000) -> None:
        self._root = root
        self._host = host
        self._port = port
        self._server: ThreadedHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    @root.setter
    def root(self, value: Path) -> None:
        if self.is_running():
            raise RuntimeError("cannot change the root of a running server; stop it first")
        self._root = value

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        server = self._server
        if server is not None:
            return int(server.server_address[1])
        return self._port

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self.port}"

    def is_running(self) -> bool:
        return self._server is not None

    def start(self) -> None:
        with self._lock:
            if self._server is not None:
                return
            server = ThreadedHTTPServer((self._host, self._port), self._handler_class())
            thread = threading.Thread(target=server.serve_forever, name="reactide-static-server", daemon=True)
            thread.start()
            self._server = server
            self._thread = thread

    def stop(self) -> None:
        with self._lock:
            server, thread = self._server, self._thread
            if server is None:
                return
            server.shutdown()
            server.server_close()
            if thread is not None:
                thread.join(timeout=5)
            self._server = None
            self._thread = None

    def _handler_class(self) -> type[BaseHTTPRequestHandler]:
        app = self

        class Handler(BaseHTTPRequestHandler):
            def log_message(self, format: str, *args: object) -> None:  # noqa: A003 - silence default logging
                return

            def _write_text(self, status: HTTPStatus, message: str) -> None:
                data = message.encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "text/plain")
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                self.wfile.write(data)

            def _handle(self) -> None:
                root = app.root
                try:
                    target = resolve_request_path(root, self.path)
                    if target.is_dir():
                        index = target / INDEX_DOCUMENT
                        if not index.is_file():
                            self._write_text(HTTPStatus.FORBIDDEN, "Directory listing not allowed")
                            return
                        target = index.resolve()
                        if not _is_contained(root.resolve(), target):
                            raise PathNotFoundError(str(index))
                except PathNotFoundError:
                    self._write_text(HTTPStatus.NOT_FOUND, "File not found")
                    return
                self._serve_file(target)

            def _serve_file(self, target: Path) -> None:
                try:
                    handle = target.open("rb")
                except OSError:
                    self._write_text(HTTPStatus.NOT_FOUND, "File not found")
                    return
                with handle:
                    size = target.stat().st_size
                    self.send_response(HTTPStatus.OK)
                    self.send_header("Content-Type", mime_type_for(target.name))
                    self.send_header("Content-Length", str(size))
                    self.send_header("Cache-Control", "no-cache")
                    self.end_headers()
                    if self.command == "HEAD":
                        return
                    try:
                        shutil.copyfileobj(handle, self.wfile)
                    except (BrokenPipeError, ConnectionResetError):
                        return

            do_GET = _handle  # noqa: N815
            do_HEAD = _handle  # noqa: N815
            do_POST = _handle  # noqa: N815
            do_PUT = _handle  # noqa: N815
            do_DELETE = _handle  # noqa: N815
            do_PATCH = _handle  # noqa: N815
            do_OPTIONS = _handle  # noqa: N815

        return Handler


__all__ = [
    "MIME_TYPES",
    "StaticFileServer",
    "ThreadedHTTPServer",
    "mime_type_for",
    "resolve_request_path",
]
