from __future__ import annotations

import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from reactide.app.server.web import resolve_request_path
from reactide.domain.errors import PathNotFoundError

SEGMENTS = st.sampled_from(["..", ".", "dist", "index.html", "secret.txt", "%2e%2e", "assets", "", "a b"])


@settings(max_examples=200, deadline=None)
@given(segments=st.lists(SEGMENTS, min_size=1, max_size=6))
def test_resolved_paths_never_escape_root(segments: list[str]) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        root = base / "dist"
        (root / "assets").mkdir(parents=True)
        (root / "index.html").write_text("ok", encoding="utf-8")
        (base / "secret.txt").write_text("no", encoding="utf-8")
        request_path = "/" + "/".join(segments)
        try:
            resolved = resolve_request_path(root, request_path)
        except PathNotFoundError:
            return
        canonical = root.resolve()
        assert resolved == canonical or canonical in resolved.parents
