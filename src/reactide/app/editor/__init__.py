"""Editor session state shared with presentation layers."""

from .session import EditorSession, EditorSnapshot

__all__ = ["EditorSession", "EditorSnapshot"]
