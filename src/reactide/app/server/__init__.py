"""Local static file server."""

from .web import MIME_TYPES, StaticFileServer, mime_type_for, resolve_request_path

__all__ = ["MIME_TYPES", "StaticFileServer", "mime_type_for", "resolve_request_path"]
