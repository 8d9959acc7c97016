"""Transpile-and-bundle engine."""

from .engine import (
    ENTRY_DOCUMENT,
    SCRIPT_BUNDLE,
    STYLE_BUNDLE,
    BundleEngine,
    order_scripts,
    script_priority,
)
from .transpile import strip_types, transform_source

__all__ = [
    "BundleEngine",
    "ENTRY_DOCUMENT",
    "SCRIPT_BUNDLE",
    "STYLE_BUNDLE",
    "order_scripts",
    "script_priority",
    "strip_types",
    "transform_source",
]
