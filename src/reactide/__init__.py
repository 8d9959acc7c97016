"""reactide: author, bundle and preview small web applications locally."""

__version__ = "0.3.0"

__all__ = ["__version__"]
