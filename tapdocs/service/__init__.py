"""Local preview server."""

from .app import PreviewServer, create_app

__all__ = ["PreviewServer", "create_app"]
