"""Static documentation site generator for package taps."""

__all__ = ["__version__"]
__version__ = "0.1.0"
