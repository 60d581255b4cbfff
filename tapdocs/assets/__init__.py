"""Theme asset processing: minification and copying."""

from .minify import minify_css, minify_js
from .processor import AssetProcessor, AssetReport

__all__ = ["AssetProcessor", "AssetReport", "minify_css", "minify_js"]
