"""Page rendering: Jinja2 templates, partials and time helpers."""

from .context import RenderContext
from .renderer import RenderError, RenderResult, TemplateMissingError, TemplateRenderer
from .timefmt import TimeFormatter

__all__ = [
    "RenderContext",
    "RenderError",
    "RenderResult",
    "TemplateMissingError",
    "TemplateRenderer",
    "TimeFormatter",
]
