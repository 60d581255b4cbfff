"""Renders the documentation site from a record set and a Jinja2 theme."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound, select_autoescape
from markupsafe import Markup, escape

from ..assets import AssetProcessor, AssetReport
from ..assets.processor import ASSETS_DIRNAME
from ..config import SiteConfig
from ..logging import get_logger
from ..models import RecordSet, is_safe_name
from .context import RenderContext
from .timefmt import TimeFormatter

PARTIAL_PREFIX = "_"
TEMPLATE_SUFFIX = ".html.j2"


def _blank_none(value: Any) -> Any:
    return "" if value is None else value


class RenderError(RuntimeError):
    """Raised when a template cannot be loaded or evaluated."""


class TemplateMissingError(RenderError):
    """Raised when a required page template is absent from the theme."""


@dataclass
class RenderResult:
    """Pages and assets produced by one render pass."""

    pages: List[Path] = field(default_factory=list)
    assets: AssetReport = field(default_factory=AssetReport)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class TemplateRenderer:
    """Turns a record set into index, listing and per-package pages."""

    REQUIRED_PAGES = ("index", "listing", "item")

    def __init__(
        self,
        config: SiteConfig,
        *,
        formatter: TimeFormatter | None = None,
        assets: AssetProcessor | None = None,
    ) -> None:
        self.config = config
        self.theme_dir = Path(config.theme_dir or ".")
        self.formatter = formatter or TimeFormatter()
        self.assets = assets or AssetProcessor(self.theme_dir, config.output_dir)
        self.logger = get_logger("renderer")
        self._env = Environment(
            loader=FileSystemLoader(str(self.theme_dir)),
            autoescape=select_autoescape(enabled_extensions=("html", "html.j2")),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            finalize=_blank_none,
        )
        self.helpers: Dict[str, Callable[..., Any]] = {
            "format_relative_time": self.formatter.relative,
            "format_date": self.formatter.absolute,
            "render_partial": self.render_partial,
            "escape": escape,
        }

    # ------------------------------------------------------------------
    # Public API

    def missing_templates(self) -> List[str]:
        missing: List[str] = []
        for key in self.REQUIRED_PAGES:
            filename = self.config.templates.get(key, "")
            if not filename or not (self.theme_dir / filename).is_file():
                missing.append(filename or key)
        return missing

    def ensure_templates(self) -> None:
        missing = self.missing_templates()
        if missing:
            raise TemplateMissingError(
                f"Templates not found in {self.theme_dir}: {', '.join(missing)}"
            )

    def render_site(self, record_set: RecordSet) -> RenderResult:
        """Render every page and process assets; aborts before writing if templates are missing."""
        self.ensure_templates()
        unsafe = [record.name for record in record_set.records if not is_safe_name(record.name)]
        if unsafe:
            raise RenderError(f"Package names cannot be used as file names: {', '.join(map(repr, unsafe))}")
        output_dir = self.config.output_dir
        item_dir = self.config.item_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        # Item pages and assets are owned by the build; stale entries must not survive.
        for owned in (item_dir, output_dir / ASSETS_DIRNAME):
            if owned.is_dir():
                shutil.rmtree(owned)
        item_dir.mkdir(parents=True, exist_ok=True)

        result = RenderResult()
        result.assets = self.assets.process()

        site = record_set.to_dict()
        records = site["records"]
        shared = {
            "site": site,
            "records": records,
            "listing_page": self.config.listing_page,
            "item_dir": self.config.item_dir,
        }

        result.pages.append(
            self._write(output_dir / "index.html", self.render_page("index", {**shared, "base_path": ""}))
        )
        result.pages.append(
            self._write(
                output_dir / self.config.listing_page,
                self.render_page("listing", {**shared, "base_path": ""}),
            )
        )
        for record in records:
            html = self.render_page("item", {**shared, "record": record, "base_path": "../"})
            result.pages.append(self._write(item_dir / f"{record['name']}.html", html))

        self.logger.info("Rendered %d pages into %s", result.page_count, output_dir)
        return result

    def render_page(self, key: str, locals: Mapping[str, Any]) -> str:
        filename = self.config.templates.get(key)
        if not filename:
            raise TemplateMissingError(f"No template configured for page '{key}'")
        context = RenderContext(template=filename, locals={"page": key, **locals}, helpers=self.helpers)
        return self._evaluate(context)

    def render_partial(self, name: str, **locals: Any) -> Markup:
        """Render ``_<name>.html.j2`` with only ``locals`` and the shared helpers."""
        filename = f"{PARTIAL_PREFIX}{name}{TEMPLATE_SUFFIX}"
        if not (self.theme_dir / filename).is_file():
            raise RenderError(f"Partial not found: {self.theme_dir / filename}")
        context = RenderContext(template=filename, locals=locals, helpers=self.helpers)
        return Markup(self._evaluate(context))

    # ------------------------------------------------------------------
    # Internal helpers

    def _evaluate(self, context: RenderContext) -> str:
        try:
            template = self._env.get_template(context.template)
            return template.render(**context.variables())
        except TemplateNotFound as exc:
            raise TemplateMissingError(f"Template not found: {exc.name}") from exc
        except TemplateError as exc:
            raise RenderError(f"Failed to render {context.template}: {exc}") from exc

    @staticmethod
    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path


__all__ = ["RenderError", "RenderResult", "TemplateMissingError", "TemplateRenderer"]
