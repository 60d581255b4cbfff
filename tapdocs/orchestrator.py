"""Pipeline orchestration for parse/render/build/clean flows."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from .assets.processor import ASSETS_DIRNAME, SCRIPT_FILENAME, STYLE_FILENAME
from .config import SiteConfig, load_config
from .extractor import MetadataExtractor, format_timestamp, local_now
from .logging import get_logger
from .models import RecordSet
from .rendering import RenderError, RenderResult, TemplateRenderer, TimeFormatter
from .stores import RecordStore, RecordStoreError


class BuildError(RuntimeError):
    """Raised when a build stage cannot complete."""


@dataclass
class BuildOutcome:
    """Result of a full extraction and render run."""

    record_set: RecordSet
    render: RenderResult

    @property
    def page_count(self) -> int:
        return self.render.page_count


@dataclass
class CheckItem:
    """One line of the project structure report."""

    label: str
    path: Path
    present: bool
    required: bool


class BuildOrchestrator:
    """Runs extraction then rendering, always regenerating every artifact."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        extractor: MetadataExtractor | None = None,
        renderer: TemplateRenderer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.clock = clock or local_now
        self.extractor = extractor or MetadataExtractor(config, clock=self.clock)
        self.renderer = renderer or TemplateRenderer(config, formatter=TimeFormatter(self.clock))
        self.store = RecordStore(config.data_file)
        self.logger = get_logger("orchestrator")

    def run_parse(self) -> RecordSet:
        """Extract records and write the record-set document."""
        self.logger.info("Parsing definition files in %s", self.config.source_dir)
        try:
            return self.extractor.run()
        except OSError as exc:
            raise BuildError(f"Failed to write {self.config.data_file}: {exc}") from exc

    def run_render(self) -> RenderResult:
        """Render the site from the stored record-set document."""
        self.logger.info("Building static site into %s", self.config.output_dir)
        try:
            record_set = self.store.load()
        except RecordStoreError as exc:
            raise BuildError(str(exc)) from exc
        if record_set is None:
            self.logger.warning(
                "No record data at %s; rendering an empty site", self.config.data_file
            )
            record_set = RecordSet(
                source_name=self.config.source_name,
                generated_at=format_timestamp(self.clock()),
            )
        try:
            return self.renderer.render_site(record_set)
        except RenderError as exc:
            raise BuildError(str(exc)) from exc
        except OSError as exc:
            raise BuildError(f"Failed to write site to {self.config.output_dir}: {exc}") from exc

    def run_build(self) -> BuildOutcome:
        """Parse then render; nothing is written when templates are missing."""
        try:
            self.renderer.ensure_templates()
        except RenderError as exc:
            raise BuildError(str(exc)) from exc
        record_set = self.run_parse()
        render = self.run_render()
        self.logger.info(
            "Site built with %d pages for %d packages", render.page_count, record_set.count
        )
        return BuildOutcome(record_set=record_set, render=render)

    def generated_paths(self) -> List[Path]:
        output_dir = self.config.output_dir
        return [
            output_dir / "index.html",
            output_dir / self.config.listing_page,
            self.config.item_output_dir,
            self.config.data_file,
            output_dir / STYLE_FILENAME,
            output_dir / SCRIPT_FILENAME,
            output_dir / ASSETS_DIRNAME,
        ]

    def clean(self) -> List[Path]:
        """Remove generated artifacts and return the paths that existed."""
        removed: List[Path] = []
        for path in self.generated_paths():
            if path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
            else:
                continue
            removed.append(path)
            self.logger.info("Removed %s", path)
        return removed

    def check(self) -> List[CheckItem]:
        """Report which expected inputs exist."""
        theme_dir = Path(self.config.theme_dir or ".")
        items = [
            CheckItem("Source directory", self.config.source_dir, self.config.source_dir.is_dir(), True),
            CheckItem("Theme directory", theme_dir, theme_dir.is_dir(), True),
        ]
        for key in TemplateRenderer.REQUIRED_PAGES:
            template = theme_dir / self.config.templates.get(key, "")
            items.append(CheckItem(f"{key.title()} template", template, template.is_file(), True))
        for filename in (STYLE_FILENAME, SCRIPT_FILENAME):
            path = theme_dir / filename
            items.append(CheckItem(f"Theme {filename}", path, path.is_file(), False))
        return items


def rebuild_from_disk(root: Path) -> BuildOutcome:
    """Reload the project configuration from ``root`` and run a full build."""
    return BuildOrchestrator(load_config(root)).run_build()


__all__ = ["BuildError", "BuildOrchestrator", "BuildOutcome", "CheckItem", "rebuild_from_disk"]
