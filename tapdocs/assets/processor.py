"""Copies and minifies theme assets into the output site."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..logging import get_logger
from .minify import minify_css, minify_js

STYLE_FILENAME = "style.css"
SCRIPT_FILENAME = "main.js"
ASSETS_DIRNAME = "assets"


@dataclass
class AssetReport:
    """Summary of one asset pass."""

    copied: List[Path] = field(default_factory=list)
    style_bytes: Optional[int] = None
    script_bytes: Optional[int] = None


class AssetProcessor:
    """Produces the minified style, minified script and copied assets subtree."""

    def __init__(self, theme_dir: Path, output_dir: Path) -> None:
        self.theme_dir = Path(theme_dir)
        self.output_dir = Path(output_dir)
        self.logger = get_logger("assets")

    def process(self) -> AssetReport:
        report = AssetReport()
        report.copied = self.copy_assets()
        report.style_bytes = self.write_style()
        report.script_bytes = self.write_script()
        return report

    def copy_assets(self) -> List[Path]:
        source_root = self.theme_dir / ASSETS_DIRNAME
        target_root = self.output_dir / ASSETS_DIRNAME
        target_root.mkdir(parents=True, exist_ok=True)

        if not source_root.is_dir():
            self.logger.warning("Assets source directory not found: %s", source_root)
            return []

        copied: List[Path] = []
        for source in sorted(source_root.rglob("*")):
            if not source.is_file():
                continue
            target = target_root / source.relative_to(source_root)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            copied.append(target)

        self.logger.info("Copied %d asset files to %s", len(copied), target_root)
        return copied

    def write_style(self) -> Optional[int]:
        return self._minify_file(STYLE_FILENAME, minify_css, "CSS")

    def write_script(self) -> Optional[int]:
        return self._minify_file(SCRIPT_FILENAME, minify_js, "JavaScript")

    def _minify_file(self, filename: str, minifier, label: str) -> Optional[int]:
        source = self.theme_dir / filename
        if not source.is_file():
            self.logger.warning("%s source file not found: %s", label, source)
            return None
        minified = minifier(source.read_text(encoding="utf-8"))
        target = self.output_dir / filename
        target.write_text(minified, encoding="utf-8")
        size = len(minified.encode("utf-8"))
        self.logger.info("Generated and minified %s (%d bytes)", label, size)
        return size


__all__ = ["ASSETS_DIRNAME", "AssetProcessor", "AssetReport", "SCRIPT_FILENAME", "STYLE_FILENAME"]
