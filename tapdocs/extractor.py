"""Pattern-based metadata extraction from package definition files.

Definition files are never evaluated. Each field is matched by an independent
single-line pattern, so a malformed or hostile file can only lose fields.
"""

from __future__ import annotations

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Pattern

from .config import SiteConfig
from .logging import get_logger
from .models import PackageRecord, RecordSet
from .stores import RecordStore

DEFAULT_PATTERNS: Dict[str, Pattern[str]] = {
    "type_name": re.compile(r"^class\s+(\w+)\s+<\s+Formula\b", re.MULTILINE),
    "description": re.compile(r"""^\s*desc\s+["']([^"']+)["']""", re.MULTILINE),
    "homepage": re.compile(r"""^\s*homepage\s+["']([^"']+)["']""", re.MULTILINE),
    "url": re.compile(r"""^\s*url\s+["']([^"']+)["']""", re.MULTILINE),
    "version": re.compile(r"""^\s*version\s+["']([^"']+)["']""", re.MULTILINE),
    "checksum": re.compile(r"""^\s*sha256\s+["']([a-fA-F0-9]{64})["']""", re.MULTILINE),
    "license": re.compile(r"""^\s*license\s+["']([^"']+)["']""", re.MULTILINE),
    "dependency": re.compile(r"""^\s*depends_on\s+["']([^"']+)["']""", re.MULTILINE),
}

_URL_VERSION = re.compile(r"v?(\d+(?:\.\d+)+)")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")

_EXCLUDED_DIRS = {".git", ".hg", ".svn", "__pycache__", "node_modules"}

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


def to_kebab_case(identifier: str) -> str:
    """Convert a CamelCase identifier to kebab-case (``ExampleToolTwo`` -> ``example-tool-two``)."""
    return _CAMEL_BOUNDARY.sub(r"\1-\2", identifier).lower()


def version_from_url(url: str | None) -> Optional[str]:
    """Return the first dotted numeric version found in ``url``."""
    if not url:
        return None
    match = _URL_VERSION.search(url)
    return match.group(1) if match else None


def format_timestamp(moment: datetime) -> str:
    """Render an ISO-8601 timestamp carrying a timezone offset."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.isoformat(timespec="seconds")


class MetadataExtractor:
    """Turns a tree of definition files into a sorted record set."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        patterns: Mapping[str, Pattern[str]] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self.patterns: Dict[str, Pattern[str]] = dict(DEFAULT_PATTERNS)
        if patterns:
            self.patterns.update(patterns)
        self.clock = clock or local_now
        self.logger = get_logger("extractor")

    def definition_files(self) -> List[Path]:
        """Return definition files under the source directory in sorted order."""
        return sorted(_iter_files(self.config.source_dir, self.config.source_extension))

    def extract(self) -> RecordSet:
        """Parse every definition file and return a fresh record set."""
        source_dir = self.config.source_dir
        by_name: Dict[str, PackageRecord] = {}
        files = self.definition_files() if source_dir.is_dir() else []
        if not source_dir.is_dir():
            self.logger.warning("Source directory not found: %s", source_dir)

        for path in files:
            record = self.parse_file(path)
            if record is None:
                continue
            previous = by_name.get(record.name)
            if previous is not None:
                self.logger.warning(
                    "Duplicate package name '%s': %s replaces %s",
                    record.name,
                    record.relative_file_path,
                    previous.relative_file_path,
                )
            by_name[record.name] = record

        records = sorted(by_name.values(), key=lambda item: item.name)
        self.logger.debug("Extracted %d records from %d files", len(records), len(files))
        return RecordSet(
            source_name=self.config.source_name,
            generated_at=format_timestamp(self.clock()),
            records=records,
        )

    def run(self) -> RecordSet:
        """Extract records and write the record-set document."""
        record_set = self.extract()
        RecordStore(self.config.data_file).write(record_set)
        self.logger.info(
            "Generated metadata for %d packages at %s", record_set.count, self.config.data_file
        )
        return record_set

    def parse_file(self, path: Path) -> Optional[PackageRecord]:
        """Return a record for ``path`` or None when the file yields no package."""
        try:
            content = path.read_text(encoding="utf-8")
            type_name = self._first(content, "type_name")
            if not type_name:
                self.logger.debug("Skipping %s: no type declaration", path)
                return None
            name = to_kebab_case(type_name)
            if not name:
                return None
            return self.build_record(content, path, name, type_name)
        except Exception as exc:
            self.logger.warning("Error parsing %s: %s", path, exc)
            return None

    def build_record(self, content: str, path: Path, name: str, type_name: str) -> PackageRecord:
        url = self._first(content, "url")
        checksum = self._first(content, "checksum")
        return PackageRecord(
            name=name,
            declared_type_name=type_name,
            description=self._first(content, "description"),
            homepage_url=self._first(content, "homepage"),
            source_url=url,
            version=self._first(content, "version") or version_from_url(url),
            checksum=checksum.lower() if checksum else None,
            license=self._first(content, "license"),
            dependencies=self._dependencies(content),
            relative_file_path=path.relative_to(self.config.source_dir).as_posix(),
            last_modified_timestamp=format_timestamp(
                datetime.fromtimestamp(path.stat().st_mtime).astimezone()
            ),
        )

    def _first(self, content: str, key: str) -> Optional[str]:
        pattern = self.patterns.get(key)
        if pattern is None:
            return None
        match = pattern.search(content)
        return match.group(1) if match else None

    def _dependencies(self, content: str) -> List[str]:
        pattern = self.patterns.get("dependency")
        if pattern is None:
            return []
        return list(dict.fromkeys(pattern.findall(content)))


def _iter_files(root: Path, extension: str) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in _EXCLUDED_DIRS]
        current_dir = Path(dirpath)
        for filename in filenames:
            if filename.endswith(extension):
                yield current_dir / filename


__all__ = [
    "DEFAULT_PATTERNS",
    "MetadataExtractor",
    "format_timestamp",
    "to_kebab_case",
    "version_from_url",
]
