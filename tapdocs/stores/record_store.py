"""Persistence for the record-set document handed from extraction to rendering."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from ..logging import get_logger
from ..models import PackageRecord, RecordSet


class RecordStoreError(RuntimeError):
    """Raised when the record-set document exists but cannot be used."""


class RecordStore:
    """Reads and writes the pretty-printed record-set document."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.logger = get_logger("stores.records")

    def write(self, record_set: RecordSet) -> Path:
        """Write the document, creating the parent directory first."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(record_set.to_dict(), indent=2, ensure_ascii=False)
        self.path.write_text(payload + "\n", encoding="utf-8")
        self.logger.debug("Wrote %d records to %s", record_set.count, self.path)
        return self.path

    def load(self) -> Optional[RecordSet]:
        """Return the stored record set, or None when no document exists."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise RecordStoreError(f"Failed to read {self.path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RecordStoreError(f"{self.path} is not valid JSON: {exc}") from exc
        return _record_set_from_dict(data, self.path)


def _record_set_from_dict(data: Any, path: Path) -> RecordSet:
    if not isinstance(data, dict):
        raise RecordStoreError(f"{path} must contain an object at the root")
    raw_records = data.get("records")
    if not isinstance(raw_records, list):
        raise RecordStoreError(f"{path} is missing the 'records' array")

    records: List[PackageRecord] = []
    for raw in raw_records:
        if not isinstance(raw, dict):
            continue
        record = PackageRecord.from_dict(raw)
        if record is not None:
            records.append(record)

    source_name = data.get("sourceName")
    generated_at = data.get("generatedAt")
    return RecordSet(
        source_name=source_name if isinstance(source_name, str) else "",
        generated_at=generated_at if isinstance(generated_at, str) else "",
        records=records,
    )


__all__ = ["RecordStore", "RecordStoreError"]
