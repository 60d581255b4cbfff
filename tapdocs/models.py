"""Core data models shared across tapdocs components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Names become file names under the item directory.
_SAFE_NAME = re.compile(r"^[\w@+-][\w.@+-]*$")


def is_safe_name(name: object) -> bool:
    return isinstance(name, str) and bool(_SAFE_NAME.match(name)) and ".." not in name


@dataclass
class PackageRecord:
    """Normalized metadata extracted from one definition file."""

    name: str
    declared_type_name: str
    description: Optional[str] = None
    homepage_url: Optional[str] = None
    source_url: Optional[str] = None
    version: Optional[str] = None
    checksum: Optional[str] = None
    license: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)
    relative_file_path: str = ""
    last_modified_timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "declaredTypeName": self.declared_type_name,
            "description": self.description,
            "homepageUrl": self.homepage_url,
            "sourceUrl": self.source_url,
            "version": self.version,
            "checksum": self.checksum,
            "license": self.license,
            "dependencies": list(self.dependencies),
            "relativeFilePath": self.relative_file_path,
            "lastModifiedTimestamp": self.last_modified_timestamp,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> Optional["PackageRecord"]:
        name = payload.get("name")
        declared = payload.get("declaredTypeName")
        if not is_safe_name(name) or not isinstance(declared, str):
            return None
        dependencies = payload.get("dependencies")
        return cls(
            name=name,
            declared_type_name=declared,
            description=_opt_str(payload.get("description")),
            homepage_url=_opt_str(payload.get("homepageUrl")),
            source_url=_opt_str(payload.get("sourceUrl")),
            version=_opt_str(payload.get("version")),
            checksum=_opt_str(payload.get("checksum")),
            license=_opt_str(payload.get("license")),
            dependencies=[str(dep) for dep in dependencies] if isinstance(dependencies, list) else [],
            relative_file_path=_opt_str(payload.get("relativeFilePath")) or "",
            last_modified_timestamp=_opt_str(payload.get("lastModifiedTimestamp")),
        )


@dataclass
class RecordSet:
    """Full ordered collection of records plus generation metadata."""

    source_name: str
    generated_at: str
    records: List[PackageRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceName": self.source_name,
            "generatedAt": self.generated_at,
            "count": self.count,
            "records": [record.to_dict() for record in self.records],
        }


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None
