"""Skeleton definition files for new packages."""

from __future__ import annotations

import re
from pathlib import Path

from .config import SiteConfig
from .logging import get_logger

_VALID_NAME = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

_TEMPLATE = """\
class {class_name} < Formula
  desc "Description of {name}"
  homepage "https://github.com/OWNER/{name}"
  url "https://github.com/OWNER/{name}/archive/v1.0.0.tar.gz"
  sha256 "REPLACE_WITH_ACTUAL_SHA256"
  license "MIT"

  def install
    # Installation steps here
  end

  test do
    # Test steps here
  end
end
"""


def to_class_name(name: str) -> str:
    """``example-tool`` -> ``ExampleTool``."""
    return "".join(part.capitalize() for part in name.split("-"))


def definition_path(config: SiteConfig, name: str) -> Path:
    return config.source_dir / name[0] / f"{name}{config.source_extension}"


def create_definition(config: SiteConfig, name: str) -> Path:
    """Write a skeleton definition file for ``name`` and return its path."""
    if not _VALID_NAME.match(name):
        raise ValueError(f"Invalid package name '{name}': use lowercase kebab-case")
    path = definition_path(config, name)
    if path.exists():
        raise FileExistsError(f"Definition already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_TEMPLATE.format(class_name=to_class_name(name), name=name), encoding="utf-8")
    get_logger("scaffold").info("Created definition at %s", path)
    return path


__all__ = ["create_definition", "definition_path", "to_class_name"]
