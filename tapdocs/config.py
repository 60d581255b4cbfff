"""Configuration loading for tapdocs (.tapdocs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".tapdocs.yml"

PACKAGED_THEME_DIR = Path(__file__).with_name("theme")

DEFAULT_TEMPLATES: Dict[str, str] = {
    "index": "index.html.j2",
    "listing": "packages.html.j2",
    "item": "package.html.j2",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ServerConfig:
    """Preview server binding."""

    host: str = "localhost"
    port: int = 4000


@dataclass
class WatchConfig:
    """Polling and debounce settings for the change watcher."""

    poll_interval: float = 1.0
    debounce: float = 1.0
    error_backoff: float = 2.0
    extra_files: List[str] = field(
        default_factory=lambda: ["Makefile", CONFIG_FILENAME, "pyproject.toml"]
    )


@dataclass
class SiteConfig:
    """Resolved project layout shared by every build stage."""

    root: Path
    source_name: str = ""
    source_dir: Path = Path("Formula")
    source_extension: str = ".rb"
    theme_dir: Optional[Path] = None
    output_dir: Path = Path("docs")
    data_file: Path = Path("docs/_data/packages.json")
    templates: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TEMPLATES))
    listing_page: str = "packages.html"
    item_dir: str = "packages"
    server: ServerConfig = field(default_factory=ServerConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    def __post_init__(self) -> None:
        self.root = Path(self.root).expanduser().resolve()
        if not self.source_name:
            self.source_name = self.root.name or "tap"
        self.source_dir = self._anchor(self.source_dir)
        self.output_dir = self._anchor(self.output_dir)
        self.data_file = self._anchor(self.data_file)
        if self.theme_dir is None:
            local_theme = self.root / "theme"
            self.theme_dir = local_theme if local_theme.is_dir() else PACKAGED_THEME_DIR
        else:
            self.theme_dir = self._anchor(self.theme_dir)

    @property
    def item_output_dir(self) -> Path:
        return self.output_dir / self.item_dir

    def _anchor(self, path: Path) -> Path:
        path = Path(path).expanduser()
        return path if path.is_absolute() else self.root / path


def load_config(config_path: Path) -> SiteConfig:
    """Load configuration from a project root or an explicit config file."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SiteConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults = SiteConfig(root=root)

    server_data = _as_dict(data.get("server"))
    server = ServerConfig(
        host=_as_str(server_data.get("host")) or defaults.server.host,
        port=_as_int(server_data.get("port")) or defaults.server.port,
    )

    watch_data = _as_dict(data.get("watch"))
    watch = WatchConfig()
    if watch_data:
        watch.poll_interval = _positive(_as_float(watch_data.get("poll_interval")), watch.poll_interval)
        watch.debounce = _positive(_as_float(watch_data.get("debounce")), watch.debounce)
        watch.error_backoff = _positive(_as_float(watch_data.get("error_backoff")), watch.error_backoff)
        if "extra_files" in watch_data:
            watch.extra_files = _as_str_list(watch_data.get("extra_files"))

    templates = dict(DEFAULT_TEMPLATES)
    for key, value in _as_dict(data.get("templates")).items():
        name = _as_str(value)
        if key in templates and name:
            templates[key] = name

    theme_dir_str = _as_str(data.get("theme_dir"))

    return SiteConfig(
        root=root,
        source_name=_as_str(data.get("source_name")) or "",
        source_dir=Path(_as_str(data.get("source_dir")) or defaults.source_dir),
        source_extension=_normalise_extension(_as_str(data.get("source_extension")))
        or defaults.source_extension,
        theme_dir=Path(theme_dir_str) if theme_dir_str else None,
        output_dir=Path(_as_str(data.get("output_dir")) or "docs"),
        data_file=_resolve_data_file(data),
        templates=templates,
        listing_page=_as_str(data.get("listing_page")) or defaults.listing_page,
        item_dir=_as_str(data.get("item_dir")) or defaults.item_dir,
        server=server,
        watch=watch,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return config_path / CONFIG_FILENAME
    return config_path


def _resolve_data_file(data: Dict[str, Any]) -> Path:
    explicit = _as_str(data.get("data_file"))
    if explicit:
        return Path(explicit)
    output_dir = _as_str(data.get("output_dir")) or "docs"
    return Path(output_dir) / "_data" / "packages.json"


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalise_extension(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value if value.startswith(".") else f".{value}"


def _positive(value: Optional[float], default: float) -> float:
    if value is None or value <= 0:
        return default
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_TEMPLATES",
    "PACKAGED_THEME_DIR",
    "ServerConfig",
    "SiteConfig",
    "WatchConfig",
    "load_config",
]
