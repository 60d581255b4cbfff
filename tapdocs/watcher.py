"""Polling change watcher that rebuilds the site for the preview server."""

from __future__ import annotations

import enum
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .config import SiteConfig
from .logging import get_logger


class WatchPhase(enum.Enum):
    IDLE = "idle"
    CHANGE_DETECTED = "change-detected"
    DEBOUNCING = "debouncing"
    REBUILDING = "rebuilding"


@dataclass
class WatchState:
    """Process-lifetime watcher state."""

    last_mtime_ns: int = 0
    rebuild_pending: bool = False
    phase: WatchPhase = WatchPhase.IDLE
    rebuilds: int = 0
    failures: int = 0


class ChangeWatcher:
    """Polls watched files and triggers a debounced, serialized rebuild.

    Transitions per tick: ``IDLE -> CHANGE_DETECTED`` when the newest
    modification time strictly exceeds the recorded baseline and no rebuild is
    pending, then ``DEBOUNCING`` for a fixed wait, then ``REBUILDING`` while the
    rebuild callback runs on the watcher thread, then back to ``IDLE`` with the
    baseline set to the newest time observed after debouncing.
    """

    def __init__(
        self,
        config: SiteConfig,
        rebuild: Callable[[], object],
        *,
        poll_interval: float | None = None,
        debounce: float | None = None,
        error_backoff: float | None = None,
    ) -> None:
        self.config = config
        self.rebuild = rebuild
        self.poll_interval = config.watch.poll_interval if poll_interval is None else poll_interval
        self.debounce = config.watch.debounce if debounce is None else debounce
        self.error_backoff = config.watch.error_backoff if error_backoff is None else error_backoff
        self.state = WatchState()
        self.logger = get_logger("watcher")
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Watched file set

    def watched_files(self) -> List[Path]:
        """Return every regular file whose change should trigger a rebuild."""
        config = self.config
        candidates: List[Path] = []
        candidates.extend(
            path for path in _walk(config.source_dir) if path.name.endswith(config.source_extension)
        )
        if config.theme_dir is not None:
            candidates.extend(_walk(Path(config.theme_dir)))
        candidates.extend(config.root / name for name in config.watch.extra_files)
        unique = {path for path in candidates if path.is_file()}
        return sorted(unique)

    def max_mtime_ns(self) -> int:
        newest = 0
        for path in self.watched_files():
            mtime = _mtime_ns(path)
            if mtime is not None and mtime > newest:
                newest = mtime
        return newest

    def find_changed_file(self, since_ns: int) -> Optional[Path]:
        for path in self.watched_files():
            mtime = _mtime_ns(path)
            if mtime is not None and mtime > since_ns:
                return path
        return None

    # ------------------------------------------------------------------
    # State machine

    def prime(self) -> None:
        """Record the current newest modification time as the baseline."""
        self.state.last_mtime_ns = self.max_mtime_ns()

    def should_rebuild(self, current_ns: int) -> bool:
        return current_ns > self.state.last_mtime_ns and not self.state.rebuild_pending

    def poll(self) -> bool:
        """Run one tick; return True when a rebuild completed successfully."""
        state = self.state
        if not self.should_rebuild(self.max_mtime_ns()):
            return False

        state.rebuild_pending = True
        state.phase = WatchPhase.CHANGE_DETECTED
        changed = self.find_changed_file(state.last_mtime_ns)
        if changed is not None:
            self.logger.info("Changed: %s", _relative(changed, self.config.root))
        self.logger.info("Rebuilding in %.1f seconds...", self.debounce)

        state.phase = WatchPhase.DEBOUNCING
        if self._stop.wait(self.debounce):
            self._settle(state.last_mtime_ns)
            return False
        final_ns = self.max_mtime_ns()

        state.phase = WatchPhase.REBUILDING
        try:
            self.rebuild()
        except Exception as exc:
            state.failures += 1
            self.logger.warning("Rebuild failed: %s", exc)
            self.logger.debug("Rebuild failure details", exc_info=True)
            self._settle(final_ns)
            self._stop.wait(self.error_backoff)
            self.logger.info("Watcher continuing...")
            return False

        state.rebuilds += 1
        self._settle(final_ns)
        self.logger.info("Rebuild complete")
        return True

    def _settle(self, baseline_ns: int) -> None:
        self.state.last_mtime_ns = baseline_ns
        self.state.rebuild_pending = False
        self.state.phase = WatchPhase.IDLE

    # ------------------------------------------------------------------
    # Thread lifecycle

    def run(self) -> None:
        """Poll until :meth:`stop` is called."""
        self.prime()
        self.logger.info("Watching %d files for changes...", len(self.watched_files()))
        while not self._stop.wait(self.poll_interval):
            try:
                self.poll()
            except Exception as exc:
                self.logger.warning("File watcher error: %s", exc)
                self.logger.debug("File watcher failure details", exc_info=True)
                self._settle(self.state.last_mtime_ns)
                self._stop.wait(self.error_backoff)

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        thread = threading.Thread(target=self.run, name="tapdocs-watcher", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


def _walk(root: Path) -> Iterable[Path]:
    if not root.is_dir():
        return []
    paths: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        paths.extend(current / filename for filename in filenames)
    return paths


def _mtime_ns(path: Path) -> Optional[int]:
    try:
        stat_result = path.stat()
    except OSError:
        return None
    return stat_result.st_mtime_ns


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


__all__ = ["ChangeWatcher", "WatchPhase", "WatchState"]
