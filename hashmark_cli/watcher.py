"""watchdog-based recompilation for ``hashmark watch``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from hashmark_core import AssetResolver, AssetsError

logger = logging.getLogger(__name__)

WATCHED_SUFFIXES = frozenset({".css", ".js", ".scss", ".sass", ".coffee", ".erb"})
_WATCHED_EVENTS = frozenset({"created", "modified", "deleted", "moved"})


def is_watched(path: str) -> bool:
    return Path(path).suffix in WATCHED_SUFFIXES


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, on_change: Callable[[list[str]], None]) -> None:
        super().__init__()
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _WATCHED_EVENTS:
            return
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(os.fsdecode(dest))
        changed = [path for path in paths if is_watched(path)]
        if changed:
            self._on_change(changed)


class AssetWatcher:
    def __init__(
        self,
        resolver: AssetResolver,
        watch_dirs: Iterable[Path],
        output_dir: Path,
        *,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.resolver = resolver
        self.watch_dirs = tuple(watch_dirs)
        self.output_dir = output_dir
        self._echo = echo
        self._observer = Observer()
        self._handler = _ChangeHandler(self.handle_change)

    def start(self) -> None:
        for path in self.watch_dirs:
            self._observer.schedule(self._handler, str(path), recursive=True)
        self._observer.start()

    def stop(self) -> None:
        self._observer.stop()
        self._observer.join()

    def is_alive(self) -> bool:
        return self._observer.is_alive()

    def handle_change(self, paths: list[str]) -> bool:
        """Recompile after a change; failures are reported and watching continues."""
        self._echo("changes detected:")
        for path in paths:
            self._echo(f"  {path}")
        self.resolver.reset()
        try:
            self.resolver.precompile(self.output_dir)
        except (AssetsError, OSError) as exc:
            logger.debug("recompile failed", exc_info=True)
            self._echo(f"recompile failed: {exc}")
            return False
        self._echo("assets recompiled successfully")
        return True
