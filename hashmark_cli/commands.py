"""compile and watch commands."""

from __future__ import annotations

import dataclasses
import logging
import time
from argparse import ArgumentParser
from pathlib import Path
from typing import Any

from hashmark_core import AssetResolver, AssetsConfig, AssetsError, load_config

logger = logging.getLogger(__name__)

WATCH_ROOTS = ("app/assets", "lib/assets", "vendor/assets")


class _RootAwareCommand:
    name = ""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("-r", "--root", help="Application root directory")
        parser.add_argument("-o", "--output", help="Output directory for compiled assets")
        parser.add_argument("-c", "--config", help="Assets config file (default: <root>/config/config.toml)")

    def __init__(self, start_dir: Path | None = None) -> None:
        self.start_dir = (start_dir or Path.cwd()).resolve()

    def _root(self, argv: Any) -> Path:
        raw = str(getattr(argv, "root", "") or "").strip()
        if not raw:
            return self.start_dir
        root = Path(raw).expanduser()
        return (root if root.is_absolute() else self.start_dir / root).resolve()

    def _output_dir(self, argv: Any, root: Path) -> Path:
        raw = str(getattr(argv, "output", "") or "").strip()
        if not raw:
            return root / "public" / "assets"
        output = Path(raw).expanduser()
        return output if output.is_absolute() else self.start_dir / output

    def _config(self, argv: Any, root: Path) -> AssetsConfig:
        raw = str(getattr(argv, "config", "") or "").strip()
        path = Path(raw).expanduser() if raw else root / "config" / "config.toml"
        if not path.is_absolute():
            path = self.start_dir / path
        return dataclasses.replace(load_config(path), digest_enabled=True)

    def _echo(self, message: str) -> None:
        print(f"[hashmark:{self.name}] {message}")


class CompileCommand(_RootAwareCommand):
    """Compile assets for production and write manifest.json."""

    name = "compile"

    def run(self, argv: Any) -> int:
        root = self._root(argv)
        output_dir = self._output_dir(argv, root)
        self._echo("compiling assets...")
        try:
            resolver = AssetResolver(self._config(argv, root), root)
            manifest = resolver.precompile(output_dir)
        except (AssetsError, OSError) as exc:
            self._echo(f"failed: {exc}")
            return 1
        except Exception as exc:  # pragma: no cover - unexpected engine failure
            logger.debug("unexpected error while compiling assets", exc_info=True)
            self._echo(f"unexpected failure: {exc}")
            return 1

        self._echo("assets compiled successfully:")
        for logical_path, digest_path in manifest.assets.items():
            print(f"  {logical_path} -> {digest_path}")
        self._echo(f"output={output_dir}")
        return 0


class WatchCommand(_RootAwareCommand):
    """Recompile assets whenever a source file changes."""

    name = "watch"

    def run(self, argv: Any) -> int:
        try:
            from .watcher import AssetWatcher
        except ImportError:
            self._echo("watch mode requires the 'watchdog' package; install it with: pip install 'hashmark[watch]'")
            return 1

        root = self._root(argv)
        watch_dirs = [root / rel for rel in WATCH_ROOTS if (root / rel).is_dir()]
        if not watch_dirs:
            self._echo("no asset directories found. Looking for:")
            for rel in WATCH_ROOTS:
                print(f"  {root / rel}")
            return 1

        try:
            resolver = AssetResolver(self._config(argv, root), root)
        except AssetsError as exc:
            self._echo(f"failed: {exc}")
            return 1

        watcher = AssetWatcher(resolver, watch_dirs, self._output_dir(argv, root), echo=self._echo)
        self._echo("watching directories (Ctrl+C to stop):")
        for path in watch_dirs:
            print(f"  {path}")
        watcher.start()
        try:
            while watcher.is_alive():
                time.sleep(1.0)
        except KeyboardInterrupt:
            pass
        finally:
            watcher.stop()
        return 0
