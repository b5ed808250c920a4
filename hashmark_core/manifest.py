"""Build-time precompilation and the manifest.json it produces."""

from __future__ import annotations

import fnmatch
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from .engine import EngineFailure, NotFound
from .errors import AssetCompileError, ManifestMissingError
from .fsutil import write_bytes_atomic

if TYPE_CHECKING:
    from .resolver import AssetResolver

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"
DEFAULT_ENTRYPOINTS = ("app.css", "app.js")

_GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True)
class Manifest:
    path: Path
    assets: dict[str, str] = field(default_factory=dict)
    attempted: tuple[str, ...] = ()

    def digest_path(self, logical_path: str) -> str | None:
        return self.assets.get(logical_path)

    def to_json(self) -> str:
        return json.dumps(self.assets, ensure_ascii=False, indent=2)


def manifest_path_for(target_dir: Path) -> Path:
    return target_dir / MANIFEST_FILENAME


def precompile(
    resolver: "AssetResolver",
    target_dir: Path,
    *,
    entrypoints: Sequence[str] = DEFAULT_ENTRYPOINTS,
    patterns: Sequence[str] | None = None,
    progress: Callable[[str], None] | None = None,
) -> Manifest:
    """Compile entrypoints and pattern matches into ``target_dir``.

    Names the engine cannot find are left out of the manifest. Any other
    engine failure raises ``AssetCompileError`` and aborts the run before
    the manifest is written.
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    engine = resolver.engine
    if patterns is None:
        patterns = resolver.config.precompile_patterns

    assets: dict[str, str] = {}
    attempted: list[str] = []
    for name in _expand_entries(entrypoints, patterns, engine.logical_paths):
        attempted.append(name)
        result = engine.compile(name, target_dir)
        if isinstance(result, NotFound):
            logger.debug("skipping %s: not found", name)
            continue
        if isinstance(result, EngineFailure):
            raise AssetCompileError(result.name, result.detail)
        assets[result.asset.logical_path] = result.asset.digest_path
        if progress is not None:
            progress(name)

    manifest = Manifest(path=manifest_path_for(target_dir), assets=assets, attempted=tuple(attempted))
    write_bytes_atomic(manifest.path, (manifest.to_json() + "\n").encode("utf-8"))
    logger.info("precompiled %s of %s assets into %s", len(assets), len(attempted), target_dir)
    return manifest


def read_manifest(target_dir: Path) -> Manifest:
    path = manifest_path_for(Path(target_dir))
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ManifestMissingError(str(path)) from exc
    except (OSError, json.JSONDecodeError) as exc:
        logger.debug("unreadable manifest %s", path, exc_info=True)
        raise ManifestMissingError(str(path)) from exc
    if not isinstance(payload, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in payload.items()
    ):
        raise ManifestMissingError(str(path))
    # the attempted entries are not recorded on disk
    return Manifest(path=path, assets=dict(payload), attempted=())


def _expand_entries(
    entrypoints: Iterable[str],
    patterns: Iterable[str],
    list_logical_paths: Callable[[], list[str]],
) -> list[str]:
    entries: list[str] = []
    seen: set[str] = set()
    known: list[str] | None = None

    def _add(name: str) -> None:
        if name not in seen:
            seen.add(name)
            entries.append(name)

    for name in entrypoints:
        _add(name)
    for pattern in patterns:
        if not _GLOB_CHARS.intersection(pattern):
            _add(pattern)
            continue
        if known is None:
            known = list_logical_paths()
        for logical_path in known:
            if fnmatch.fnmatchcase(logical_path, pattern):
                _add(logical_path)
    return entries
