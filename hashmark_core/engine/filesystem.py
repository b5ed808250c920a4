"""Filesystem-backed compiler engine.

Looks assets up in a list of search paths under the application root and
passes their bytes through, optionally via per-content-type processors.
"""

from __future__ import annotations

import gzip
import hashlib
import logging
import mimetypes
from pathlib import Path, PurePosixPath
from typing import Callable, Mapping

from ..config import AssetsConfig
from ..fsutil import write_bytes_atomic
from .cache import ProcessedCache, processed_cache_key, processor_identity
from .types import CompiledAsset, EngineFailure, Found, LookupResult, NotFound

logger = logging.getLogger(__name__)

Processor = Callable[[bytes], bytes]

DEFAULT_SEARCH_PATHS = (
    "app/assets/stylesheets",
    "app/assets/javascripts",
    "app/assets/images",
    "app/assets/fonts",
    "lib/assets/stylesheets",
    "lib/assets/javascripts",
    "lib/assets/images",
    "vendor/assets/stylesheets",
    "vendor/assets/javascripts",
    "vendor/assets/images",
)
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_COMPRESSIBLE_TYPES = frozenset(
    {
        "application/javascript",
        "application/json",
        "application/xml",
        "image/svg+xml",
    }
)


def digest_path_for(logical_path: str, hexdigest: str) -> str:
    path = PurePosixPath(logical_path)
    if path.suffix:
        name = f"{path.name[: -len(path.suffix)]}-{hexdigest}{path.suffix}"
    else:
        name = f"{path.name}-{hexdigest}"
    return str(path.with_name(name))


def content_type_for(logical_path: str) -> str:
    guessed, _ = mimetypes.guess_type(logical_path, strict=False)
    return guessed or DEFAULT_CONTENT_TYPE


def is_compressible(content_type: str) -> bool:
    return content_type.startswith("text/") or content_type in _COMPRESSIBLE_TYPES


class FileSystemEngine:
    def __init__(
        self,
        root: Path,
        search_paths: tuple[Path, ...],
        *,
        compress: bool = True,
        cache_dir: Path | None = None,
        processors: Mapping[str, Processor] | None = None,
    ) -> None:
        self.root = root.resolve()
        self.search_paths = tuple(path.resolve() for path in search_paths)
        self.compress = compress
        self.processors = dict(processors or {})
        self.cache = ProcessedCache(cache_dir) if cache_dir is not None else None

    @classmethod
    def from_config(
        cls,
        config: AssetsConfig,
        root: Path,
        *,
        processors: Mapping[str, Processor] | None = None,
    ) -> "FileSystemEngine":
        root = root.resolve()
        paths = [root / rel for rel in DEFAULT_SEARCH_PATHS if (root / rel).is_dir()]
        for extra in config.extra_search_paths:
            candidate = Path(extra).expanduser()
            paths.append(candidate if candidate.is_absolute() else root / candidate)
        cache_dir = config.cache_dir
        if cache_dir is not None and not cache_dir.is_absolute():
            cache_dir = root / cache_dir
        return cls(
            root,
            tuple(paths),
            compress=config.compress,
            cache_dir=cache_dir,
            processors=processors,
        )

    def find_asset(self, name: str) -> LookupResult:
        logical_path = _normalize_name(name)
        if logical_path is None:
            return NotFound(name)
        source_path = self._locate(logical_path)
        if source_path is None:
            return NotFound(name)
        try:
            raw = source_path.read_bytes()
        except OSError as exc:
            return EngineFailure(name, f"unable to read {source_path}: {exc}")

        content_type = content_type_for(logical_path)
        try:
            body = self._process(content_type, raw)
        except Exception as exc:
            logger.debug("processor failed for %s", logical_path, exc_info=True)
            return EngineFailure(name, str(exc) or type(exc).__name__)

        hexdigest = hashlib.sha256(body).hexdigest()
        return Found(
            CompiledAsset(
                logical_path=logical_path,
                digest_path=digest_path_for(logical_path, hexdigest),
                content_type=content_type,
                source=body,
                etag=hexdigest,
            )
        )

    def compile(self, name: str, target_dir: Path) -> LookupResult:
        result = self.find_asset(name)
        if not isinstance(result, Found):
            return result
        asset = result.asset
        target = target_dir / asset.digest_path
        try:
            write_bytes_atomic(target, asset.source)
            if self.compress and is_compressible(asset.content_type):
                write_bytes_atomic(target.with_name(target.name + ".gz"), gzip.compress(asset.source, mtime=0))
        except OSError as exc:
            return EngineFailure(name, f"unable to write {target}: {exc}")
        logger.debug("compiled %s -> %s", asset.logical_path, target)
        return result

    def logical_paths(self) -> list[str]:
        found: set[str] = set()
        for base in self.search_paths:
            if not base.is_dir():
                continue
            for path in base.rglob("*"):
                if not path.is_file():
                    continue
                rel = path.relative_to(base)
                if any(part.startswith(".") for part in rel.parts):
                    continue
                found.add(rel.as_posix())
        return sorted(found)

    def _locate(self, logical_path: str) -> Path | None:
        for base in self.search_paths:
            candidate = (base / logical_path).resolve()
            if base not in candidate.parents:
                continue
            if candidate.is_file():
                return candidate
        return None

    def _process(self, content_type: str, raw: bytes) -> bytes:
        processor = self.processors.get(content_type)
        if processor is None:
            return raw
        if self.cache is None:
            return processor(raw)
        key = processed_cache_key(content_type, raw, processor_identity(processor))
        cached = self.cache.read(key)
        if cached is not None:
            return cached
        body = processor(raw)
        self.cache.write(key, body)
        return body


def _normalize_name(name: str) -> str | None:
    value = name.strip().replace("\\", "/")
    if not value or value.startswith("/"):
        return None
    path = PurePosixPath(value)
    if any(part in ("", ".", "..") for part in path.parts):
        return None
    return path.as_posix()
