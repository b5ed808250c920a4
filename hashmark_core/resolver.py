"""Logical asset name to fingerprinted asset resolution."""

from __future__ import annotations

import base64
import hashlib
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable

from .asset import Asset
from .config import AssetsConfig
from .engine import CompiledAsset, CompilerEngine, EngineFailure, FileSystemEngine, NotFound
from .errors import AssetCompileError, AssetMissingError

if TYPE_CHECKING:
    from .manifest import Manifest

logger = logging.getLogger(__name__)

EngineFactory = Callable[[AssetsConfig, Path], CompilerEngine]


def compute_integrity(source: bytes, algorithms: Iterable[str]) -> str | None:
    """Return space separated ``<algorithm>-<base64 digest>`` tokens, or None."""
    tokens = [
        f"{algorithm}-{base64.b64encode(hashlib.new(algorithm, source).digest()).decode('ascii')}"
        for algorithm in algorithms
    ]
    if not tokens:
        return None
    return " ".join(tokens)


class AssetResolver:
    """Resolve logical asset paths against the current compiler engine."""

    def __init__(
        self,
        config: AssetsConfig,
        root: Path,
        *,
        engine_factory: EngineFactory = FileSystemEngine.from_config,
    ) -> None:
        self.config = config
        self.root = Path(root).resolve()
        self._engine_factory = engine_factory
        self._reset_lock = threading.Lock()
        self._engine = engine_factory(config, self.root)

    @property
    def engine(self) -> CompilerEngine:
        return self._engine

    def resolve(self, logical_path: str) -> Asset:
        result = self._engine.find_asset(logical_path)
        if isinstance(result, NotFound):
            raise AssetMissingError(logical_path)
        if isinstance(result, EngineFailure):
            raise AssetCompileError(result.name, result.detail)
        return self._build_asset(result.asset)

    __getitem__ = resolve

    def is_integrity_enabled(self) -> bool:
        return bool(self.config.integrity_algorithms)

    def is_cross_origin(self, source: str) -> bool:
        return self.config.cross_origin(source)

    def logical_paths(self) -> list[str]:
        return self._engine.logical_paths()

    def reset(self) -> None:
        """Swap in a freshly constructed engine.

        Assets already returned and requests holding the previous engine are
        unaffected.
        """
        with self._reset_lock:
            engine = self._engine_factory(self.config, self.root)
            self._engine = engine
        logger.debug("asset engine reset for root %s", self.root)

    def precompile(
        self,
        target_dir: Path | None = None,
        *,
        progress: Callable[[str], None] | None = None,
    ) -> "Manifest":
        from .manifest import precompile

        return precompile(self, target_dir or self.root / "public" / "assets", progress=progress)

    def _build_asset(self, compiled: CompiledAsset) -> Asset:
        prefix = self.config.path_prefix
        if self.config.digest_enabled:
            resolved_path = f"{prefix}/{compiled.digest_path}"
        else:
            resolved_path = f"{prefix}/{compiled.logical_path}"
        return Asset(
            resolved_path=resolved_path,
            origin=self.config.origin,
            integrity=compute_integrity(compiled.source, self.config.integrity_algorithms),
            logical_path=compiled.logical_path,
            digest_path=compiled.digest_path,
            content_type=compiled.content_type,
            source=compiled.source,
        )
