"""Asset resolution, fingerprinting and serving core for hashmark."""

from .asset import Asset
from .config import AssetsConfig, load_config
from .engine import CompiledAsset, CompilerEngine, EngineFailure, FileSystemEngine, Found, LookupResult, NotFound
from .errors import (
    AssetCompileError,
    AssetMissingError,
    AssetsConfigError,
    AssetsError,
    ManifestMissingError,
)
from .manifest import DEFAULT_ENTRYPOINTS, MANIFEST_FILENAME, Manifest, precompile, read_manifest
from .middleware import AssetsMiddleware, strip_fingerprint
from .origin import Origin
from .resolver import AssetResolver, compute_integrity

__all__ = [
    "Asset",
    "AssetCompileError",
    "AssetMissingError",
    "AssetResolver",
    "AssetsConfig",
    "AssetsConfigError",
    "AssetsError",
    "AssetsMiddleware",
    "CompiledAsset",
    "CompilerEngine",
    "DEFAULT_ENTRYPOINTS",
    "EngineFailure",
    "FileSystemEngine",
    "Found",
    "LookupResult",
    "MANIFEST_FILENAME",
    "Manifest",
    "ManifestMissingError",
    "NotFound",
    "Origin",
    "compute_integrity",
    "load_config",
    "precompile",
    "read_manifest",
    "strip_fingerprint",
]
