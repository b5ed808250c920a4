"""Compiler engine interface and the filesystem implementation."""

from .cache import ProcessedCache
from .filesystem import DEFAULT_SEARCH_PATHS, FileSystemEngine, content_type_for, digest_path_for
from .types import CompiledAsset, CompilerEngine, EngineFailure, Found, LookupResult, NotFound

__all__ = [
    "CompiledAsset",
    "CompilerEngine",
    "DEFAULT_SEARCH_PATHS",
    "EngineFailure",
    "FileSystemEngine",
    "Found",
    "LookupResult",
    "NotFound",
    "ProcessedCache",
    "content_type_for",
    "digest_path_for",
]
