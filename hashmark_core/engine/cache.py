from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from types import CodeType
from typing import Any, Callable

from ..fsutil import write_bytes_atomic

logger = logging.getLogger(__name__)


def _safe_cache_key(raw: str) -> str:
    return "".join(ch if ch.isalnum() or ch in ("-", "_", ".") else "_" for ch in raw)


def processor_identity(processor: Callable[[bytes], bytes]) -> str:
    """Name a processor and fingerprint its code so edited processors miss the cache.

    A ``version`` attribute on the processor, when present, is part of the identity.
    """
    target = getattr(processor, "__func__", processor)
    name = f"{getattr(target, '__module__', '')}.{getattr(target, '__qualname__', type(target).__qualname__)}"
    version = getattr(processor, "version", None)
    if version is not None:
        name = f"{name}@{version}"
    digest = hashlib.sha256()
    code = getattr(target, "__code__", None)
    if code is not None:
        _update_with_code(digest, code)
    return f"{name}:{digest.hexdigest()[:16]}"


def _update_with_code(digest: Any, code: CodeType) -> None:
    digest.update(code.co_code)
    for const in code.co_consts:
        if isinstance(const, CodeType):
            _update_with_code(digest, const)
        else:
            digest.update(repr(const).encode("utf-8"))


def processed_cache_key(content_type: str, source: bytes, processor: str = "") -> str:
    return f"{content_type}:{processor}:sha256:{hashlib.sha256(source).hexdigest()}"


class ProcessedCache:
    """On-disk store of processor output keyed by content type, processor and source digest."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        self.objects = self.root / "objects"
        self.objects.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.objects / _safe_cache_key(key)

    def read(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError:
            logger.debug("unreadable cache object %s", path, exc_info=True)
            return None

    def write(self, key: str, payload: bytes) -> None:
        write_bytes_atomic(self.path_for(key), payload)
