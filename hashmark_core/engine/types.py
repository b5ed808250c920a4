"""Compiler engine datatypes and interface."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Union


@dataclass(frozen=True)
class CompiledAsset:
    logical_path: str
    digest_path: str
    content_type: str
    source: bytes
    etag: str

    @property
    def bytesize(self) -> int:
        return len(self.source)


@dataclass(frozen=True)
class Found:
    asset: CompiledAsset


@dataclass(frozen=True)
class NotFound:
    name: str


@dataclass(frozen=True)
class EngineFailure:
    name: str
    detail: str


LookupResult = Union[Found, NotFound, EngineFailure]


class CompilerEngine(Protocol):
    def find_asset(self, name: str) -> LookupResult: ...

    def compile(self, name: str, target_dir: Path) -> LookupResult: ...

    def logical_paths(self) -> list[str]: ...
