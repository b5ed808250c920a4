"""Error types raised by the asset core."""

from __future__ import annotations


class AssetsError(Exception):
    """Base error for hashmark."""


class AssetMissingError(AssetsError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Missing asset: {path}")
        self.path = path


class ManifestMissingError(AssetsError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Missing manifest: {path}")
        self.path = path


class AssetCompileError(AssetsError):
    """The engine located an asset but failed to produce it."""

    def __init__(self, name: str, detail: str) -> None:
        super().__init__(f"Asset compile failed: {name}: {detail}")
        self.name = name
        self.detail = detail


class AssetsConfigError(AssetsError, ValueError):
    pass
