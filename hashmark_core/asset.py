"""Resolved asset value object."""

from __future__ import annotations

from dataclasses import dataclass

from .origin import Origin


@dataclass(frozen=True)
class Asset:
    """A single resolved front end asset.

    ``resolved_path`` is the absolute URL path, e.g. ``/assets/app.js`` or,
    with digests enabled, ``/assets/app-28a6b886...f2d8.js``.
    """

    resolved_path: str
    origin: Origin
    integrity: str | None
    logical_path: str
    digest_path: str | None
    content_type: str
    source: bytes

    @property
    def path(self) -> str:
        return self.resolved_path

    @property
    def subresource_integrity_value(self) -> str | None:
        return self.integrity

    @property
    def url(self) -> str:
        """Full URL: the origin joined with ``resolved_path``."""
        return self.origin.join(self.resolved_path)

    def __str__(self) -> str:
        return self.url
