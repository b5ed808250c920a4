"""Root origin used to build absolute asset URLs."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class Origin:
    url: str = ""

    def join(self, path: str) -> str:
        if not self.url:
            return path
        return f"{self.url.rstrip('/')}/{path.lstrip('/')}"

    def cross_origin(self, source: str) -> bool:
        """Return True when ``source`` differs from the root in scheme, host or port.

        Unparsable input is treated as same-origin, so integrity and
        crossorigin attributes are omitted rather than raising.
        """
        if not self.url:
            return False
        try:
            base = _origin_tuple(self.url)
            other = _origin_tuple(source)
        except ValueError:
            return False
        return base != other

    def __str__(self) -> str:
        return self.url


def _origin_tuple(url: str) -> tuple[str, str | None, int | None]:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    port = parts.port
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return scheme, parts.hostname, port
