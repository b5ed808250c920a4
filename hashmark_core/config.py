"""Resolved asset settings and settings-file loading."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import AssetsConfigError
from .origin import Origin

logger = logging.getLogger(__name__)

INTEGRITY_ALGORITHMS = ("sha256", "sha384", "sha512")
DEFAULT_PRECOMPILE_PATTERNS = ("*.js", "*.css", "*.png", "*.jpg", "*.gif", "*.svg")
CONFIG_SECTION = "assets"

_ALIASES = {
    "subresource_integrity": "integrity_algorithms",
    "base_url": "origin",
    "asset_paths": "extra_search_paths",
    "precompile": "precompile_patterns",
    "digest": "digest_enabled",
    "cache": "cache_dir",
}


@dataclass(frozen=True)
class AssetsConfig:
    path_prefix: str = "/assets"
    integrity_algorithms: tuple[str, ...] = ()
    origin: Origin = field(default_factory=Origin)
    extra_search_paths: tuple[str, ...] = ()
    precompile_patterns: tuple[str, ...] = DEFAULT_PRECOMPILE_PATTERNS
    digest_enabled: bool = True
    compress: bool = True
    cache_dir: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path_prefix", _to_prefix(self.path_prefix))
        object.__setattr__(self, "origin", _to_origin(self.origin))
        object.__setattr__(self, "extra_search_paths", _to_str_tuple(self.extra_search_paths))
        object.__setattr__(self, "precompile_patterns", _to_str_tuple(self.precompile_patterns))
        ordered: list[str] = []
        for name in _to_str_tuple(self.integrity_algorithms):
            algorithm = str(name).strip().lower()
            if algorithm not in INTEGRITY_ALGORITHMS:
                raise AssetsConfigError(
                    f"unsupported integrity algorithm {name!r}; expected one of: {', '.join(INTEGRITY_ALGORITHMS)}"
                )
            if algorithm not in ordered:
                ordered.append(algorithm)
        object.__setattr__(self, "integrity_algorithms", tuple(ordered))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AssetsConfig":
        """Build a config from plain settings, ignoring keys it does not know.

        The setting names of the older Ruby-style configuration
        (``subresource_integrity``, ``base_url``, ``asset_paths``,
        ``precompile``, ``digest``, ``cache``) are accepted as aliases.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise AssetsConfigError("expected mapping for assets configuration")

        values: dict[str, Any] = {}
        for raw_key, raw_value in data.items():
            key = _ALIASES.get(str(raw_key), str(raw_key))
            if key not in _FIELD_PARSERS:
                logger.debug("ignoring unknown assets setting %s", raw_key)
                continue
            values[key] = _FIELD_PARSERS[key](_resolve_env_value(raw_value))
        return cls(**values)

    def cross_origin(self, source: str) -> bool:
        return self.origin.cross_origin(source)


def load_config(path: Path) -> AssetsConfig:
    """Read ``[assets]`` settings from a TOML or YAML file.

    A missing file yields the defaults.
    """
    if not path.exists():
        logger.debug("assets config %s not found, using defaults", path)
        return AssetsConfig()
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in {".yml", ".yaml"}:
            payload = yaml.safe_load(text) or {}
        else:
            payload = tomllib.loads(text)
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise AssetsConfigError(f"unable to read assets config {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise AssetsConfigError(f"assets config {path} must contain a mapping")
    section = payload.get(CONFIG_SECTION, payload)
    return AssetsConfig.from_mapping(section)


def _resolve_env_value(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_name = value[2:-1].strip()
        if env_name:
            return os.getenv(env_name, "")
    return value


def _to_str_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(_resolve_env_value(item)).strip() for item in value]
    else:
        raise AssetsConfigError(f"expected a list of strings, got {type(value).__name__}")
    return tuple(item for item in items if item)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off", ""}:
            return False
        raise AssetsConfigError(f"invalid boolean value: {value!r}")
    return bool(value)


def _to_origin(value: Any) -> Origin:
    if isinstance(value, Origin):
        return value
    return Origin("" if value is None else str(value).strip())


def _to_prefix(value: Any) -> str:
    prefix = str(value or "").strip().strip("/")
    if not prefix:
        raise AssetsConfigError(f"path_prefix must name a directory, got {value!r}")
    return "/" + prefix


def _to_optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


_FIELD_PARSERS = {
    "path_prefix": _to_prefix,
    "integrity_algorithms": _to_str_tuple,
    "origin": _to_origin,
    "extra_search_paths": _to_str_tuple,
    "precompile_patterns": _to_str_tuple,
    "digest_enabled": _to_bool,
    "compress": _to_bool,
    "cache_dir": _to_optional_path,
}
