from __future__ import annotations

import gzip
import hashlib
import re
from pathlib import Path

from hashmark_core import AssetsConfig, EngineFailure, FileSystemEngine, Found, NotFound
from hashmark_core.engine import digest_path_for
from hashmark_core.engine.cache import processor_identity

CSS = b"body { background-color: #f0f0f0; }\n"


def _write_assets(root: Path) -> Path:
    assets = root / "app" / "assets"
    (assets / "stylesheets").mkdir(parents=True, exist_ok=True)
    (assets / "javascripts").mkdir(parents=True, exist_ok=True)
    (assets / "images" / "icons").mkdir(parents=True, exist_ok=True)
    (assets / "stylesheets" / "app.css").write_bytes(CSS)
    (assets / "javascripts" / "app.js").write_text("console.log('hello');\n", encoding="utf-8")
    (assets / "images" / "logo.png").write_bytes(b"fake-png-data")
    (assets / "images" / "icons" / "star.svg").write_text("<svg/>", encoding="utf-8")
    (assets / "images" / ".DS_Store").write_bytes(b"junk")
    return root


def _engine(root: Path, **overrides) -> FileSystemEngine:
    return FileSystemEngine.from_config(AssetsConfig(**overrides), root)


def test_find_asset_returns_fingerprinted_asset(tmp_path: Path) -> None:
    engine = _engine(_write_assets(tmp_path))
    result = engine.find_asset("app.css")

    assert isinstance(result, Found)
    asset = result.asset
    hexdigest = hashlib.sha256(CSS).hexdigest()
    assert asset.logical_path == "app.css"
    assert asset.content_type == "text/css"
    assert asset.source == CSS
    assert asset.bytesize == len(CSS)
    assert asset.etag == hexdigest
    assert asset.digest_path == f"app-{hexdigest}.css"
    assert re.fullmatch(r"app-[a-f0-9]{64}\.css", asset.digest_path)


def test_find_asset_keeps_nested_directories(tmp_path: Path) -> None:
    engine = _engine(_write_assets(tmp_path))
    result = engine.find_asset("icons/star.svg")

    assert isinstance(result, Found)
    assert result.asset.logical_path == "icons/star.svg"
    assert re.fullmatch(r"icons/star-[a-f0-9]{64}\.svg", result.asset.digest_path)


def test_find_asset_not_found(tmp_path: Path) -> None:
    engine = _engine(_write_assets(tmp_path))
    assert engine.find_asset("missing.css") == NotFound("missing.css")


def test_find_asset_rejects_paths_outside_search_paths(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    (tmp_path / "app" / "assets" / "secret.txt").write_text("secret", encoding="utf-8")
    engine = _engine(tmp_path)

    assert isinstance(engine.find_asset("../secret.txt"), NotFound)
    assert isinstance(engine.find_asset("/etc/passwd"), NotFound)


def test_first_search_path_wins(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    vendor = tmp_path / "vendor" / "assets" / "stylesheets"
    vendor.mkdir(parents=True)
    (vendor / "app.css").write_bytes(b"vendor {}")
    result = _engine(tmp_path).find_asset("app.css")

    assert isinstance(result, Found)
    assert result.asset.source == CSS


def test_extra_search_paths_are_resolved_against_root(tmp_path: Path) -> None:
    build = tmp_path / "frontend" / "build"
    build.mkdir(parents=True)
    (build / "bundle.js").write_text("export {};\n", encoding="utf-8")
    engine = _engine(tmp_path, extra_search_paths=("frontend/build",))

    assert isinstance(engine.find_asset("bundle.js"), Found)


def test_logical_paths_lists_visible_files(tmp_path: Path) -> None:
    engine = _engine(_write_assets(tmp_path))
    assert engine.logical_paths() == ["app.css", "app.js", "icons/star.svg", "logo.png"]


def test_compile_writes_digest_file_and_gzip(tmp_path: Path) -> None:
    engine = _engine(_write_assets(tmp_path))
    target = tmp_path / "public" / "assets"
    result = engine.compile("app.css", target)

    assert isinstance(result, Found)
    written = target / result.asset.digest_path
    assert written.read_bytes() == CSS
    assert gzip.decompress((target / f"{result.asset.digest_path}.gz").read_bytes()) == CSS


def test_compile_skips_gzip_for_binary_or_when_disabled(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    target = tmp_path / "out"

    png = _engine(tmp_path).compile("logo.png", target)
    assert isinstance(png, Found)
    assert not (target / f"{png.asset.digest_path}.gz").exists()

    css = _engine(tmp_path, compress=False).compile("app.css", target)
    assert isinstance(css, Found)
    assert (target / css.asset.digest_path).exists()
    assert not (target / f"{css.asset.digest_path}.gz").exists()


def test_compile_missing_asset_writes_nothing(tmp_path: Path) -> None:
    engine = _engine(_write_assets(tmp_path))
    target = tmp_path / "out"
    assert isinstance(engine.compile("missing.css", target), NotFound)
    assert not target.exists() or not any(target.iterdir())


def test_processor_output_is_served_and_fingerprinted(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    engine = FileSystemEngine.from_config(AssetsConfig(), tmp_path, processors={"text/css": bytes.upper})
    result = engine.find_asset("app.css")

    assert isinstance(result, Found)
    assert result.asset.source == CSS.upper()
    assert result.asset.etag == hashlib.sha256(CSS.upper()).hexdigest()


def test_processor_errors_become_engine_failures(tmp_path: Path) -> None:
    _write_assets(tmp_path)

    def _broken(source: bytes) -> bytes:
        raise ValueError("unbalanced braces")

    engine = FileSystemEngine.from_config(AssetsConfig(), tmp_path, processors={"text/css": _broken})
    result = engine.find_asset("app.css")

    assert result == EngineFailure("app.css", "unbalanced braces")


def test_processed_output_is_cached_on_disk(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    calls = {"count": 0}

    def _minify(source: bytes) -> bytes:
        calls["count"] += 1
        return source.replace(b" ", b"")

    config = AssetsConfig(cache_dir=Path("tmp/cache"))
    first = FileSystemEngine.from_config(config, tmp_path, processors={"text/css": _minify})
    second = FileSystemEngine.from_config(config, tmp_path, processors={"text/css": _minify})

    one = first.find_asset("app.css")
    two = second.find_asset("app.css")

    assert isinstance(one, Found) and isinstance(two, Found)
    assert one.asset == two.asset
    assert calls["count"] == 1
    assert any((tmp_path / "tmp" / "cache" / "objects").iterdir())


def test_digest_path_for_handles_missing_extension() -> None:
    assert digest_path_for("LICENSE", "abc123") == "LICENSE-abc123"
    assert digest_path_for("vendor/app.min.js", "abc123") == "vendor/app.min-abc123.js"


def test_processed_cache_is_keyed_by_processor(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    config = AssetsConfig(cache_dir=Path("tmp/cache"))

    def _tag_v1(source: bytes) -> bytes:
        return source.strip() + b"/*v1*/"

    def _tag_v2(source: bytes) -> bytes:
        return source.strip() + b"/*v2*/"

    first = FileSystemEngine.from_config(config, tmp_path, processors={"text/css": _tag_v1})
    second = FileSystemEngine.from_config(config, tmp_path, processors={"text/css": _tag_v2})

    one = first.find_asset("app.css")
    two = second.find_asset("app.css")

    assert isinstance(one, Found) and isinstance(two, Found)
    assert one.asset.source.endswith(b"/*v1*/")
    assert two.asset.source.endswith(b"/*v2*/")
    assert one.asset.digest_path != two.asset.digest_path


def test_processor_version_attribute_changes_cache_key() -> None:
    def _minify(source: bytes) -> bytes:
        return source

    before = processor_identity(_minify)
    _minify.version = "2"  # type: ignore[attr-defined]

    assert processor_identity(_minify) != before
    assert processor_identity(_minify).startswith(f"{__name__}.")
