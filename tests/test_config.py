import pytest

from canvas_cutout.config import (
    ProcessingConfig,
    default_canvas_targets,
    parse_canvas_sizes,
    parse_extensions,
    parse_formats,
    parse_mode,
    parse_tolerance,
    single_canvas_target,
)
from canvas_cutout.errors import GeometryError
from canvas_cutout.models.canvas_target import CanvasTarget, ColorTolerance


def test_parse_tolerance():
    assert parse_tolerance("12") == ColorTolerance(12, 12, 12)
    assert parse_tolerance("10, 5 ,20") == ColorTolerance(10, 5, 20)


@pytest.mark.parametrize("raw", ["", "1,2", "a,b,c", "300", "-1"])
def test_parse_tolerance_rejects(raw):
    with pytest.raises(ValueError):
        parse_tolerance(raw)


def test_parse_formats():
    assert parse_formats("PNG,.webp") == ("png", "webp")
    with pytest.raises(ValueError):
        parse_formats("png,gif")
    with pytest.raises(ValueError):
        parse_formats("")


def test_parse_extensions():
    assert parse_extensions("jpg,.PNG") == (".jpg", ".png")


def test_parse_mode():
    assert parse_mode("666") == 0o666
    assert parse_mode("0o777") == 0o777
    assert parse_mode("") is None
    assert parse_mode(None) is None
    with pytest.raises(ValueError):
        parse_mode("999")


def test_default_targets(monkeypatch):
    monkeypatch.delenv("CANVAS_SIZES", raising=False)
    assert default_canvas_targets() == (
        CanvasTarget(120, 120, "xs"),
        CanvasTarget(300, 300, "sm"),
        CanvasTarget(600, 600, "md"),
        CanvasTarget(800, 800, "lg"),
    )


def test_targets_from_env(monkeypatch):
    monkeypatch.setenv("CANVAS_SIZES", "64x32:thumb, 1024X768:hero")
    assert default_canvas_targets() == (CanvasTarget(64, 32, "thumb"), CanvasTarget(1024, 768, "hero"))


@pytest.mark.parametrize("raw", ["100x100", "100:xs", "100x100:xs,200x200:xs", ""])
def test_parse_canvas_sizes_rejects(raw):
    with pytest.raises(ValueError):
        parse_canvas_sizes(raw)


def test_zero_canvas_is_a_geometry_error():
    with pytest.raises(GeometryError):
        parse_canvas_sizes("0x100:xs")
    with pytest.raises(GeometryError):
        single_canvas_target(0, 100)
    with pytest.raises(GeometryError):
        single_canvas_target("abc", 100)
    with pytest.raises(GeometryError):
        CanvasTarget(100, -5, "xs")


def test_single_canvas_target():
    assert single_canvas_target("500", "400") == (CanvasTarget(500, 400, "processed"),)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("FLOOD_TOLERANCE", "4")
    monkeypatch.setenv("OUTPUT_FORMATS", "png")
    monkeypatch.setenv("OUTPUT_FILE_MODE", "666")
    monkeypatch.setenv("OUTPUT_DIR_MODE", "")
    monkeypatch.setenv("MAX_WORKERS", "3")

    config = ProcessingConfig.from_env()
    assert config.tolerance == ColorTolerance(4, 4, 4)
    assert config.formats == ("png",)
    assert config.file_mode == 0o666
    assert config.dir_mode is None
    assert config.max_workers == 3


def test_config_override_ignores_none():
    config = ProcessingConfig().override(formats=("webp",), file_mode=None)
    assert config.formats == ("webp",)
    assert config.file_mode is None
    assert config.tolerance == ColorTolerance(10, 10, 10)
