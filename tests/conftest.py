# ---------------------------------------------------------------------------
# Tests configuration
# ---------------------------------------------------------------------------

import numpy as np
import pytest
from PIL import Image as PILImage

from canvas_cutout.config import ProcessingConfig
from canvas_cutout.models.canvas_target import CanvasTarget
from canvas_cutout.models.image import Image

BLUE = (0, 0, 255)
RED = (255, 0, 0)
GREEN = (0, 255, 0)


def solid(width, height, color):
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


def with_square(pixels, x0, y0, size, color):
    pixels = pixels.copy()
    pixels[y0:y0 + size, x0:x0 + size] = color
    return pixels


def write_png(path, pixels):
    PILImage.fromarray(pixels).save(path, format="PNG")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def blue_with_red_square():
    """1000x1000 solid blue with a centred 400x400 red square."""
    return Image(pixels=with_square(solid(1000, 1000, BLUE), 300, 300, 400, RED))


@pytest.fixture
def small_subject():
    """60x40 blue background, 20x20 green subject at (20, 10)."""
    return with_square(solid(60, 40, BLUE), 20, 10, 20, GREEN)


@pytest.fixture
def small_targets():
    return (CanvasTarget(20, 20, "xs"), CanvasTarget(30, 24, "sm"))


@pytest.fixture
def quiet_config():
    return ProcessingConfig(show_progress=False, max_workers=2)


@pytest.fixture
def source_dir(tmp_path, small_subject):
    """
    photo.png      decodable
    other.BMP      decodable, upper-case extension
    broken.jpg     not an image
    anim.gif       unsupported extension
    notes.txt      unsupported extension
    folder.png/    directory with an image extension
    """
    write_png(tmp_path / "photo.png", small_subject)
    PILImage.fromarray(small_subject).save(tmp_path / "other.BMP", format="BMP")
    (tmp_path / "broken.jpg").write_bytes(b"definitely not a jpeg")
    PILImage.fromarray(small_subject).save(tmp_path / "anim.gif", format="GIF")
    (tmp_path / "notes.txt").write_text("hello")
    (tmp_path / "folder.png").mkdir()
    return tmp_path
