import numpy as np
import pytest

from canvas_cutout import render_canvas, render_canvases
from canvas_cutout.models.canvas_target import CanvasTarget, ColorTolerance
from canvas_cutout.models.image import Image

from conftest import BLUE, RED, solid, with_square


def test_blue_background_red_square_scenario(blue_with_red_square):
    canvas = render_canvas(
        blue_with_red_square, CanvasTarget(500, 500, "md"), tolerance=ColorTolerance(10, 10, 10)
    )
    alpha = canvas.pixels[:, :, 3]

    assert canvas.pixels.shape == (500, 500, 4)
    assert canvas.scale == pytest.approx(0.5)
    # Red square 300..700 at scale 0.5 → 150..350
    assert (alpha[150:350, 150:350] == 255).all()
    outside = alpha.copy()
    outside[150:350, 150:350] = 0
    assert not outside.any()
    assert (canvas.pixels[200, 200, :3] == RED).all()
    assert canvas.transparent_ratio == pytest.approx(1 - (200 * 200) / (500 * 500))


@pytest.mark.parametrize("size", [(40, 400), (400, 40), (123, 77), (50, 50)])
@pytest.mark.parametrize("canvas", [(30, 30), (64, 20), (20, 64)])
def test_output_is_exactly_canvas_sized(size, canvas):
    img = Image(pixels=with_square(solid(*size, BLUE), 2, 2, 10, RED))
    result = render_canvas(img, CanvasTarget(*canvas, "t"))
    assert result.pixels.shape == (canvas[1], canvas[0], 4)
    assert result.pixels.dtype == np.uint8


def test_extreme_aspect_ratio_source():
    img = Image(pixels=solid(4, 400, BLUE))
    result = render_canvas(img, CanvasTarget(100, 100, "t"))

    assert result.scale == pytest.approx(25.0)
    assert result.pixels.shape == (100, 100, 4)
    assert not result.pixels[:, :, 3].any()


def test_rendering_is_deterministic(blue_with_red_square):
    target = CanvasTarget(120, 120, "xs")
    first = render_canvas(blue_with_red_square, target)
    second = render_canvas(blue_with_red_square, target)
    assert np.array_equal(first.pixels, second.pixels)


def test_source_is_not_modified(blue_with_red_square):
    before = blue_with_red_square.pixels.copy()
    render_canvas(blue_with_red_square, CanvasTarget(300, 300, "sm"))
    assert np.array_equal(blue_with_red_square.pixels, before)


def test_render_canvases_one_result_per_target(small_subject, small_targets):
    results = render_canvases(Image(pixels=small_subject), small_targets)

    assert [r.target for r in results] == list(small_targets)
    assert results[0].pixels.shape == (20, 20, 4)
    assert results[1].pixels.shape == (24, 30, 4)
