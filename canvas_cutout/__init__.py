"""
canvas-cutout: batch conversion of images into fixed-size canvases with the
(near-)uniform background removed.
"""
from .models.canvas_target import CanvasTarget, ColorTolerance
from .models.image import Image
from .models.processed_canvas import ProcessedCanvas
from .pipeline.canvas_renderer import render_canvas, render_canvases
from .pipeline.batch_processor import process_batch

__version__ = "1.0.0"

__all__ = [
    "CanvasTarget",
    "ColorTolerance",
    "Image",
    "ProcessedCanvas",
    "render_canvas",
    "render_canvases",
    "process_batch",
]
