# pipeline/canvas_renderer.py
from __future__ import annotations

from typing import Iterable, List

from ..models.canvas_target import CanvasTarget, ColorTolerance
from ..models.image import Image
from ..models.processed_canvas import ProcessedCanvas
from ..services.matte_service import MatteService
from ..services.scaling_service import ScalingService


def render_canvas(
    img: Image,
    target: CanvasTarget,
    *,
    tolerance: ColorTolerance | None = None,
    scaling_service: ScalingService | None = None,
    matte_service: MatteService | None = None,
) -> ProcessedCanvas:
    """
    One (source, target) pass:
        • cover-fit scale the source to the target
        • flood fill from the four corners → background mask
        • hard alpha from the mask
        • centred crop to exactly target.width x target.height
    The source pixels are only read, so calls may run concurrently.
    """
    scaling_service = scaling_service or ScalingService()
    matte_service = matte_service or MatteService(tolerance=tolerance)

    resized, scale = scaling_service.resize_to_cover(img, target)
    canvas, transparent_ratio = matte_service.extract(resized, target)

    return ProcessedCanvas(
        pixels=canvas,
        target=target,
        source_path=img.path,
        scale=scale,
        transparent_ratio=transparent_ratio,
    )


def render_canvases(
    img: Image,
    targets: Iterable[CanvasTarget],
    *,
    tolerance: ColorTolerance | None = None,
) -> List[ProcessedCanvas]:
    """
    Every target for one decoded source, in target order.
    """
    scaling_service = ScalingService()
    matte_service = MatteService(tolerance=tolerance)
    return [
        render_canvas(img, target, scaling_service=scaling_service, matte_service=matte_service)
        for target in targets
    ]
