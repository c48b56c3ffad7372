"""Pillow rasterizer for the fitting canvas.

Draw order is fixed: solid fill, background photo scaled to cover the
canvas, then the overlay garment with its center-based transform. Mirror
mode flips the whole stage about the vertical midline, so the overlay stays
registered with the mirrored photo.
"""
from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageOps

from models.transform_state import TransformState
from services.fitting.geometry import overlay_inverse_affine
from services.fitting.image_loader import DecodedImage
from services.fitting.surface import CanvasSurface

LOGGER = logging.getLogger(__name__)

DEFAULT_FILL = "#111"
TRANSPARENT = (0, 0, 0, 0)


def cover_rect(image_size: Tuple[int, int], canvas_w: float, canvas_h: float) -> Tuple[float, float, float, float]:
    """Return ``(x, y, w, h)`` that scales an image to cover the canvas, centered."""
    img_w, img_h = image_size
    img_ar = img_w / img_h
    if img_ar > canvas_w / canvas_h:
        draw_h = canvas_h
        draw_w = draw_h * img_ar
    else:
        draw_w = canvas_w
        draw_h = draw_w / img_ar
    return (canvas_w - draw_w) / 2, (canvas_h - draw_h) / 2, draw_w, draw_h


class Renderer:
    """Compose background and overlay into an RGBA frame.

    Args:
        default_fill: Fill used when no (or an unparsable) color is given.
    """

    def __init__(self, default_fill: str = DEFAULT_FILL):
        self.default_fill = default_fill

    def render(
        self,
        surface: CanvasSurface,
        background: Optional[DecodedImage],
        overlay: Optional[DecodedImage],
        transform: TransformState,
        mirror_enabled: bool = False,
        fill_color: Optional[str] = None,
    ) -> Image.Image:
        """Rasterize the scene at the surface's backing resolution.

        `transform` is only read. Missing images are skipped.
        """
        frame = Image.new("RGBA", surface.backing_size, self.resolve_fill(fill_color))
        if background is not None:
            self._draw_background(frame, surface, background, mirror_enabled)
        if overlay is not None and transform.has_overlay:
            frame = self._draw_overlay(frame, surface, overlay, transform, mirror_enabled)
        return frame

    def resolve_fill(self, color: Optional[str]) -> Tuple[int, ...]:
        for candidate in (color, self.default_fill, DEFAULT_FILL):
            if not candidate:
                continue
            try:
                rgb = ImageColor.getrgb(candidate)
            except ValueError:
                LOGGER.debug("Ignoring invalid fill color %r", candidate)
                continue
            return rgb[:3] + (255,)
        return (17, 17, 17, 255)

    def _draw_background(
        self,
        frame: Image.Image,
        surface: CanvasSurface,
        background: DecodedImage,
        mirrored: bool,
    ) -> None:
        dpr = surface.device_pixel_ratio
        x, y, w, h = cover_rect(background.size, surface.css_width, surface.css_height)
        size = (max(1, round(w * dpr)), max(1, round(h * dpr)))
        offset_x, offset_y = round(x * dpr), round(y * dpr)

        scaled = background.image.resize(size, Image.LANCZOS)
        if mirrored:
            scaled = ImageOps.mirror(scaled)
            # Reflect the placed rectangle about the vertical midline.
            offset_x = frame.width - (offset_x + size[0])
        # alpha_composite needs a non-negative destination; shift the source instead.
        source = (max(0, -offset_x), max(0, -offset_y))
        dest = (max(0, offset_x), max(0, offset_y))
        frame.alpha_composite(scaled, dest=dest, source=source)

    def _draw_overlay(
        self,
        frame: Image.Image,
        surface: CanvasSurface,
        overlay: DecodedImage,
        transform: TransformState,
        mirrored: bool,
    ) -> Image.Image:
        coeffs = overlay_inverse_affine(transform, surface, overlay.size, mirrored)
        layer = overlay.image.transform(
            frame.size,
            Image.Transform.AFFINE,
            coeffs,
            resample=Image.Resampling.BICUBIC,
            fillcolor=TRANSPARENT,
        )
        return Image.alpha_composite(frame, layer)


def encode_png(frame: Image.Image) -> bytes:
    """Flatten a frame to RGB and encode it as PNG bytes."""
    out_io = io.BytesIO()
    frame.convert("RGB").save(out_io, format="PNG", optimize=True)
    return out_io.getvalue()
