"""Coordinate conversions between canvas CSS pixels and overlay-local space."""

from __future__ import annotations

import math
from typing import Tuple

from models.transform_state import TransformState
from services.fitting.surface import CanvasSurface

Affine = Tuple[float, float, float, float, float, float]


def mirror_x(x: float, canvas_width: float, mirrored: bool) -> float:
    """Undo (or apply) the horizontal flip about the canvas midline."""
    return canvas_width - x if mirrored else x


def rotate_point(x: float, y: float, degrees: float) -> Tuple[float, float]:
    """Rotate clockwise on screen (y grows downwards) by `degrees`."""
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    return x * cos - y * sin, x * sin + y * cos


def to_overlay_local(
    transform: TransformState,
    x: float,
    y: float,
    canvas_width: float,
    mirrored: bool = False,
) -> Tuple[float, float]:
    """Map a canvas point (CSS px) into the overlay's unrotated, centered frame.

    The result is still scaled: the overlay spans
    ``[-w*scale/2, w*scale/2] x [-h*scale/2, h*scale/2]`` in this frame.
    """
    px = mirror_x(x, canvas_width, mirrored)
    return rotate_point(px - transform.center_x, y - transform.center_y, -transform.rotation_degrees)


def overlay_inverse_affine(
    transform: TransformState,
    surface: CanvasSurface,
    image_size: Tuple[int, int],
    mirrored: bool = False,
) -> Affine:
    """Coefficients mapping backing-raster pixels to overlay image pixels.

    This is the inverse of the draw transform
    ``dpr * mirror(center + rotate(scale * (p - size/2)))`` in the form
    Pillow's AFFINE transform expects: ``(a, b, c, d, e, f)`` with
    ``x_in = a*x + b*y + c`` and ``y_in = d*x + e*y + f``.
    """
    dpr = surface.device_pixel_ratio
    img_w, img_h = image_size
    # The overlay is drawn at intrinsic size; rescale if the pixel data differs.
    sx = img_w / transform.intrinsic_width
    sy = img_h / transform.intrinsic_height
    k = transform.scale

    rad = math.radians(-transform.rotation_degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    mx = -1.0 / dpr if mirrored else 1.0 / dpr
    bx = (surface.css_width if mirrored else 0.0) - transform.center_x
    by = -transform.center_y

    a = cos * mx / k * sx
    b = -sin / (dpr * k) * sx
    c = (cos * bx - sin * by) / k * sx + img_w / 2
    d = sin * mx / k * sy
    e = cos / (dpr * k) * sy
    f = (sin * bx + cos * by) / k * sy + img_h / 2
    return a, b, c, d, e, f
