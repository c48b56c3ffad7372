"""Display and backing geometry of a fitting canvas."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

# Largest backing raster edge, in device pixels.
MAX_BACKING_EDGE = 8192


def _require_positive(name: str, value: float) -> float:
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive finite number, got {value!r}")
    return float(value)


def _backing_size(css_width: float, css_height: float, device_pixel_ratio: float) -> Tuple[int, int]:
    size = (
        max(1, round(css_width * device_pixel_ratio)),
        max(1, round(css_height * device_pixel_ratio)),
    )
    if max(size) > MAX_BACKING_EDGE:
        raise ValueError(
            f"Backing raster {size[0]}x{size[1]} exceeds {MAX_BACKING_EDGE} pixels per edge"
        )
    return size


@dataclass
class CanvasSurface:
    """Canvas size in CSS pixels plus the device pixel ratio.

    The backing raster is `css size x device_pixel_ratio`, rounded, never
    smaller than one pixel and never above MAX_BACKING_EDGE per side.
    Transform state and pointer input stay in CSS pixels; only the renderer
    deals with device pixels.
    """

    css_width: float
    css_height: float
    device_pixel_ratio: float = 1.0

    def __post_init__(self) -> None:
        self.css_width = _require_positive("css_width", self.css_width)
        self.css_height = _require_positive("css_height", self.css_height)
        self.device_pixel_ratio = _require_positive("device_pixel_ratio", self.device_pixel_ratio)
        _backing_size(self.css_width, self.css_height, self.device_pixel_ratio)

    @property
    def backing_size(self) -> Tuple[int, int]:
        return _backing_size(self.css_width, self.css_height, self.device_pixel_ratio)

    def resize(self, css_width: float, css_height: float, device_pixel_ratio: Optional[float] = None) -> bool:
        """Adopt a new display size; return True when the backing raster changes.

        Raises:
            ValueError: For non-positive sizes or an oversized backing raster.
                The surface is left unchanged.
        """
        width = _require_positive("css_width", css_width)
        height = _require_positive("css_height", css_height)
        ratio = self.device_pixel_ratio
        if device_pixel_ratio is not None:
            ratio = _require_positive("device_pixel_ratio", device_pixel_ratio)
        _backing_size(width, height, ratio)

        before = self.backing_size
        self.css_width, self.css_height, self.device_pixel_ratio = width, height, ratio
        return self.backing_size != before

    def copy(self) -> "CanvasSurface":
        return CanvasSurface(self.css_width, self.css_height, self.device_pixel_ratio)

    def to_dict(self) -> dict:
        width, height = self.backing_size
        return {
            "width": self.css_width,
            "height": self.css_height,
            "devicePixelRatio": self.device_pixel_ratio,
            "backingWidth": width,
            "backingHeight": height,
        }
