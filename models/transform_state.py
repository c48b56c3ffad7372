"""Placement of the overlay garment on the fitting canvas.

All coordinates are CSS pixels, i.e. the displayed size of the canvas,
independent of the device pixel ratio used for the backing raster.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

MIN_SCALE = 0.1
MAX_SCALE = 3.0
DEFAULT_SCALE = 1.0
DEFAULT_ROTATION = 0.0

# Default anchor as a fraction of the canvas size (portrait photos).
ANCHOR_X = 0.5
ANCHOR_Y = 0.35


def clamp_scale(value: float) -> float:
    """Clamp a requested scale into the supported range."""
    if not math.isfinite(value):
        raise ValueError(f"Scale must be a finite number, got {value!r}")
    return min(MAX_SCALE, max(MIN_SCALE, float(value)))


@dataclass
class TransformState:
    """Center-based overlay transform.

    Attributes:
        center_x: Overlay center, horizontal, in CSS pixels.
        center_y: Overlay center, vertical, in CSS pixels.
        scale: Uniform scale factor, always within [MIN_SCALE, MAX_SCALE].
        rotation_degrees: Clockwise rotation; any value, wraps every 360.
        intrinsic_width: Overlay image width in pixels (0 without overlay).
        intrinsic_height: Overlay image height in pixels (0 without overlay).
    """

    center_x: float = 0.0
    center_y: float = 0.0
    scale: float = DEFAULT_SCALE
    rotation_degrees: float = DEFAULT_ROTATION
    intrinsic_width: float = 0.0
    intrinsic_height: float = 0.0

    def __post_init__(self) -> None:
        self.scale = clamp_scale(self.scale)

    @property
    def has_overlay(self) -> bool:
        return self.intrinsic_width > 0 and self.intrinsic_height > 0

    @property
    def half_extents(self) -> tuple[float, float]:
        return (
            self.intrinsic_width * self.scale / 2,
            self.intrinsic_height * self.scale / 2,
        )

    def set_scale(self, value: float) -> float:
        self.scale = clamp_scale(value)
        return self.scale

    def set_rotation(self, degrees: float) -> float:
        if not math.isfinite(degrees):
            raise ValueError(f"Rotation must be a finite number, got {degrees!r}")
        self.rotation_degrees = float(degrees)
        return self.rotation_degrees

    def move_to(self, x: float, y: float) -> None:
        self.center_x = float(x)
        self.center_y = float(y)

    def reset(self) -> None:
        """Restore scale and rotation defaults. Position is left alone."""
        self.scale = DEFAULT_SCALE
        self.rotation_degrees = DEFAULT_ROTATION

    def set_overlay_size(self, width: float, height: float, canvas_width: float, canvas_height: float) -> None:
        """Adopt a freshly loaded overlay and place it at the default anchor."""
        self.intrinsic_width = float(width)
        self.intrinsic_height = float(height)
        self.reset()
        self.move_to(canvas_width * ANCHOR_X, canvas_height * ANCHOR_Y)

    def clear_overlay(self) -> None:
        self.intrinsic_width = 0.0
        self.intrinsic_height = 0.0
        self.reset()

    def to_dict(self) -> dict:
        return {
            "centerX": self.center_x,
            "centerY": self.center_y,
            "scale": self.scale,
            "rotation": self.rotation_degrees,
            "width": self.intrinsic_width,
            "height": self.intrinsic_height,
        }
