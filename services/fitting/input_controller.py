"""Pointer, touch, wheel and control input for one fitting canvas."""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence, Tuple

from PIL import Image

from models.transform_state import TransformState
from services.fitting.geometry import mirror_x
from services.fitting.hit_tester import HitTester
from services.fitting.image_loader import DecodedImage
from services.fitting.renderer import DEFAULT_FILL, Renderer, encode_png
from services.fitting.surface import CanvasSurface

LOGGER = logging.getLogger(__name__)

WHEEL_STEP = 0.05
EXPORT_FILENAME = "virtual-fitting.png"

Point = Tuple[float, float]


class InputController:
    """Translate raw input into transform changes and keep the frame current.

    Every mutation invalidates the cached frame; `render()` re-rasterizes on
    the next read. Mutations hold a lock; rendering only holds it long enough
    to copy the scene, so input is never blocked behind rasterization.
    """

    def __init__(
        self,
        surface: CanvasSurface,
        renderer: Optional[Renderer] = None,
        transform: Optional[TransformState] = None,
        fill_color: str = DEFAULT_FILL,
    ) -> None:
        self.surface = surface
        self.renderer = renderer or Renderer(default_fill=fill_color)
        self.transform = transform or TransformState(
            center_x=surface.css_width / 2,
            center_y=surface.css_height / 2,
        )
        self.hit_tester = HitTester(self.transform)
        self.background: Optional[DecodedImage] = None
        self.overlay: Optional[DecodedImage] = None
        self.mirror_enabled = False
        self.background_color = fill_color
        self._dragging = False
        self._drag_offset: Point = (0.0, 0.0)
        self._frame: Optional[Image.Image] = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def dragging(self) -> bool:
        return self._dragging

    # Pointer input. Coordinates are CSS pixels relative to the canvas.

    def pointer_down(self, x: float, y: float) -> bool:
        """Start a drag if the point lands on the overlay; return whether it did."""
        with self._lock:
            if not self.hit_tester.hit(x, y, self.surface.css_width, self.mirror_enabled):
                return False
            px = mirror_x(x, self.surface.css_width, self.mirror_enabled)
            self._dragging = True
            self._drag_offset = (px - self.transform.center_x, y - self.transform.center_y)
            return True

    def pointer_move(self, x: float, y: float) -> bool:
        with self._lock:
            if not self._dragging:
                return False
            px = mirror_x(x, self.surface.css_width, self.mirror_enabled)
            offset_x, offset_y = self._drag_offset
            self.transform.move_to(px - offset_x, y - offset_y)
            self._invalidate()
            return True

    def pointer_up(self) -> None:
        with self._lock:
            self._dragging = False

    pointer_cancel = pointer_up

    # Touch input: only the first active touch point is used.

    def touch_start(self, touches: Sequence[Point]) -> bool:
        if not touches:
            return False
        return self.pointer_down(*touches[0])

    def touch_move(self, touches: Sequence[Point]) -> bool:
        if not touches:
            return False
        return self.pointer_move(*touches[0])

    def touch_end(self) -> None:
        self.pointer_up()

    def wheel(self, delta_y: float) -> float:
        """Step the scale by one notch against the scroll direction."""
        with self._lock:
            if self.overlay is None:
                return self.transform.scale
            if not math.isfinite(delta_y) or delta_y == 0:
                return self.transform.scale
            step = -WHEEL_STEP if delta_y > 0 else WHEEL_STEP
            self.transform.set_scale(self.transform.scale + step)
            self._invalidate()
            return self.transform.scale

    def resize(self, css_width: float, css_height: float, device_pixel_ratio: Optional[float] = None) -> None:
        """Follow the canvas display size. The overlay transform is not adjusted."""
        with self._lock:
            self.surface.resize(css_width, css_height, device_pixel_ratio)
            self._invalidate()

    # Control surface.

    def set_scale(self, value: float) -> float:
        with self._lock:
            applied = self.transform.set_scale(value)
            self._invalidate()
            return applied

    def set_rotation(self, degrees: float) -> float:
        with self._lock:
            applied = self.transform.set_rotation(degrees)
            self._invalidate()
            return applied

    def set_mirror(self, enabled: bool) -> None:
        with self._lock:
            self.mirror_enabled = bool(enabled)
            self._invalidate()

    def set_background_color(self, color: str) -> None:
        with self._lock:
            self.background_color = color
            self._invalidate()

    def set_background_image(self, image: Optional[DecodedImage]) -> None:
        with self._lock:
            self.background = image
            self._invalidate()

    def set_overlay_image(self, image: DecodedImage) -> None:
        """Swap in a new garment, resetting scale/rotation and re-anchoring it."""
        with self._lock:
            self.overlay = image
            self._dragging = False
            self.transform.set_overlay_size(
                image.width,
                image.height,
                self.surface.css_width,
                self.surface.css_height,
            )
            self._invalidate()
        LOGGER.info("Overlay loaded: %sx%s", image.width, image.height)

    def reset(self) -> None:
        """Drop both images and restore the default transform."""
        with self._lock:
            self.background = None
            self.overlay = None
            self._dragging = False
            self.transform.clear_overlay()
            self._invalidate()

    # Output.

    def render(self) -> Image.Image:
        with self._lock:
            if self._frame is not None:
                return self._frame
            generation = self._generation
            surface = self.surface.copy()
            transform = replace(self.transform)
            background, overlay = self.background, self.overlay
            mirrored, fill_color = self.mirror_enabled, self.background_color

        # Decoded images are immutable, so drawing outside the lock is safe.
        frame = self.renderer.render(
            surface,
            background,
            overlay,
            transform,
            mirror_enabled=mirrored,
            fill_color=fill_color,
        )
        with self._lock:
            # Only cache the frame if nothing changed while it was drawn.
            if self._generation == generation:
                self._frame = frame
        return frame

    def export_png(self) -> bytes:
        """Return the flattened current frame as PNG bytes."""
        return encode_png(self.render())

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "transform": self.transform.to_dict(),
                "surface": self.surface.to_dict(),
                "mirror": self.mirror_enabled,
                "backgroundColor": self.background_color,
                "hasBackground": self.background is not None,
                "hasOverlay": self.overlay is not None,
                "dragging": self._dragging,
            }

    def _invalidate(self) -> None:
        self._frame = None
        self._generation += 1
