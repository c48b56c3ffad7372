from __future__ import annotations

from models.transform_state import TransformState
from services.fitting.geometry import to_overlay_local


class HitTester:
    """Oriented bounding-box test against the overlay's current placement."""

    def __init__(self, transform: TransformState) -> None:
        self.transform = transform

    def hit(self, x: float, y: float, canvas_width: float, mirrored: bool = False) -> bool:
        """Return True when the CSS-pixel point lies on the overlay.

        Edges count as inside. Without an overlay nothing is ever hit.
        """
        if not self.transform.has_overlay:
            return False
        local_x, local_y = to_overlay_local(self.transform, x, y, canvas_width, mirrored)
        half_w, half_h = self.transform.half_extents
        return abs(local_x) <= half_w and abs(local_y) <= half_h
