"""
Tests for canvas surface sizing.
"""
import pytest

from services.fitting.surface import MAX_BACKING_EDGE, CanvasSurface


class TestCanvasSurface:
    def test_backing_size_rounds_with_ratio(self):
        assert CanvasSurface(100.4, 50, 1.5).backing_size == (151, 75)

    def test_resize_reports_change(self):
        surface = CanvasSurface(100, 100)
        assert surface.resize(100, 100, 2.0)
        assert not surface.resize(200, 200, 1.0)

    def test_oversized_resize_leaves_surface_unchanged(self):
        surface = CanvasSurface(100, 100, 2.0)
        with pytest.raises(ValueError, match="exceeds"):
            surface.resize(100000, 100000)
        with pytest.raises(ValueError):
            surface.resize(MAX_BACKING_EDGE, 10, 2.0)
        assert surface.backing_size == (200, 200)

    def test_oversized_constructor_rejected(self):
        with pytest.raises(ValueError):
            CanvasSurface(MAX_BACKING_EDGE + 1, 10)
