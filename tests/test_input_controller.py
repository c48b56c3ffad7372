"""
Tests for the fitting input controller: drag, touch, wheel, controls, reset.
"""
import threading

import pytest

from services.fitting.input_controller import WHEEL_STEP, InputController
from services.fitting.renderer import Renderer
from services.fitting.surface import CanvasSurface
from tests.helpers import solid_image


@pytest.fixture
def controller():
    """200x200 canvas with a 40x20 overlay anchored at (100, 70)."""
    ctrl = InputController(CanvasSurface(200, 200))
    ctrl.set_overlay_image(solid_image((40, 20)))
    return ctrl


class TestDrag:
    def test_overlay_anchor(self, controller):
        assert (controller.transform.center_x, controller.transform.center_y) == (100, 70)

    def test_drag_keeps_grab_point(self, controller):
        assert controller.pointer_down(110, 75)
        assert controller.dragging
        assert controller.pointer_move(150, 100)
        assert (controller.transform.center_x, controller.transform.center_y) == (140, 95)

    def test_miss_does_not_start_drag(self, controller):
        assert not controller.pointer_down(10, 10)
        assert not controller.pointer_move(50, 50)
        assert (controller.transform.center_x, controller.transform.center_y) == (100, 70)

    def test_pointer_up_is_idempotent(self, controller):
        controller.pointer_down(100, 70)
        controller.pointer_up()
        controller.pointer_up()
        controller.pointer_cancel()
        assert not controller.dragging
        assert not controller.pointer_move(0, 0)

    def test_drag_in_mirror_mode(self, controller):
        """Pointer moves are reflected so the overlay follows the mirrored view."""
        controller.set_mirror(True)
        assert controller.pointer_down(90, 75)
        controller.pointer_move(50, 75)
        assert controller.transform.center_x == 140

    def test_no_overlay_no_drag(self):
        ctrl = InputController(CanvasSurface(200, 200))
        assert not ctrl.pointer_down(100, 100)


class TestTouch:
    def test_first_touch_drives_drag(self, controller):
        assert controller.touch_start([(100, 70), (5, 5)])
        controller.touch_move([(120, 80)])
        controller.touch_end()
        assert not controller.dragging
        assert (controller.transform.center_x, controller.transform.center_y) == (120, 80)

    def test_empty_touch_list_ignored(self, controller):
        assert not controller.touch_start([])
        assert not controller.touch_move([])


class TestWheel:
    def test_scroll_down_shrinks(self, controller):
        assert controller.wheel(120) == pytest.approx(1 - WHEEL_STEP)

    def test_scroll_up_grows(self, controller):
        assert controller.wheel(-3) == pytest.approx(1 + WHEEL_STEP)

    def test_clamped(self, controller):
        for _ in range(100):
            controller.wheel(-1)
        assert controller.transform.scale == pytest.approx(3.0)
        for _ in range(100):
            controller.wheel(1)
        assert controller.transform.scale == pytest.approx(0.1)

    def test_no_overlay_is_noop(self):
        ctrl = InputController(CanvasSurface(200, 200))
        assert ctrl.wheel(-1) == 1.0


class TestControls:
    def test_scale_slider_clamped(self, controller):
        assert controller.set_scale(5) == 3.0
        assert controller.set_scale(0.01) == 0.1

    def test_new_overlay_resets_transform(self, controller):
        controller.set_scale(2)
        controller.set_rotation(45)
        controller.set_overlay_image(solid_image((10, 10)))
        assert controller.transform.scale == 1.0
        assert controller.transform.rotation_degrees == 0.0
        assert controller.transform.intrinsic_width == 10

    def test_resize_leaves_transform(self, controller):
        before = controller.transform.to_dict()
        controller.resize(300, 400, 2.0)
        assert controller.transform.to_dict() == before
        assert controller.render().size == (600, 800)

    def test_reset_clears_images(self, controller):
        controller.set_background_image(solid_image((10, 10)))
        controller.set_scale(2)
        controller.reset()
        snapshot = controller.snapshot()
        assert not snapshot["hasOverlay"]
        assert not snapshot["hasBackground"]
        assert snapshot["transform"]["scale"] == 1.0
        assert not controller.pointer_down(100, 70)


class TestRendering:
    def test_frame_cached_until_mutation(self, controller):
        first = controller.render()
        assert controller.render() is first
        controller.set_rotation(10)
        assert controller.render() is not first

    def test_export_png(self, controller):
        data = controller.export_png()
        assert data.startswith(b"\x89PNG\r\n\x1a\n")


class MutatingRenderer(Renderer):
    """Changes the scene from another thread while a frame is being drawn."""

    def __init__(self):
        super().__init__()
        self.controller = None
        self.mutate = True
        self.mutation_finished = False

    def render(self, *args, **kwargs):
        if not self.mutate:
            return super().render(*args, **kwargs)
        worker = threading.Thread(target=self.controller.set_rotation, args=(45,))
        worker.start()
        worker.join(timeout=2)
        self.mutation_finished = not worker.is_alive()
        return super().render(*args, **kwargs)


class TestRenderLocking:
    def test_input_not_blocked_while_drawing(self):
        renderer = MutatingRenderer()
        ctrl = InputController(CanvasSurface(50, 50), renderer=renderer)
        renderer.controller = ctrl

        stale = ctrl.render()

        assert renderer.mutation_finished
        assert ctrl.transform.rotation_degrees == 45
        # The frame drawn from the old scene is not cached.
        renderer.mutate = False
        assert ctrl.render() is not stale
