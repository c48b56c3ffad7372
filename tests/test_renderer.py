"""
Tests for the Pillow renderer: fill, cover-scaled background, overlay transform.
"""
from PIL import Image

from models.transform_state import TransformState
from services.fitting.image_loader import DecodedImage
from services.fitting.renderer import Renderer, cover_rect, encode_png
from services.fitting.surface import CanvasSurface
from tests.helpers import solid_image

WHITE = (255, 255, 255, 255)


def is_white(pixel):
    return all(channel >= 240 for channel in pixel[:3])


def is_black(pixel):
    return all(channel <= 15 for channel in pixel[:3])


def split_background():
    """200x100 photo: left half blue, right half green."""
    image = Image.new("RGBA", (200, 100), (0, 0, 255, 255))
    image.paste((0, 255, 0, 255), (100, 0, 200, 100))
    return DecodedImage(image=image)


def overlay_state(**kwargs):
    params = dict(center_x=50, center_y=50, intrinsic_width=20, intrinsic_height=10)
    params.update(kwargs)
    return TransformState(**params)


class TestCoverRect:
    def test_wide_image_fills_height(self):
        assert cover_rect((200, 100), 100, 100) == (-50.0, 0.0, 200.0, 100.0)

    def test_tall_image_fills_width(self):
        assert cover_rect((100, 400), 100, 100) == (0.0, -150.0, 100.0, 400.0)


class TestRenderer:
    def test_fill_only(self):
        frame = Renderer().render(CanvasSurface(100, 100), None, None, TransformState(), fill_color="#ff0000")
        assert frame.size == (100, 100)
        assert frame.getpixel((0, 0)) == (255, 0, 0, 255)

    def test_invalid_fill_falls_back_to_default(self):
        frame = Renderer(default_fill="#00ff00").render(
            CanvasSurface(10, 10), None, None, TransformState(), fill_color="not-a-color"
        )
        assert frame.getpixel((5, 5)) == (0, 255, 0, 255)

    def test_backing_size_uses_device_pixel_ratio(self):
        frame = Renderer().render(CanvasSurface(50, 40, 2.0), None, None, TransformState())
        assert frame.size == (100, 80)

    def test_background_cover_centered(self):
        frame = Renderer().render(CanvasSurface(100, 100), split_background(), None, TransformState())
        assert frame.getpixel((10, 50))[:3] == (0, 0, 255)
        assert frame.getpixel((90, 50))[:3] == (0, 255, 0)

    def test_background_mirrored(self):
        frame = Renderer().render(
            CanvasSurface(100, 100), split_background(), None, TransformState(), mirror_enabled=True
        )
        assert frame.getpixel((10, 50))[:3] == (0, 255, 0)
        assert frame.getpixel((90, 50))[:3] == (0, 0, 255)

    def test_overlay_drawn_at_center(self):
        frame = Renderer().render(
            CanvasSurface(100, 100), None, solid_image((20, 10), WHITE), overlay_state(), fill_color="#000"
        )
        assert is_white(frame.getpixel((50, 50)))
        assert is_white(frame.getpixel((45, 51)))
        assert is_black(frame.getpixel((50, 56)))
        assert is_black(frame.getpixel((65, 50)))

    def test_overlay_rotation(self):
        frame = Renderer().render(
            CanvasSurface(100, 100),
            None,
            solid_image((20, 10), WHITE),
            overlay_state(rotation_degrees=90),
            fill_color="#000",
        )
        assert is_white(frame.getpixel((50, 56)))
        assert is_black(frame.getpixel((57, 50)))

    def test_overlay_scale(self):
        frame = Renderer().render(
            CanvasSurface(100, 100),
            None,
            solid_image((20, 10), WHITE),
            overlay_state(scale=2),
            fill_color="#000",
        )
        assert is_white(frame.getpixel((66, 50)))
        assert is_black(frame.getpixel((73, 50)))

    def test_overlay_shares_mirrored_frame(self):
        frame = Renderer().render(
            CanvasSurface(100, 100),
            None,
            solid_image((20, 10), WHITE),
            overlay_state(center_x=30),
            mirror_enabled=True,
            fill_color="#000",
        )
        assert is_white(frame.getpixel((70, 50)))
        assert is_black(frame.getpixel((30, 50)))

    def test_overlay_in_css_pixels_under_hidpi(self):
        frame = Renderer().render(
            CanvasSurface(50, 50, 2.0),
            None,
            solid_image((20, 10), WHITE),
            overlay_state(center_x=25, center_y=25),
            fill_color="#000",
        )
        assert is_white(frame.getpixel((50, 50)))
        # 20 css px wide -> 40 device px wide around x=50
        assert is_white(frame.getpixel((67, 50)))
        assert is_black(frame.getpixel((74, 50)))

    def test_overlay_without_size_is_skipped(self):
        frame = Renderer().render(
            CanvasSurface(100, 100), None, solid_image(), TransformState(center_x=50, center_y=50), fill_color="#000"
        )
        assert is_black(frame.getpixel((50, 50)))

    def test_render_does_not_touch_transform(self):
        state = overlay_state(rotation_degrees=12, scale=1.5)
        before = state.to_dict()
        Renderer().render(CanvasSurface(100, 100), split_background(), solid_image((20, 10)), state, True)
        assert state.to_dict() == before


def test_encode_png_is_flattened():
    frame = Image.new("RGBA", (4, 4), (1, 2, 3, 255))
    data = encode_png(frame)
    assert data.startswith(b"\x89PNG\r\n\x1a\n")


def test_semi_transparent_background_keeps_frame_opaque():
    """The photo is composited over the fill, like canvas source-over."""
    background = DecodedImage(image=Image.new("RGBA", (100, 100), (255, 0, 0, 128)))
    frame = Renderer().render(CanvasSurface(100, 100), background, None, TransformState(), fill_color="#000")
    red, green, blue, alpha = frame.getpixel((50, 50))
    assert alpha == 255
    assert 125 <= red <= 130
    assert (green, blue) == (0, 0)


def test_semi_transparent_background_with_offset_cover():
    """Cover placement with negative offsets still composites every visible pixel."""
    background = DecodedImage(image=Image.new("RGBA", (200, 100), (0, 0, 255, 128)))
    frame = Renderer().render(CanvasSurface(100, 100), background, None, TransformState(), fill_color="#fff")
    for x in (0, 50, 99):
        pixel = frame.getpixel((x, 50))
        assert pixel[3] == 255
        assert 125 <= pixel[0] <= 130
