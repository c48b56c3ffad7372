"""Small builders shared by the test modules."""
import io

from PIL import Image

from services.fitting.image_loader import DecodedImage


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def png_bytes(size=(40, 20), color=(255, 255, 255, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def solid_image(size=(40, 20), color=(255, 255, 255, 255)) -> DecodedImage:
    return DecodedImage(image=Image.new("RGBA", size, color))
