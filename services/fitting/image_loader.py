"""Image decoding service for the fitting canvas.

Wraps Pillow to turn uploaded bytes into an immutable `DecodedImage` handle.
Decoding is blocking, so the async entry point runs it in a worker thread;
until it resolves the caller's image slot simply stays as it was.

Example:
    loader = ImageLoader()
    photo = await loader.decode(raw_bytes, filename="me.jpg")
"""
from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedImage:
    """A fully decoded RGBA raster.

    Attributes:
        image: Pillow image in RGBA mode. Treat as read-only.
        filename: Original upload name, if any.
    """

    image: Image.Image
    filename: Optional[str] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class ImageLoader:
    """Decode raster uploads (any format Pillow understands).

    Args:
        max_pixels: Optional upper bound on width*height; larger images are
            rejected before their pixel data is loaded.
    """

    def __init__(self, max_pixels: Optional[int] = None):
        self.max_pixels = max_pixels

    def decode_bytes(self, data: bytes, filename: Optional[str] = None) -> DecodedImage:
        """Decode raw image bytes.

        Args:
            data: Encoded image bytes (PNG, JPEG, WebP, ...).
            filename: Optional name carried on the resulting handle.

        Returns:
            A `DecodedImage` with EXIF orientation applied, in RGBA mode.

        Raises:
            ValueError: If the data is empty, too large, or not a decodable image.
        """
        if not data:
            raise ValueError("Image data is empty")

        try:
            src = Image.open(io.BytesIO(data))
            if self.max_pixels and src.width * src.height > self.max_pixels:
                raise ValueError(
                    f"Image is {src.width}x{src.height}, above the {self.max_pixels} pixel limit"
                )
            src.load()
        except ValueError:
            raise
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            LOGGER.warning("Could not decode image %s: %s", filename or "<upload>", exc)
            raise ValueError("Uploaded bytes are not a supported image format") from exc

        # Honor camera orientation the way browsers do for photos.
        oriented = ImageOps.exif_transpose(src)
        return DecodedImage(image=oriented.convert("RGBA"), filename=filename)

    async def decode(self, data: bytes, filename: Optional[str] = None) -> DecodedImage:
        """Decode off the event loop; see `decode_bytes`."""
        return await asyncio.to_thread(self.decode_bytes, data, filename)
