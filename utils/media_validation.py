"""Validation helpers for uploaded fitting images."""

from fastapi import HTTPException, UploadFile

ALLOWED_IMAGE_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/bmp",
    "image/tiff",
    "application/octet-stream",
}

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tif", ".tiff")


def validate_image_file(image_file: UploadFile) -> None:
    """Reject uploads whose declared type is clearly not a raster image.

    Browsers sometimes send photos as `application/octet-stream`, so that
    type is accepted and the decoder has the final word. When the content
    type is missing the filename extension is checked instead.
    """
    if image_file.content_type:
        content_type = image_file.content_type.lower().split(";", 1)[0].strip()
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(status_code=415, detail=f"Unsupported image content type: {image_file.content_type}")
    elif not (image_file.filename or "").lower().endswith(IMAGE_EXTENSIONS):
        raise HTTPException(status_code=415, detail="Unsupported or missing image content type.")


async def read_image_bytes(image_file: UploadFile, max_bytes: int) -> bytes:
    """Read validated image bytes, ensuring the upload is neither empty nor oversized."""
    validate_image_file(image_file)
    image_bytes = await image_file.read(max_bytes + 1)
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Uploaded image is empty.")
    if len(image_bytes) > max_bytes:
        raise HTTPException(status_code=413, detail=f"Uploaded image exceeds {max_bytes} bytes.")
    return image_bytes
