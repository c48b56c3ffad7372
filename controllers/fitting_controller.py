from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response
from typing import Any, Dict, Optional, Sequence, Tuple
import asyncio

from services.fitting.image_loader import ImageLoader
from services.fitting.input_controller import EXPORT_FILENAME, InputController
from services.fitting.workspace_store import FittingWorkspaceStore
from utils.media_validation import read_image_bytes


def _workspace(request: Request, canvas_id: str) -> InputController:
    store: FittingWorkspaceStore = request.app.state.workspace_store
    return store.get_or_create(canvas_id)


async def _decode_upload(request: Request, file: UploadFile):
    """Read and decode an uploaded image.

    Raises:
        HTTPException(400/413/415) for unreadable uploads; the target image
        slot keeps whatever it held before.
    """
    max_bytes = request.app.state.settings.max_upload_bytes
    raw = await read_image_bytes(file, max_bytes)
    loader: ImageLoader = request.app.state.image_loader
    try:
        return await loader.decode(raw, filename=file.filename)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


async def get_state(request: Request, canvas_id: str) -> Dict[str, Any]:
    return _workspace(request, canvas_id).snapshot()


async def upload_background(request: Request, canvas_id: str, file: UploadFile) -> Dict[str, Any]:
    """Decode the user's photo and place it behind the overlay."""
    image = await _decode_upload(request, file)
    controller = _workspace(request, canvas_id)
    controller.set_background_image(image)
    return controller.snapshot()


async def upload_overlay(request: Request, canvas_id: str, file: UploadFile) -> Dict[str, Any]:
    """Decode a garment image; its transform resets to the default anchor."""
    image = await _decode_upload(request, file)
    controller = _workspace(request, canvas_id)
    controller.set_overlay_image(image)
    return controller.snapshot()


async def pointer_event(request: Request, canvas_id: str, kind: str, x: float, y: float) -> Dict[str, Any]:
    controller = _workspace(request, canvas_id)
    if kind == "down":
        controller.pointer_down(x, y)
    elif kind == "move":
        controller.pointer_move(x, y)
    elif kind in ("up", "cancel"):
        controller.pointer_up()
    else:
        raise HTTPException(status_code=400, detail=f"Unknown pointer event: {kind}")
    return controller.snapshot()


async def touch_event(request: Request, canvas_id: str, kind: str, touches: Sequence[Tuple[float, float]]) -> Dict[str, Any]:
    controller = _workspace(request, canvas_id)
    if kind == "start":
        controller.touch_start(touches)
    elif kind == "move":
        controller.touch_move(touches)
    elif kind in ("end", "cancel"):
        controller.touch_end()
    else:
        raise HTTPException(status_code=400, detail=f"Unknown touch event: {kind}")
    return controller.snapshot()


async def wheel_event(request: Request, canvas_id: str, delta_y: float) -> Dict[str, Any]:
    controller = _workspace(request, canvas_id)
    controller.wheel(delta_y)
    return controller.snapshot()


async def update_controls(
    request: Request,
    canvas_id: str,
    scale: Optional[float] = None,
    rotation: Optional[float] = None,
    mirror: Optional[bool] = None,
    background_color: Optional[str] = None,
) -> Dict[str, Any]:
    """Apply slider, toggle and color-picker values; omitted fields are left alone."""
    controller = _workspace(request, canvas_id)
    try:
        if scale is not None:
            controller.set_scale(scale)
        if rotation is not None:
            controller.set_rotation(rotation)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if mirror is not None:
        controller.set_mirror(mirror)
    if background_color is not None:
        controller.set_background_color(background_color)
    return controller.snapshot()


async def resize_canvas(
    request: Request,
    canvas_id: str,
    width: float,
    height: float,
    device_pixel_ratio: Optional[float] = None,
) -> Dict[str, Any]:
    controller = _workspace(request, canvas_id)
    try:
        controller.resize(width, height, device_pixel_ratio)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return controller.snapshot()


async def reset_canvas(request: Request, canvas_id: str) -> Dict[str, Any]:
    controller = _workspace(request, canvas_id)
    controller.reset()
    return controller.snapshot()


async def export_png(request: Request, canvas_id: str) -> Response:
    """Render the composed canvas and return it as a PNG download.

    Returns:
        FastAPI `Response` with raw PNG bytes, `media_type` `image/png` and
        an attachment filename of `virtual-fitting.png`.
    """
    controller = _workspace(request, canvas_id)
    # Rasterizing and PNG encoding are blocking -> run in thread
    png = await asyncio.to_thread(controller.export_png)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
