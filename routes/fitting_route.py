"""FastAPI routes driving a fitting canvas: uploads, input events, controls and export."""

from typing import List, Literal, Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field, StrictBool

from controllers.fitting_controller import (
    export_png,
    get_state,
    pointer_event,
    reset_canvas,
    resize_canvas,
    touch_event,
    update_controls,
    upload_background,
    upload_overlay,
    wheel_event,
)

router = APIRouter(prefix="/api/fitting", tags=["fitting"])


class PointerPayload(BaseModel):
    type: Literal["down", "move", "up", "cancel"]
    x: float = Field(0.0, allow_inf_nan=False)
    y: float = Field(0.0, allow_inf_nan=False)


class TouchPoint(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class TouchPayload(BaseModel):
    type: Literal["start", "move", "end", "cancel"]
    touches: List[TouchPoint] = []


class WheelPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    delta_y: float = Field(alias="deltaY", allow_inf_nan=False)


class ControlsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scale: Optional[float] = Field(None, allow_inf_nan=False)
    rotation: Optional[float] = Field(None, allow_inf_nan=False)
    mirror: Optional[StrictBool] = None
    background_color: Optional[str] = Field(None, alias="backgroundColor", max_length=64)


class ResizePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    width: float = Field(gt=0, allow_inf_nan=False)
    height: float = Field(gt=0, allow_inf_nan=False)
    device_pixel_ratio: Optional[float] = Field(None, alias="devicePixelRatio", gt=0, allow_inf_nan=False)


@router.get("/{canvas_id}")
async def get_state_route(request: Request, canvas_id: str):
    try:
        return await get_state(request, canvas_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/background")
async def upload_background_route(request: Request, canvas_id: str, file: UploadFile = File(...)):
    """Upload the user photo drawn behind the garment."""
    try:
        return await upload_background(request, canvas_id, file)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/overlay")
async def upload_overlay_route(request: Request, canvas_id: str, file: UploadFile = File(...)):
    """Upload the garment image composited on top of the photo."""
    try:
        return await upload_overlay(request, canvas_id, file)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/pointer")
async def pointer_route(request: Request, canvas_id: str, payload: PointerPayload):
    try:
        return await pointer_event(request, canvas_id, payload.type, payload.x, payload.y)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/touch")
async def touch_route(request: Request, canvas_id: str, payload: TouchPayload):
    try:
        touches = [(point.x, point.y) for point in payload.touches]
        return await touch_event(request, canvas_id, payload.type, touches)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/wheel")
async def wheel_route(request: Request, canvas_id: str, payload: WheelPayload):
    try:
        return await wheel_event(request, canvas_id, payload.delta_y)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.patch("/{canvas_id}/controls")
async def controls_route(request: Request, canvas_id: str, payload: ControlsPayload):
    try:
        return await update_controls(
            request,
            canvas_id,
            scale=payload.scale,
            rotation=payload.rotation,
            mirror=payload.mirror,
            background_color=payload.background_color,
        )
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/resize")
async def resize_route(request: Request, canvas_id: str, payload: ResizePayload):
    try:
        return await resize_canvas(request, canvas_id, payload.width, payload.height, payload.device_pixel_ratio)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{canvas_id}/reset")
async def reset_route(request: Request, canvas_id: str):
    try:
        return await reset_canvas(request, canvas_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{canvas_id}/export")
async def export_route(request: Request, canvas_id: str):
    """Download the flattened composite as `virtual-fitting.png`."""
    try:
        return await export_png(request, canvas_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
