"""FastAPI routes for the product catalog and session carts."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, StrictStr

from controllers.cart_controller import (
	add_to_cart,
	get_product,
	list_cart,
	random_product_id,
	remove_from_cart,
	session_view,
)

router = APIRouter(prefix="/api")


class AddItemPayload(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	product_id: StrictStr = Field(alias="productId", min_length=1)
	size: StrictStr
	color: StrictStr


@router.get("/product/{product_id}")
async def get_product_route(request: Request, product_id: str):
	try:
		return await get_product(request, product_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/debug/random-product-id")
async def random_product_route(request: Request):
	"""Test helper: pick a product id as if an NFC tag had been scanned."""
	try:
		return await random_product_id(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/session/{session_id}/cart")
async def list_cart_route(request: Request, session_id: str):
	try:
		return await list_cart(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/session/{session_id}/add")
async def add_to_cart_route(request: Request, session_id: str, payload: AddItemPayload):
	try:
		return await add_to_cart(request, session_id, payload.product_id, payload.size, payload.color)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/session/{session_id}/cart/{item_id}")
async def remove_from_cart_route(request: Request, session_id: str, item_id: str):
	try:
		return await remove_from_cart(request, session_id, item_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/session/{session_id}")
async def session_view_route(request: Request, session_id: str):
	try:
		return await session_view(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
