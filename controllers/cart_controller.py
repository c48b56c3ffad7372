"""Cart and product handlers for the NFC shopping flow."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request

from services.cart.catalog import ProductCatalog
from services.cart.errors import CartError
from services.cart.session_store import SessionStore


def _catalog(request: Request) -> ProductCatalog:
	return request.app.state.catalog


def _store(request: Request) -> SessionStore:
	return request.app.state.session_store


def _http_error(exc: CartError) -> HTTPException:
	return HTTPException(status_code=exc.status_code, detail=str(exc))


def _parse_item_id(raw: str) -> Optional[int]:
	"""Read a path item id numerically, so "12", "12.0" and "1.2e1" all mean 12.

	Anything that is not a finite whole number can never match an entry.
	"""
	try:
		value = float(raw.strip())
	except ValueError:
		return None
	if not math.isfinite(value) or not value.is_integer():
		return None
	return int(value)


async def get_product(request: Request, product_id: str) -> Dict[str, Any]:
	"""Return a catalog product as JSON."""
	try:
		product = _catalog(request).get_product(product_id)
	except CartError as exc:
		raise _http_error(exc) from exc
	return product.to_dict()


async def random_product_id(request: Request) -> Dict[str, Any]:
	"""Return any catalog id, used to simulate an NFC tag scan."""
	try:
		return {"productId": _catalog(request).random_product_id()}
	except CartError as exc:
		raise _http_error(exc) from exc


async def list_cart(request: Request, session_id: str) -> List[Dict[str, Any]]:
	"""List cart entries; an unknown session id starts an empty cart."""
	return [item.to_dict() for item in _store(request).list_items(session_id)]


async def add_to_cart(request: Request, session_id: str, product_id: str, size: str, color: str) -> Dict[str, Any]:
	"""Add a product with the chosen options and return the created entry."""
	try:
		item = _store(request).add_item(session_id, product_id, size, color)
	except CartError as exc:
		raise _http_error(exc) from exc
	return item.to_dict()


async def remove_from_cart(request: Request, session_id: str, item_id: str) -> Dict[str, Any]:
	"""Delete one entry. Ids that do not parse as whole numbers never match."""
	parsed_id = _parse_item_id(item_id)
	try:
		_store(request).remove_item(session_id, parsed_id)
	except CartError as exc:
		raise _http_error(exc) from exc
	return {"success": True}


async def session_view(request: Request, session_id: str) -> Dict[str, Any]:
	"""Read-only session lookup for the smart mirror; does not refresh the TTL."""
	try:
		state = _store(request).peek(session_id)
	except CartError as exc:
		raise _http_error(exc) from exc
	return state.to_view()
