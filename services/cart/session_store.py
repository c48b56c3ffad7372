"""Simple in-memory store for visitor cart sessions."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from models.session_models import CartItem, SessionState
from services.cart.catalog import ProductCatalog
from services.cart.errors import (
	InvalidOptionError,
	InvalidProductError,
	ItemNotFoundError,
	ProductNotFoundError,
	SessionNotFoundError,
)

LOGGER = logging.getLogger(__name__)


def _iso_timestamp(epoch_seconds: float) -> str:
	moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
	return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionStore:
	"""Manage cart sessions keyed by an opaque, client-generated session id.

	Sessions are only ever created through `get_or_create`; reads that should
	not create or refresh a session use `peek`. One lock guards the whole map
	so add/remove and the expiry sweep never interleave.
	"""

	def __init__(
		self,
		catalog: ProductCatalog,
		enforce_options: bool = False,
		clock: Callable[[], float] = time.time,
	) -> None:
		self._catalog = catalog
		self._enforce_options = enforce_options
		self._clock = clock
		self._sessions: Dict[str, SessionState] = {}
		self._lock = threading.Lock()
		self._last_item_id = 0

	def __len__(self) -> int:
		with self._lock:
			return len(self._sessions)

	def __contains__(self, session_id: object) -> bool:
		with self._lock:
			return session_id in self._sessions

	def get_or_create(self, session_id: str) -> SessionState:
		"""Return the session, creating an empty one if unknown, and stamp activity."""
		with self._lock:
			return self._get_or_create_locked(session_id)

	def peek(self, session_id: str) -> SessionState:
		"""Return a session without refreshing it, or raise SessionNotFoundError."""
		with self._lock:
			state = self._sessions.get(session_id)
		if state is None:
			raise SessionNotFoundError("Session not found or expired")
		return state

	def add_item(self, session_id: str, product_id: str, size: str, color: str) -> CartItem:
		"""Append a product to the session cart and return the new entry."""
		try:
			product = self._catalog.get_product(product_id)
		except ProductNotFoundError as exc:
			raise InvalidProductError(f"Invalid product id: {product_id}") from exc
		if self._enforce_options and not product.allows(size, color):
			raise InvalidOptionError(
				f"Option {size}/{color} is not offered for {product_id}"
			)

		with self._lock:
			state = self._get_or_create_locked(session_id)
			now = self._clock()
			item = CartItem(
				id=self._next_item_id(now),
				product_id=product.id,
				name=product.name,
				size=size,
				color=color,
				timestamp=_iso_timestamp(now),
			)
			state.cart_items.append(item)
		LOGGER.info("Cart add: session=%s product=%s item=%s", session_id, product_id, item.id)
		return item

	def remove_item(self, session_id: str, item_id: Optional[int]) -> None:
		"""Delete one cart entry; the session must still exist."""
		with self._lock:
			state = self._sessions.get(session_id)
			if state is None:
				raise SessionNotFoundError("Session has expired")
			for index, item in enumerate(state.cart_items):
				if item.id == item_id:
					del state.cart_items[index]
					break
			else:
				raise ItemNotFoundError(f"Item {item_id} not found in cart")
		LOGGER.info("Cart remove: session=%s item=%s", session_id, item_id)

	def list_items(self, session_id: str) -> List[CartItem]:
		"""Return a snapshot of the cart; unknown sessions are created empty."""
		with self._lock:
			return list(self._get_or_create_locked(session_id).cart_items)

	def prune_idle(self, ttl_seconds: float, now: Optional[float] = None) -> List[str]:
		"""Evict sessions idle for longer than `ttl_seconds`; return their ids."""
		now = self._clock() if now is None else now
		with self._lock:
			expired = [sid for sid, state in self._sessions.items() if state.idle_for(now) > ttl_seconds]
			for session_id in expired:
				del self._sessions[session_id]
		return expired

	def _get_or_create_locked(self, session_id: str) -> SessionState:
		now = self._clock()
		state = self._sessions.get(session_id)
		if state is None:
			state = SessionState(session_id=session_id, created_at=now, last_active_at=now)
			self._sessions[session_id] = state
			LOGGER.info("Session created: %s", session_id)
		else:
			state.touch(now)
		return state

	def _next_item_id(self, now: float) -> int:
		# Millisecond timestamps, bumped when two adds land in the same tick.
		candidate = int(now * 1000)
		if candidate <= self._last_item_id:
			candidate = self._last_item_id + 1
		self._last_item_id = candidate
		return candidate
