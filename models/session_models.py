"""Session domain models for the NFC cart service."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class CartItem:
	"""A product picked into a session cart. Never edited after creation."""

	id: int
	product_id: str
	name: str
	size: str
	color: str
	timestamp: str

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"productId": self.product_id,
			"name": self.name,
			"size": self.size,
			"color": self.color,
			"timestamp": self.timestamp,
		}


@dataclass
class SessionState:
	"""In-memory cart tracking for one visitor session."""

	session_id: str
	created_at: float = field(default_factory=lambda: time.time())
	last_active_at: float = 0.0
	cart_items: List[CartItem] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.last_active_at < self.created_at:
			self.last_active_at = self.created_at

	def touch(self, now: float) -> None:
		# Clock skew must never move activity before creation.
		self.last_active_at = max(now, self.created_at)

	def idle_for(self, now: float) -> float:
		return now - self.last_active_at

	def to_view(self) -> Dict[str, Any]:
		"""Shape used by the smart-mirror lookup endpoint."""
		return {
			"sessionId": self.session_id,
			"clickedProducts": [item.to_dict() for item in self.cart_items],
		}
