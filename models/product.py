from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Product:
    """Static catalog entry.

    Attributes:
        id: Catalog key, e.g. ``"P001"``.
        name: Display name shown in the cart.
        description: Short marketing description.
        image_url: Relative URL of the product photo.
        sizes: Allowed sizes; the first entry is the default option.
        colors: Allowed colors; the first entry is the default option.
    """

    id: str
    name: str
    description: str
    image_url: str
    sizes: Tuple[str, ...]
    colors: Tuple[str, ...]

    def allows(self, size: str, color: str) -> bool:
        return size in self.sizes and color in self.colors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "desc": self.description,
            "imageUrl": self.image_url,
            "sizes": list(self.sizes),
            "colors": list(self.colors),
        }
