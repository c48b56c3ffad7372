"""Read-only product catalog used to validate cart additions."""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional

from models.product import Product
from services.cart.errors import ProductNotFoundError

DEFAULT_PRODUCTS = (
    Product(
        id="P001",
        name="블랙 자켓",
        description="미니멀 블랙 테일러드 자켓",
        image_url="/img/placeholder-jacket.jpg",
        sizes=("S", "M", "L"),
        colors=("black", "white"),
    ),
    Product(
        id="P002",
        name="데님 팬츠",
        description="스트레이트 중청 데님 팬츠",
        image_url="/img/placeholder-denim.jpg",
        sizes=("M", "L", "XL"),
        colors=("blue", "navy"),
    ),
    Product(
        id="P003",
        name="코튼 셔츠",
        description="화이트 옥스포드 셔츠",
        image_url="/img/placeholder-shirt.jpg",
        sizes=("S", "M", "L", "XL"),
        colors=("white", "beige"),
    ),
)


class ProductCatalog:
    """Fixed product id -> Product mapping built once at startup."""

    def __init__(self, products: Optional[Iterable[Product]] = None, rng: Optional[random.Random] = None) -> None:
        items = DEFAULT_PRODUCTS if products is None else tuple(products)
        self._products: Dict[str, Product] = {product.id: product for product in items}
        self._rng = rng or random.Random()

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def __len__(self) -> int:
        return len(self._products)

    def get_product(self, product_id: str) -> Product:
        """Return the product or raise ProductNotFoundError."""
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    def product_ids(self) -> List[str]:
        return list(self._products)

    def random_product_id(self) -> str:
        """Pick any catalog id; backs the NFC scan simulation endpoint."""
        if not self._products:
            raise ProductNotFoundError("Catalog is empty")
        return self._rng.choice(self.product_ids())
