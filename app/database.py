import copy
import logging
import math
from typing import Dict, Any, List, Optional, Union, Iterable

from .core import _make_product_dict, _merge_product_dict, new_product_id
from .errors import NotFound, ValidationFailed

# This file holds the in-memory product store. One instance lives on app.state.

logger = logging.getLogger(__name__)

Product = Dict[str, Any]

DEFAULT_PRODUCTS: List[Product] = [
    {
        "id": "1",
        "name": "Laptop",
        "description": "High-performance laptop with 16GB RAM",
        "price": 1200,
        "category": "electronics",
        "inStock": True,
    },
    {
        "id": "2",
        "name": "Smartphone",
        "description": "Latest model with 128GB storage",
        "price": 800,
        "category": "electronics",
        "inStock": True,
    },
    {
        "id": "3",
        "name": "Coffee Maker",
        "description": "Programmable coffee maker with timer",
        "price": 50,
        "category": "kitchen",
        "inStock": False,
    },
]

UNCATEGORIZED = "uncategorized"


def _category_key(product: Product) -> str:
    category = product.get("category")
    if not isinstance(category, str) or not category:
        return ""
    return category.lower()


def _not_found(product_id: str) -> NotFound:
    return NotFound(f"Product with id {product_id} not found")


class ProductStore:
    """Ordered, process-local collection of product records.

    Every operation is synchronous. Lookups that miss return a NotFound value
    instead of raising.
    Records handed out are copies; changes go through update().
    """

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._products: List[Product] = []
        if products:
            self.seed(products)

    @classmethod
    def with_defaults(cls) -> "ProductStore":
        return cls(DEFAULT_PRODUCTS)

    def seed(self, products: Iterable[Product]) -> None:
        """Append copies of existing records. Each needs a string id not already stored."""
        for p in products:
            pid = p.get("id") if isinstance(p, dict) else None
            if not isinstance(pid, str) or not pid:
                raise ValueError(f"Seed record without a string id: {p!r}")
            if self._index_of(pid) != -1:
                raise ValueError(f"Duplicate product id {pid!r}")
            self._products.append(copy.deepcopy(p))

    def __len__(self) -> int:
        return len(self._products)

    def ids(self) -> List[str]:
        return [p["id"] for p in self._products]

    def _index_of(self, product_id: str) -> int:
        for i, p in enumerate(self._products):
            if p["id"] == product_id:
                return i
        return -1

    # ---------------------------
    # Reads
    # ---------------------------
    def list(self, category: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        out = self._products
        if category:
            wanted = category.lower()
            out = [p for p in out if _category_key(p) == wanted]

        total_items = len(out)
        start = (page - 1) * limit
        end = page * limit
        return {
            "page": page,
            "limit": limit,
            "totalItems": total_items,
            "totalPages": math.ceil(total_items / limit),
            "products": [copy.deepcopy(p) for p in out[start:end]],
        }

    def search(self, name: Optional[str]) -> Union[List[Product], ValidationFailed]:
        if not name:
            return ValidationFailed("Query parameter 'name' is required.")
        term = name.lower()
        return [copy.deepcopy(p) for p in self._products if term in str(p.get("name", "")).lower()]

    def stats(self) -> Dict[str, Any]:
        counts: Dict[str, int] = {}
        for p in self._products:
            key = _category_key(p) or UNCATEGORIZED
            counts[key] = counts.get(key, 0) + 1
        return {"countsByCategory": counts, "totalProducts": len(self._products)}

    def get(self, product_id: str) -> Union[Product, NotFound]:
        i = self._index_of(product_id)
        if i == -1:
            return _not_found(product_id)
        return copy.deepcopy(self._products[i])

    # ---------------------------
    # Writes
    # ---------------------------
    def create(self, payload: Dict[str, Any]) -> Product:
        pid = new_product_id()
        while self._index_of(pid) != -1:
            pid = new_product_id()
        product = _make_product_dict(pid, payload)
        self._products.append(copy.deepcopy(product))
        logger.info("Created product %s (%s)", pid, product.get("name"))
        return product

    def update(self, product_id: str, payload: Dict[str, Any]) -> Union[Product, NotFound]:
        i = self._index_of(product_id)
        if i == -1:
            return _not_found(product_id)
        merged = _merge_product_dict(self._products[i], payload)
        self._products[i] = copy.deepcopy(merged)
        logger.info("Updated product %s", product_id)
        return merged

    def delete(self, product_id: str) -> Union[Dict[str, str], NotFound]:
        before = len(self._products)
        self._products = [p for p in self._products if p["id"] != product_id]
        if len(self._products) == before:
            return _not_found(product_id)
        logger.info("Deleted product %s", product_id)
        return {"message": "Product deleted successfully"}
