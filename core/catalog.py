"""
core/catalog.py -- Read-only product catalog.

Products are fixed at process start. The catalog is deliberately tiny: the
only consumer is GET /api/products, which serves the whole list to any
caller holding a live session.
"""

from __future__ import annotations

from collections.abc import Iterable

from core.models import Product

DEFAULT_PRODUCTS: tuple[Product, ...] = (
    Product(id=123, name="GTA VI"),
    Product(id=456, name="RDR3"),
)


class ProductCatalog:
    def __init__(self, products: Iterable[Product] = DEFAULT_PRODUCTS) -> None:
        self._products: tuple[Product, ...] = tuple(products)

    def list_products(self) -> list[Product]:
        return list(self._products)

