# domain/catalog.py
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, List, Optional

from domain.models import Product


class CatalogStore:
    """Catálogo de productos de solo lectura, cargado una vez al arrancar."""

    def __init__(self, products: Iterable[Product]):
        ordered: List[Product] = list(products)
        by_id = {}
        for product in ordered:
            if product.id in by_id:
                raise ValueError(f"Producto duplicado en el catálogo: {product.id}")
            by_id[product.id] = product
        self._ordered = tuple(ordered)
        self._by_id = MappingProxyType(by_id)

    def price(self, product_id: str) -> Optional[Decimal]:
        product = self._by_id.get(product_id)
        return product.price if product else None

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._by_id

    def __len__(self) -> int:
        return len(self._ordered)

    def products(self):
        return self._ordered
