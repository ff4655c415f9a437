# services/product_service.py
from typing import List

from domain.catalog import CatalogStore
from domain.models import Product


class ProductService:
    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    def list_products(self) -> List[Product]:
        """Caso de uso: listar todos los productos del catálogo."""
        return list(self.catalog.products())
