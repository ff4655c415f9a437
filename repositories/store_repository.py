# repositories/store_repository.py
from abc import ABC, abstractmethod
from typing import List, Sequence

from domain.models import Product, SaleRecord, StockEntry


class StoreRepository(ABC):
    """Interfaz abstracta para el almacenamiento del catálogo, el inventario y las ventas."""

    @abstractmethod
    def load_products(self) -> List[Product]:
        """Carga el catálogo completo. Lanza DataLoadError si no se puede leer."""
        pass

    @abstractmethod
    def load_stock(self) -> List[StockEntry]:
        """Carga el inventario completo. Lanza DataLoadError si no se puede leer."""
        pass

    @abstractmethod
    def load_sales(self) -> List[SaleRecord]:
        """Carga el historial de ventas en orden. Lanza DataLoadError si no se puede leer."""
        pass

    @abstractmethod
    def save_transaction(self, stock: Sequence[StockEntry], sales: Sequence[SaleRecord]) -> None:
        """
        Persiste juntos el inventario y el historial resultantes de una venta.

        `sales` es el historial completo, con la venta nueva al final. Lanza
        PersistenceFailure si la escritura no se completa.
        """
        pass
