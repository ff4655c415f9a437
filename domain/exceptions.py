# domain/exceptions.py
from typing import Any, Dict, List

from domain.models import OutOfStockLine


class PosError(Exception):
    """Error base del punto de venta. Cada subclase define su código HTTP."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class InvalidCart(PosError):
    """Carrito vacío o con líneas mal formadas. No modifica estado."""

    status_code = 400


class ProductNotFound(PosError):
    status_code = 404

    def __init__(self, product_id: str):
        super().__init__(f"Product not found for ID: {product_id}")
        self.product_id = product_id


class InsufficientStock(PosError):
    """Una reserva individual sobre el inventario no puede cumplirse."""

    status_code = 400

    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product_id}: requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class OutOfStock(PosError):
    """Una o más líneas del carrito superan el stock disponible."""

    status_code = 400

    def __init__(self, items: List[OutOfStockLine]):
        super().__init__("Some items are out of stock")
        self.items = list(items)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "items": [item.to_dict() for item in self.items]}


class PersistenceFailure(PosError):
    status_code = 500

    def __init__(self, message: str = "Failed to save sale data."):
        super().__init__(message)


class TransactionTimeout(PosError):
    """No se obtuvo el lock de la transacción dentro del tiempo configurado."""

    status_code = 503

    def __init__(self, timeout: float):
        super().__init__("Checkout is busy, please retry.")
        self.timeout = timeout


class DataLoadError(PosError):
    """Falla al cargar catálogo, inventario o historial. Es fatal en el arranque."""
