# domain/ledger.py
import threading
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from domain.exceptions import InsufficientStock, ProductNotFound
from domain.models import CartLine, OutOfStockLine, StockEntry


class InventoryLedger:
    """
    Inventario mutable: stock y costo por producto.

    Es la fuente de verdad para decidir si una línea se puede vender. Cada
    operación individual es atómica (lock interno); la atomicidad de un carrito
    completo la da el procesador de checkout, que trabaja sobre una copia
    (stage) y la confirma con commit() solo después de persistir.
    """

    def __init__(self, entries: Iterable[StockEntry]):
        self._lock = threading.RLock()
        self._entries: Dict[str, StockEntry] = {}
        for entry in entries:
            if entry.id in self._entries:
                raise ValueError(f"Entrada de stock duplicada: {entry.id}")
            if entry.stock < 0:
                raise ValueError(f"Stock negativo para {entry.id}")
            self._entries[entry.id] = replace(entry)

    def lookup(self, product_id: str) -> Optional[StockEntry]:
        with self._lock:
            entry = self._entries.get(product_id)
            return replace(entry) if entry else None

    def __contains__(self, product_id: str) -> bool:
        with self._lock:
            return product_id in self._entries

    def available(self, product_id: str) -> int:
        with self._lock:
            entry = self._entries.get(product_id)
            return entry.stock if entry else 0

    def cost_price(self, product_id: str) -> Optional[Decimal]:
        with self._lock:
            entry = self._entries.get(product_id)
            return entry.cost_price if entry else None

    def reserve(self, product_id: str, quantity: int) -> int:
        """
        Verifica y descuenta stock en un solo paso.

        Devuelve el stock restante. Lanza InsufficientStock si no alcanza, sin
        modificar nada.
        """
        if quantity <= 0:
            raise ValueError("La cantidad a reservar debe ser positiva")
        with self._lock:
            entry = self._entries.get(product_id)
            if entry is None:
                raise ProductNotFound(product_id)
            if entry.stock < quantity:
                raise InsufficientStock(product_id, quantity, entry.stock)
            entry.stock -= quantity
            return entry.stock

    def shortages(self, lines: Iterable[CartLine]) -> List[OutOfStockLine]:
        """Líneas que no se pueden cumplir, sumando cantidades de ids repetidos."""
        requested: Dict[str, int] = {}
        for line in lines:
            requested[line.id] = requested.get(line.id, 0) + line.quantity
        with self._lock:
            short = []
            for product_id, quantity in requested.items():
                entry = self._entries.get(product_id)
                available = entry.stock if entry else 0
                if available < quantity:
                    short.append(OutOfStockLine(id=product_id, available=available))
            return short

    def stage(self) -> "InventoryLedger":
        """Copia de trabajo independiente para aplicar reservas antes de confirmar."""
        with self._lock:
            return InventoryLedger(self._entries.values())

    def commit(self, staged: "InventoryLedger") -> None:
        """Reemplaza el estado vivo por el de una copia de trabajo ya persistida."""
        entries = {entry.id: replace(entry) for entry in staged.snapshot()}
        with self._lock:
            self._entries = entries

    def snapshot(self) -> List[StockEntry]:
        with self._lock:
            return [replace(entry) for entry in self._entries.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
