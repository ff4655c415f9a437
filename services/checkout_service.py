# services/checkout_service.py
import logging
import threading
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence

from config import TRANSACTION_TIMEOUT
from domain.catalog import CatalogStore
from domain.exceptions import InvalidCart, OutOfStock, PersistenceFailure, ProductNotFound, TransactionTimeout
from domain.journal import SalesJournal
from domain.ledger import InventoryLedger
from domain.models import CartLine, SaleRecord, round_money, utc_timestamp
from repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)


def check_cart(cart: Any) -> None:
    if not isinstance(cart, (list, tuple)) or len(cart) == 0:
        raise InvalidCart("Invalid cart data.")


def parse_line(item: Any) -> CartLine:
    """
    Normaliza una línea del carrito a CartLine.

    Acepta CartLine o diccionarios {id, quantity}. La cantidad debe ser un
    entero positivo; un float entero (2.0) se acepta como 2.
    """
    if isinstance(item, CartLine):
        product_id, quantity = item.id, item.quantity
    elif isinstance(item, dict):
        product_id, quantity = item.get("id"), item.get("quantity")
    else:
        raise InvalidCart("Invalid item in cart.")

    if not isinstance(product_id, str) or not product_id:
        raise InvalidCart("Invalid item in cart.")
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float, Decimal)):
        raise InvalidCart("Invalid item in cart.")
    try:
        whole = int(quantity)
    except (ValueError, OverflowError):
        # NaN / Infinity
        raise InvalidCart("Invalid item in cart.") from None
    if quantity != whole or whole <= 0:
        raise InvalidCart("Invalid item in cart.")
    return CartLine(id=product_id, quantity=whole)

class CheckoutService:
    """
    Caso de uso: registrar una venta (checkout).

    Toda la secuencia validar → reservar → persistir → confirmar corre dentro
    de un único lock, así dos carritos concurrentes nunca venden la misma
    unidad. Las reservas se aplican sobre una copia del inventario; el estado
    en memoria solo cambia después de que el repositorio confirma la escritura.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        ledger: InventoryLedger,
        journal: SalesJournal,
        repository: StoreRepository,
        timeout: float = TRANSACTION_TIMEOUT,
        clock: Callable[[], str] = utc_timestamp,
        lock: Optional[threading.Lock] = None,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.journal = journal
        self.repository = repository
        self.timeout = timeout
        self.clock = clock
        self._lock = lock or threading.Lock()

    def process(self, cart: Sequence[Any]) -> SaleRecord:
        check_cart(cart)

        if not self._lock.acquire(timeout=self.timeout):
            logger.warning(f"⏳ Lock de checkout no disponible tras {self.timeout}s")
            raise TransactionTimeout(self.timeout)
        try:
            return self._process_locked(cart)
        finally:
            self._lock.release()

    def _process_locked(self, cart: Sequence[Any]) -> SaleRecord:
        # 1. Línea por línea, en orden: la primera línea inválida o sin precio/costo decide el error
        lines = []
        for item in cart:
            line = parse_line(item)
            if line.id not in self.catalog or line.id not in self.ledger:
                logger.warning(f"Producto no encontrado: {line.id}")
                raise ProductNotFound(line.id)
            lines.append(line)

        # 2. Todo o nada: se revisa la disponibilidad de todo el carrito antes de descontar
        shortages = self.ledger.shortages(lines)
        if shortages:
            logger.warning(f"Venta rechazada por falta de stock: {[s.id for s in shortages]}")
            raise OutOfStock(shortages)

        # 3. Reservar sobre la copia de trabajo y acumular la ganancia sin redondeos intermedios
        staged = self.ledger.stage()
        profit = Decimal("0")
        for line in lines:
            staged.reserve(line.id, line.quantity)
            price = self.catalog.price(line.id)
            profit += (price - staged.cost_price(line.id)) * line.quantity

        sale = SaleRecord(timestamp=self.clock(), items=tuple(lines), profit=round_money(profit))

        # 4. Persistir antes de confirmar en memoria
        try:
            self.repository.save_transaction(staged.snapshot(), self.journal.with_record(sale))
        except PersistenceFailure:
            logger.error("❌ No se pudo persistir la venta, el inventario en memoria no cambia")
            raise

        # 5. Confirmar
        self.ledger.commit(staged)
        self.journal.append(sale)
        logger.info(f"✅ Venta registrada: {len(lines)} líneas, ganancia {sale.profit}")
        return sale
