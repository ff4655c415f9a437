# adapters/sqlite_adapter.py
import json
import logging
import sqlite3
from decimal import Decimal
from typing import Callable, List, Sequence, TypeVar

from config import DB_NAME, DB_TIMEOUT
from domain.exceptions import DataLoadError, PersistenceFailure
from domain.models import Product, SaleRecord, StockEntry
from repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLiteStoreAdapter(StoreRepository):
    """Implementación del repositorio para SQLite. Inventario y ventas se confirman en una sola transacción."""

    def __init__(self, db_name=DB_NAME, timeout=DB_TIMEOUT):
        self.db_name = db_name
        self.timeout = timeout

    def _get_connection(self):
        # El timeout evita esperar indefinidamente si otra conexión tiene la BD bloqueada
        conn = sqlite3.connect(self.db_name, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _fetch_all(self, query: str) -> List[sqlite3.Row]:
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise DataLoadError(f"Error opening {self.db_name}: {e}") from e
        try:
            return conn.execute(query).fetchall()
        except sqlite3.Error as e:
            raise DataLoadError(f"Error reading {self.db_name}: {e}") from e
        finally:
            conn.close()

    def _build_all(self, rows: List[sqlite3.Row], build: Callable[[sqlite3.Row], T], kind: str) -> List[T]:
        # Las filas pasan por las mismas validaciones que los documentos JSON
        try:
            return [build(row) for row in rows]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DataLoadError(f"Invalid {kind} row in {self.db_name}: {e}") from e

    def load_products(self) -> List[Product]:
        rows = self._fetch_all("SELECT product_id, price, meta FROM Product ORDER BY position")
        return self._build_all(
            rows,
            lambda row: Product.from_dict({
                **json.loads(row['meta'], parse_float=Decimal),
                "id": row['product_id'],
                "price": row['price'],
            }),
            "product",
        )

    def load_stock(self) -> List[StockEntry]:
        rows = self._fetch_all(
            "SELECT product_id, quantity, cost_price FROM ProductStock ORDER BY position"
        )
        return self._build_all(
            rows,
            lambda row: StockEntry.from_dict({
                "id": row['product_id'],
                "stock": row['quantity'],
                "costPrice": row['cost_price'],
            }),
            "stock",
        )

    def load_sales(self) -> List[SaleRecord]:
        rows = self._fetch_all("SELECT timestamp, items, profit FROM Sale ORDER BY sale_id")
        return self._build_all(
            rows,
            lambda row: SaleRecord.from_dict({
                "timestamp": row['timestamp'],
                "items": json.loads(row['items']),
                "profit": row['profit'],
            }),
            "sale",
        )

    def save_transaction(self, stock: Sequence[StockEntry], sales: Sequence[SaleRecord]) -> None:
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise PersistenceFailure() from e
        # Transacción explícita: BEGIN IMMEDIATE toma el lock de escritura desde el inicio
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.executemany(
                "UPDATE ProductStock SET quantity = ? WHERE product_id = ?",
                [(entry.stock, entry.id) for entry in stock],
            )
            stored = conn.execute("SELECT COUNT(*) FROM Sale").fetchone()[0]
            if stored > len(sales):
                raise sqlite3.IntegrityError(
                    f"La tabla Sale tiene {stored} registros y el historial solo {len(sales)}"
                )
            conn.executemany(
                "INSERT INTO Sale (timestamp, items, profit) VALUES (?, ?, ?)",
                [
                    (sale.timestamp, json.dumps([line.to_dict() for line in sale.items]), str(sale.profit))
                    for sale in sales[stored:]
                ],
            )
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            # Revertir si hay un error en cualquier operación
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.error(f"❌ Error de SQLite guardando la venta: {e}")
            raise PersistenceFailure() from e
        finally:
            conn.close()
