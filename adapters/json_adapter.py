# adapters/json_adapter.py
import json
import logging
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, List, Sequence

from domain.exceptions import DataLoadError, PersistenceFailure
from domain.models import Product, SaleRecord, StockEntry
from repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

PRODUCTS_FILE = "products.json"
STOCK_FILE = "stock.json"
SALES_FILE = "sales.json"


class DecimalEncoder(json.JSONEncoder):
    """Serializa Decimal como número JSON (los importes tienen 2 decimales)."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


class JSONFileStoreAdapter(StoreRepository):
    """
    Implementación del repositorio sobre tres documentos JSON en un directorio.

    Las escrituras usan archivo temporal + os.replace, así un corte a mitad de
    escritura nunca deja un documento truncado.
    """

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)

    def _path(self, filename: str) -> Path:
        return self.data_dir / filename

    def _load_list(self, filename: str, build: Callable[[dict], Any]) -> list:
        path = self._path(filename)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f, parse_float=Decimal)
        except (OSError, ValueError) as e:
            raise DataLoadError(f"Error reading {path}: {e}") from e

        if not isinstance(raw, list):
            raise DataLoadError(f"{path} must contain a JSON array")
        try:
            return [build(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DataLoadError(f"Invalid record in {path}: {e}") from e

    def load_products(self) -> List[Product]:
        return self._load_list(PRODUCTS_FILE, Product.from_dict)

    def load_stock(self) -> List[StockEntry]:
        return self._load_list(STOCK_FILE, StockEntry.from_dict)

    def load_sales(self) -> List[SaleRecord]:
        return self._load_list(SALES_FILE, SaleRecord.from_dict)

    # -------------------------------------------------------------
    # Escritura
    # -------------------------------------------------------------
    def _stage(self, filename: str, payload: list) -> str:
        """Escribe el documento completo en un temporal del mismo directorio y devuelve su ruta."""
        fd, tmp_path = tempfile.mkstemp(prefix=f".{filename}.", suffix=".tmp", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, cls=DecimalEncoder, indent=2)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            _discard(tmp_path)
            raise
        return tmp_path

    def save_transaction(self, stock: Sequence[StockEntry], sales: Sequence[SaleRecord]) -> None:
        stock_path = self._path(STOCK_FILE)
        sales_path = self._path(SALES_FILE)
        staged = []
        try:
            # 1. Preparar ambos documentos antes de tocar los definitivos
            staged.append(self._stage(STOCK_FILE, [entry.to_dict() for entry in stock]))
            staged.append(self._stage(SALES_FILE, [sale.to_dict() for sale in sales]))
            previous_stock = stock_path.read_bytes() if stock_path.exists() else None
        except OSError as e:
            for tmp_path in staged:
                _discard(tmp_path)
            logger.error(f"❌ Error preparando escritura en {self.data_dir}: {e}")
            raise PersistenceFailure() from e

        stock_tmp, sales_tmp = staged
        try:
            os.replace(stock_tmp, stock_path)
        except OSError as e:
            _discard(stock_tmp)
            _discard(sales_tmp)
            logger.error(f"❌ Error escribiendo {stock_path}: {e}")
            raise PersistenceFailure() from e

        try:
            os.replace(sales_tmp, sales_path)
        except OSError as e:
            _discard(sales_tmp)
            logger.error(f"❌ Error escribiendo {sales_path}: {e}")
            # Revertir el inventario para que ambos documentos sigan consistentes
            if previous_stock is not None:
                self._restore(stock_path, previous_stock)
            raise PersistenceFailure() from e

        self._sync_dir()

    def _restore(self, path: Path, content: bytes) -> None:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".bak", dir=self.data_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            self._sync_dir()
        except OSError as e:
            _discard(tmp_path)
            logger.critical(f"🚨 No se pudo restaurar {path}, revisar manualmente: {e}")

    def _sync_dir(self) -> None:
        """fsync del directorio de datos, necesario para que los renombres sean durables."""
        if os.name == "nt":
            # Windows no permite abrir directorios con os.open
            return
        try:
            fd = os.open(self.data_dir, os.O_RDONLY)
        except OSError as e:
            logger.warning(f"No se pudo abrir {self.data_dir} para fsync: {e}")
            return
        try:
            os.fsync(fd)
        except OSError as e:
            logger.warning(f"fsync de {self.data_dir} falló: {e}")
        finally:
            os.close(fd)


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"No se pudo borrar el temporal {path}: {e}")
