# services/context.py
import logging
from dataclasses import dataclass

from adapters.json_adapter import JSONFileStoreAdapter
from adapters.sqlite_adapter import SQLiteStoreAdapter
from config import DATA_DIR, DB_NAME, DB_TIMEOUT, STORE_BACKEND, TRANSACTION_TIMEOUT
from database_setup import setup_database
from domain.catalog import CatalogStore
from domain.exceptions import DataLoadError
from domain.journal import SalesJournal
from domain.ledger import InventoryLedger
from repositories.store_repository import StoreRepository
from services.checkout_service import CheckoutService
from services.product_service import ProductService
from services.report_service import ReportService

logger = logging.getLogger(__name__)


@dataclass
class PosContext:
    """Estado del proceso: catálogo, inventario e historial cargados, y los casos de uso que los usan."""

    catalog: CatalogStore
    ledger: InventoryLedger
    journal: SalesJournal
    repository: StoreRepository
    products: ProductService
    checkout: CheckoutService
    reports: ReportService


def build_repository(backend=STORE_BACKEND, data_dir=DATA_DIR, db_name=DB_NAME, timeout=DB_TIMEOUT) -> StoreRepository:
    if backend == "json":
        return JSONFileStoreAdapter(data_dir)
    if backend == "sqlite":
        setup_database(db_name=db_name, seed_dir=data_dir, timeout=timeout)
        return SQLiteStoreAdapter(db_name=db_name, timeout=timeout)
    raise ValueError(f"STORE_BACKEND desconocido: {backend!r}")


def build_context(repository: StoreRepository, transaction_timeout: float = TRANSACTION_TIMEOUT) -> PosContext:
    """
    Carga todo o falla. Si cualquiera de los tres conjuntos de datos no se
    puede leer o es inválido se lanza DataLoadError y el servicio no arranca.
    """
    products = repository.load_products()
    stock = repository.load_stock()
    sales = repository.load_sales()

    try:
        catalog = CatalogStore(products)
        ledger = InventoryLedger(stock)
    except ValueError as e:
        raise DataLoadError(str(e)) from e
    journal = SalesJournal(sales)

    logger.info(
        f"📦 Datos cargados: {len(catalog)} productos, {len(ledger)} entradas de stock, {len(journal)} ventas"
    )
    return PosContext(
        catalog=catalog,
        ledger=ledger,
        journal=journal,
        repository=repository,
        products=ProductService(catalog),
        checkout=CheckoutService(catalog, ledger, journal, repository, timeout=transaction_timeout),
        reports=ReportService(catalog, journal),
    )
