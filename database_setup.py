# database_setup.py
import json
import logging
import sqlite3

from adapters.json_adapter import JSONFileStoreAdapter, DecimalEncoder
from config import DATA_DIR, DB_NAME, DB_TIMEOUT

logger = logging.getLogger(__name__)

SCHEMA = '''
    CREATE TABLE IF NOT EXISTS Product (
        product_id VARCHAR(50) PRIMARY KEY,
        price TEXT NOT NULL,
        meta TEXT NOT NULL DEFAULT '{}',
        position INTEGER NOT NULL
    );
    CREATE TABLE IF NOT EXISTS ProductStock (
        product_id VARCHAR(50) PRIMARY KEY,
        quantity INT NOT NULL CHECK (quantity >= 0),
        cost_price TEXT NOT NULL,
        position INTEGER NOT NULL
    );
    CREATE TABLE IF NOT EXISTS Sale (
        sale_id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        items TEXT NOT NULL,
        profit TEXT NOT NULL
    );
'''


def setup_database(db_name=DB_NAME, seed_dir=DATA_DIR, timeout=DB_TIMEOUT):
    """
    Crea las tablas si no existen y, si están vacías, las puebla con los
    documentos JSON de `seed_dir` (products.json, stock.json, sales.json).
    """
    conn = sqlite3.connect(db_name, timeout=timeout)
    try:
        cursor = conn.cursor()
        cursor.executescript(SCHEMA)

        # Llenado de datos solo si el catálogo está vacío
        cursor.execute("SELECT COUNT(*) FROM Product")
        if cursor.fetchone()[0] == 0 and seed_dir:
            logger.info(f"Creando registros de base de datos desde {seed_dir}...")
            source = JSONFileStoreAdapter(seed_dir)
            products = source.load_products()
            stock = source.load_stock()
            sales = source.load_sales()

            cursor.executemany(
                "INSERT INTO Product (product_id, price, meta, position) VALUES (?, ?, ?, ?)",
                [
                    (p.id, str(p.price), json.dumps(p.meta, cls=DecimalEncoder), position)
                    for position, p in enumerate(products)
                ],
            )
            cursor.executemany(
                "INSERT INTO ProductStock (product_id, quantity, cost_price, position) VALUES (?, ?, ?, ?)",
                [(s.id, s.stock, str(s.cost_price), position) for position, s in enumerate(stock)],
            )
            cursor.executemany(
                "INSERT INTO Sale (timestamp, items, profit) VALUES (?, ?, ?)",
                [
                    (sale.timestamp, json.dumps([line.to_dict() for line in sale.items]), str(sale.profit))
                    for sale in sales
                ],
            )
            logger.info(
                f"Registros creados exitosamente: {len(products)} productos, "
                f"{len(stock)} entradas de stock, {len(sales)} ventas."
            )

        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    setup_database()
