import os
import sqlite3
import tempfile
import unittest
from decimal import Decimal

from adapters.sqlite_adapter import SQLiteStoreAdapter
from database_setup import setup_database
from domain.exceptions import DataLoadError, PersistenceFailure
from domain.models import CartLine, SaleRecord, StockEntry
from services.context import build_context
from test_json_adapter import write_documents


class TestSQLiteStoreAdapter(unittest.TestCase):
    """Casos de prueba para el repositorio SQLite y su inicialización"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = self._tmp.name
        self.db_name = os.path.join(self.data_dir, "pos.db")
        write_documents(self.data_dir)
        setup_database(db_name=self.db_name, seed_dir=self.data_dir, timeout=1)
        self.adapter = SQLiteStoreAdapter(db_name=self.db_name, timeout=1)

    def tearDown(self):
        self._tmp.cleanup()

    def count(self, table):
        conn = sqlite3.connect(self.db_name)
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()

    def execute(self, statement, params=()):
        conn = sqlite3.connect(self.db_name)
        try:
            conn.execute(statement, params)
            conn.commit()
        finally:
            conn.close()

    def test_seeded_from_documents(self):
        products = self.adapter.load_products()

        self.assertEqual([p.id for p in products], ["p1", "p2"])
        self.assertEqual(products[1].price, Decimal("2.99"))
        self.assertEqual(products[0].meta["name"], "Café")
        self.assertEqual(
            self.adapter.load_stock()[0],
            StockEntry(id="p1", stock=5, cost_price=Decimal("6.0")),
        )
        self.assertEqual(len(self.adapter.load_sales()), 1)

    def test_setup_is_idempotent(self):
        setup_database(db_name=self.db_name, seed_dir=self.data_dir, timeout=1)

        self.assertEqual(self.count("Product"), 2)
        self.assertEqual(self.count("ProductStock"), 2)
        self.assertEqual(self.count("Sale"), 1)

    def test_save_transaction_appends_new_sales(self):
        sales = self.adapter.load_sales()
        new_sale = SaleRecord("2024-05-02T09:30:00.123Z", (CartLine("p1", 3),), Decimal("12.00"))
        stock = [
            StockEntry(id="p1", stock=2, cost_price=Decimal("6.0")),
            StockEntry(id="p2", stock=8, cost_price=Decimal("1.45")),
        ]

        self.adapter.save_transaction(stock, sales + [new_sale])

        self.assertEqual(self.adapter.load_stock(), stock)
        self.assertEqual(self.adapter.load_sales(), sales + [new_sale])
        self.assertEqual(self.count("Sale"), 2)

    def test_journal_shorter_than_table_is_rejected(self):
        with self.assertRaises(PersistenceFailure):
            self.adapter.save_transaction([StockEntry("p1", 0, Decimal("6.0"))], [])

        # La transacción se revierte completa
        self.assertEqual(self.adapter.load_stock()[0].stock, 5)

    def test_negative_stock_violates_constraint(self):
        with self.assertRaises(PersistenceFailure):
            self.adapter.save_transaction(
                [StockEntry("p1", -1, Decimal("6.0"))],
                self.adapter.load_sales(),
            )
        self.assertEqual(self.adapter.load_stock()[0].stock, 5)

    def test_invalid_rows_are_fatal(self):
        cases = [
            ("UPDATE ProductStock SET cost_price = '-3' WHERE product_id = 'p1'", self.adapter.load_stock),
            ("UPDATE Product SET price = 'abc' WHERE product_id = 'p1'", self.adapter.load_products),
            ("UPDATE Product SET meta = '[1, 2]' WHERE product_id = 'p2'", self.adapter.load_products),
            ("UPDATE Sale SET items = '[{\"quantity\": 1}]'", self.adapter.load_sales),
        ]
        for statement, loader in cases:
            with self.subTest(statement=statement):
                setup_database(db_name=self.db_name, seed_dir=self.data_dir, timeout=1)
                self.execute(statement)
                with self.assertRaises(DataLoadError):
                    loader()
                os.remove(self.db_name)

    def test_negative_cost_stops_startup(self):
        self.execute("UPDATE ProductStock SET cost_price = '-3' WHERE product_id = 'p1'")

        with self.assertRaises(DataLoadError):
            build_context(self.adapter)

    def test_missing_tables(self):
        adapter = SQLiteStoreAdapter(db_name=os.path.join(self.data_dir, "empty.db"), timeout=1)

        with self.assertRaises(DataLoadError):
            adapter.load_products()


if __name__ == '__main__':
    unittest.main()
