import os
import tempfile
import unittest

from adapters.json_adapter import JSONFileStoreAdapter
from adapters.sqlite_adapter import SQLiteStoreAdapter
from domain.exceptions import DataLoadError
from services.context import build_context, build_repository
from test_json_adapter import PRODUCTS, STOCK, write_documents


class TestBuildContext(unittest.TestCase):
    """Inicialización del estado del proceso (carga todo o falla)"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_json_backend(self):
        write_documents(self.data_dir)

        repository = build_repository(backend="json", data_dir=self.data_dir)
        context = build_context(repository)

        self.assertIsInstance(repository, JSONFileStoreAdapter)
        self.assertEqual(len(context.catalog), 2)
        self.assertEqual(context.ledger.available("p1"), 5)
        self.assertEqual(len(context.journal), 1)
        self.assertIs(context.checkout.ledger, context.ledger)
        self.assertIs(context.reports.journal, context.journal)

    def test_sqlite_backend_seeds_database(self):
        write_documents(self.data_dir)
        db_name = os.path.join(self.data_dir, "pos.db")

        repository = build_repository(backend="sqlite", data_dir=self.data_dir, db_name=db_name, timeout=1)
        context = build_context(repository)

        self.assertIsInstance(repository, SQLiteStoreAdapter)
        self.assertTrue(os.path.exists(db_name))
        self.assertEqual(context.ledger.available("p2"), 8)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            build_repository(backend="mongo", data_dir=self.data_dir)

    def test_missing_data_is_fatal(self):
        with self.assertRaises(DataLoadError):
            build_context(build_repository(backend="json", data_dir=self.data_dir))

    def test_duplicate_ids_are_fatal(self):
        for products, stock in ((PRODUCTS + PRODUCTS[:1], STOCK), (PRODUCTS, STOCK + STOCK[:1])):
            with self.subTest(products=len(products), stock=len(stock)):
                write_documents(self.data_dir, products=products, stock=stock)
                with self.assertRaises(DataLoadError):
                    build_context(build_repository(backend="json", data_dir=self.data_dir))


if __name__ == '__main__':
    unittest.main()
