# services/report_service.py
from decimal import Decimal

from domain.catalog import CatalogStore
from domain.journal import SalesJournal
from domain.models import SalesSummary


class ReportService:
    def __init__(self, catalog: CatalogStore, journal: SalesJournal):
        self.catalog = catalog
        self.journal = journal

    def summarize(self) -> SalesSummary:
        """
        Caso de uso: resumen de ventas.

        El ingreso usa el precio actual del catálogo (un producto que ya no
        existe suma cero); la ganancia suma la registrada en cada venta.
        """
        records = self.journal.records()
        revenue = Decimal("0")
        profit = Decimal("0")
        for sale in records:
            for line in sale.items:
                price = self.catalog.price(line.id)
                if price is not None:
                    revenue += price * line.quantity
            profit += sale.profit
        return SalesSummary(sales_count=len(records), total_revenue=revenue, total_profit=profit)
