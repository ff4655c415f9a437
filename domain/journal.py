# domain/journal.py
import threading
from typing import Iterable, Tuple

from domain.models import SaleRecord


class SalesJournal:
    """Historial de ventas, solo se agregan registros. Las lecturas son snapshots inmutables."""

    def __init__(self, records: Iterable[SaleRecord] = ()):
        self._lock = threading.Lock()
        self._records: Tuple[SaleRecord, ...] = tuple(records)

    def records(self) -> Tuple[SaleRecord, ...]:
        return self._records

    def with_record(self, record: SaleRecord) -> Tuple[SaleRecord, ...]:
        """Historial tal como quedaría tras agregar `record`, sin modificar el journal."""
        return self._records + (record,)

    def append(self, record: SaleRecord) -> None:
        with self._lock:
            self._records = self._records + (record,)

    def __len__(self) -> int:
        return len(self._records)
