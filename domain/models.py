# domain/models.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Redondea un importe a 2 decimales (half-up)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Convierte un valor numérico del documento a Decimal sin pasar por float."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field_name} debe ser numérico")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value))
        except ArithmeticError as e:
            raise ValueError(f"{field_name} no es un número válido: {value!r}") from e
    raise ValueError(f"{field_name} debe ser numérico")


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp ISO-8601 en UTC con milisegundos y sufijo Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Product:
    id: str
    price: Decimal
    # Datos de presentación (nombre, imagen, categoría...) tal como vienen del catálogo
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        product_id = data.get("id")
        if not isinstance(product_id, str) or not product_id:
            raise ValueError(f"Producto sin id válido: {data!r}")
        price = to_decimal(data.get("price"), f"price de {product_id}")
        meta = {k: v for k, v in data.items() if k not in ("id", "price")}
        return cls(id=product_id, price=price, meta=meta)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "price": self.price, **self.meta}


@dataclass
class StockEntry:
    id: str
    stock: int
    cost_price: Decimal

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StockEntry":
        product_id = data.get("id")
        if not isinstance(product_id, str) or not product_id:
            raise ValueError(f"Entrada de stock sin id válido: {data!r}")
        stock = data.get("stock")
        if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
            raise ValueError(f"stock inválido para {product_id}: {stock!r}")
        cost_price = to_decimal(data.get("costPrice"), f"costPrice de {product_id}")
        if cost_price < 0:
            raise ValueError(f"costPrice negativo para {product_id}")
        return cls(id=product_id, stock=stock, cost_price=cost_price)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "stock": self.stock, "costPrice": self.cost_price}


@dataclass(frozen=True)
class CartLine:
    id: str
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "quantity": self.quantity}


@dataclass(frozen=True)
class SaleRecord:
    timestamp: str
    items: Tuple[CartLine, ...]
    profit: Decimal

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaleRecord":
        timestamp = data.get("timestamp")
        if not isinstance(timestamp, str):
            raise ValueError(f"Venta sin timestamp: {data!r}")
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise ValueError(f"Venta sin items: {data!r}")
        items = tuple(
            CartLine(id=item["id"], quantity=int(item["quantity"])) for item in raw_items
        )
        profit = to_decimal(data.get("profit"), "profit")
        return cls(timestamp=timestamp, items=items, profit=profit)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "items": [line.to_dict() for line in self.items],
            "profit": self.profit,
        }


@dataclass(frozen=True)
class OutOfStockLine:
    id: str
    available: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "available": self.available}


@dataclass(frozen=True)
class SalesSummary:
    sales_count: int
    total_revenue: Decimal
    total_profit: Decimal

    def to_dict(self) -> Dict[str, Any]:
        # Los importes del reporte se exponen como cadenas con 2 decimales
        return {
            "salesCount": self.sales_count,
            "totalRevenue": f"{round_money(self.total_revenue)}",
            "totalProfit": f"{round_money(self.total_profit)}",
        }
