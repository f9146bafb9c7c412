"""Scalar rollups and order detail aggregation."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

ORDER_TYPES = ("dine_in", "take_out", "delivery")
PAYMENT_METHODS = ("cash", "credit_card")


def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_int(value: Any) -> int:
    return max(0, int(_to_float(value)))


def _breakdown(raw: Any, known_keys) -> Dict[str, float]:
    out = {key: 0.0 for key in known_keys}
    if not isinstance(raw, Mapping):
        return out
    for key, value in raw.items():
        out[str(key)] = _to_float(value)
    return out


@dataclass
class SummaryRecord:
    total_sales: float = 0.0
    total_sales_this_month: float = 0.0
    average_daily_sales: float = 0.0
    total_profits: float = 0.0
    total_expenses: float = 0.0
    total_orders: int = 0
    order_type_breakdown: Dict[str, float] = field(
        default_factory=lambda: {key: 0.0 for key in ORDER_TYPES}
    )
    payment_method_breakdown: Dict[str, float] = field(
        default_factory=lambda: {key: 0.0 for key in PAYMENT_METHODS}
    )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def pick_totals(raw: Optional[Mapping[str, Any]], keys) -> Dict[str, float]:
    """Scalar headline figures by key; missing or non-numeric values are 0."""
    raw = raw if isinstance(raw, Mapping) else {}
    return {key: _to_float(raw.get(key)) for key in keys}


def build_summary(raw: Optional[Mapping[str, Any]]) -> SummaryRecord:
    """Normalise a raw analytics summary. Missing or bad input gives zeros."""
    if not isinstance(raw, Mapping):
        return SummaryRecord()
    return SummaryRecord(
        total_sales=_to_float(raw.get("total_sales")),
        total_sales_this_month=_to_float(raw.get("total_sales_this_month")),
        average_daily_sales=_to_float(raw.get("average_daily_sales")),
        total_profits=_to_float(raw.get("total_profits")),
        total_expenses=_to_float(raw.get("total_expenses")),
        total_orders=_to_int(raw.get("total_orders")),
        order_type_breakdown=_breakdown(raw.get("order_type_breakdown"), ORDER_TYPES),
        payment_method_breakdown=_breakdown(raw.get("payment_method_breakdown"), PAYMENT_METHODS),
    )


@dataclass
class OrderLine:
    product_name: str
    quantity: int = 0
    total_price: float = 0.0


def aggregate_order_items(order: Optional[Mapping[str, Any]]) -> List[OrderLine]:
    """Group an order's line items by product name, summing quantity and price."""
    if not isinstance(order, Mapping):
        return []
    items = order.get("orderItems") or order.get("order_items") or []

    lines: Dict[str, OrderLine] = {}
    for item in items:
        if not isinstance(item, Mapping):
            continue
        product = item.get("product")
        name = product.get("name") if isinstance(product, Mapping) else None
        name = str(name or item.get("product_name") or "N/A")

        quantity = _to_int(item.get("quantity"))
        line = lines.setdefault(name, OrderLine(product_name=name))
        line.quantity += quantity
        line.total_price += quantity * _to_float(item.get("price"))
    return list(lines.values())


__all__ = [
    "OrderLine",
    "SummaryRecord",
    "aggregate_order_items",
    "build_summary",
    "pick_totals",
]
