"""Live ready-orders feed: one filter owner, one pipeline, one scheduler."""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from posboard.utils.filter_state import FilterState

from .api_client import AnalyticsClient
from .pipelines import Pipeline
from .scheduler import RefreshScheduler, TimerFactory
from .summary import aggregate_order_items

logger = logging.getLogger("posboard")


def orders_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
    orders: List[Dict[str, Any]] = []
    for order in raw or []:
        if not isinstance(order, Mapping):
            continue
        lines = aggregate_order_items(order)
        orders.append(
            {
                "id": order.get("id"),
                "order_type": order.get("order_type"),
                "payment_method": order.get("payment_method"),
                "status": order.get("status"),
                "created_at": order.get("createdAt") or order.get("created_at"),
                "lines": [asdict(line) for line in lines],
                "total": sum(line.total_price for line in lines),
            }
        )
    return {"orders": orders}


class LiveOrdersFeed:
    """
    Keeps the ready-orders list fresh by polling, and re-fetches after filter
    edits settle. ``update_filters`` is the only way to change the filters.
    """

    def __init__(
        self,
        client: AnalyticsClient,
        *,
        poll_interval: float = 0.5,
        debounce: float = 0.5,
        page_size: int = 20,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.page_size = max(1, int(page_size))
        self._filters = FilterState.reset()
        self._filters_lock = threading.Lock()
        self.pipeline = Pipeline("ready-orders", client.fetch_ready_orders, orders_transform, list)
        scheduler_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        self.scheduler = RefreshScheduler(
            self._refresh,
            poll_interval,
            debounce,
            name="ready-orders",
            **scheduler_kwargs,
        )

    @property
    def filters(self) -> FilterState:
        return self._filters

    def _refresh(self) -> None:
        self.pipeline.refresh(self._filters, reraise=True)

    def start(self) -> None:
        self.scheduler.start()

    def update_filters(self, changes: Mapping[str, Any]) -> FilterState:
        """Validate and store a filter change, then schedule a debounced refresh.

        Raises ``ValidationError`` and keeps the current filters on bad input.
        """
        with self._filters_lock:
            self._filters = self._filters.apply_change(changes)
            current = self._filters
        self.scheduler.notify_change()
        return current

    def clear_filters(self) -> FilterState:
        """Drop every free-text filter and refresh immediately."""
        with self._filters_lock:
            self._filters = FilterState.reset(limit=self._filters.limit)
        self.scheduler.run_now("clear")
        return self._filters

    def snapshot(self, page: int = 1) -> Dict[str, Any]:
        orders = self.pipeline.result.get("orders", [])
        total_pages = max(1, math.ceil(len(orders) / self.page_size))
        page = min(max(1, page), total_pages)
        start = (page - 1) * self.page_size
        return {
            "orders": orders[start:start + self.page_size],
            "page": page,
            "total_pages": total_pages,
            "total_orders": len(orders),
            "filters": self._filters.to_dict(),
            "state": self.scheduler.state.value,
            "loading": self.pipeline.loading,
            "error": self.pipeline.error,
        }

    def close(self) -> None:
        self.scheduler.close()
        self.pipeline.dispose()
        logger.info("Live orders feed closed")


__all__ = ["LiveOrdersFeed", "orders_transform"]
