"""Fetch-and-transform pipelines behind each dashboard panel."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional, Sequence

from posboard.utils.filter_state import FilterState

from .api_client import AnalyticsClient, FetchError
from .series import PALETTE_SIZE, build_overview, build_pivot, build_ranking, build_series
from .summary import build_summary, pick_totals

logger = logging.getLogger("posboard")

Fetch = Callable[[FilterState], Any]
Transform = Callable[[Any, FilterState], Dict[str, Any]]


class Pipeline:
    """
    One fetch-and-transform cycle with its own loading flag and error slot.

    Every ``refresh`` takes a sequence number. A response is applied only if
    no newer refresh has been issued since, so overlapping fetches cannot
    overwrite fresher data. After ``dispose`` nothing is applied.
    """

    def __init__(
        self,
        name: str,
        fetch: Fetch,
        transform: Transform,
        empty: Callable[[], Any] = dict,
    ):
        self.name = name
        self.fetch = fetch
        self.transform = transform
        self.empty = empty
        self._lock = threading.Lock()
        self._issued = 0
        self._disposed = False
        self.loading = False
        self.error: Optional[str] = None
        self._blank: Dict[str, Any] = transform(empty(), FilterState.reset())
        self.result: Dict[str, Any] = dict(self._blank)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def refresh(self, filters: FilterState, *, reraise: bool = False) -> bool:
        """Fetch and transform for ``filters``. Returns True if the result was applied."""
        with self._lock:
            if self._disposed:
                return False
            self._issued += 1
            seq = self._issued
            self.loading = True

        failure: Optional[FetchError] = None
        try:
            result = self.transform(self.fetch(filters), filters)
            error = None
        except FetchError as exc:
            logger.error("%s pipeline fetch failed: %s", self.name, exc)
            failure = exc
            result = self.transform(self.empty(), filters)
            error = str(exc) or f"Failed to load {self.name} data."
        except Exception:
            logger.exception("%s pipeline refresh raised unexpectedly", self.name)
            self._apply(seq, dict(self._blank), f"Failed to load {self.name} data.")
            raise

        applied = self._apply(seq, result, error)
        # a dropped stale failure must not mask a newer success
        if failure is not None and reraise and applied:
            raise failure
        return applied

    def _apply(self, seq: int, result: Dict[str, Any], error: Optional[str]) -> bool:
        with self._lock:
            if self._disposed:
                return False
            if seq < self._issued:
                logger.debug(
                    "%s: dropping response #%d, #%d already issued", self.name, seq, self._issued
                )
                return False
            self.result = result
            self.error = error
            self.loading = False
            return True

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            self.loading = False

    def to_dict(self) -> Dict[str, Any]:
        return {**self.result, "loading": self.loading, "error": self.error}


# ---------- dashboard panels ----------


def sales_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
    raw = raw if isinstance(raw, dict) else {}
    records = raw.get("sales_by_period") or raw.get("sales_over_time") or []
    return {
        "series": build_series(records, filters.interval).to_dict(),
        "summary": build_summary(raw).to_dict(),
    }


def make_products_transform(palette: Sequence[str]) -> Transform:
    palette_size = len(palette) or PALETTE_SIZE

    def products_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
        raw = raw if isinstance(raw, dict) else {}
        return {
            "pivot": build_pivot(
                raw.get("sales_by_period") or [], filters.interval, palette_size
            ).to_dict(palette),
            "best_selling": build_ranking(
                raw.get("best_selling") or raw.get("top_selling_products") or []
            ).to_dict(),
            "least_selling": build_ranking(
                raw.get("least_selling") or raw.get("least_selling_products") or []
            ).to_dict(),
        }

    return products_transform


def make_statistics_transform(palette: Sequence[str]) -> Transform:
    palette_size = len(palette) or PALETTE_SIZE

    def statistics_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
        raw = raw if isinstance(raw, dict) else {}
        chart = build_overview(raw.get("chart_data") or [], filters.interval, palette_size=palette_size)
        return {"chart": chart.to_dict(palette)}

    return statistics_transform


def overview_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
    return {"summary": build_summary(raw if isinstance(raw, dict) else None).to_dict()}


def order_stats_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
    raw = raw if isinstance(raw, dict) else {}
    return {
        "series": build_series(
            raw.get("orders_over_time") or [], filters.interval, value_key="orders"
        ).to_dict(),
        "best_selling": build_ranking(
            raw.get("top_selling_products") or [], value_key="quantity_sold"
        ).to_dict(),
        "least_selling": build_ranking(
            raw.get("least_selling_products") or [], value_key="quantity_sold"
        ).to_dict(),
    }


def profits_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
    raw = raw if isinstance(raw, dict) else {}
    return {
        "series": build_series(
            raw.get("profit_overview") or [], filters.interval, value_key="profit"
        ).to_dict(),
        "totals": pick_totals(raw, ("total_profit_this_month", "highest_profit")),
    }


def make_expenses_transform(palette: Sequence[str]) -> Transform:
    palette_size = len(palette) or PALETTE_SIZE

    def expenses_transform(raw: Any, filters: FilterState) -> Dict[str, Any]:
        raw = raw if isinstance(raw, dict) else {}
        categories = [
            {"name": str(c["name"]), "amount": pick_totals(c, ("amount",))["amount"]}
            for c in raw.get("expense_categories") or []
            if isinstance(c, dict) and c.get("name")
        ]
        # one dataset per category, keyed by the category name in each wide row
        metrics = {c["name"]: c["name"] for c in categories}
        chart = build_overview(
            raw.get("expenses_over_time") or [], filters.interval, metrics, palette_size
        )
        return {
            "chart": chart.to_dict(palette),
            "categories": categories,
            "totals": pick_totals(raw, ("total_expenses_this_month",)),
        }

    return expenses_transform


def dashboard_pipelines(client: AnalyticsClient, palette: Sequence[str]) -> Dict[str, Pipeline]:
    """Independent pipelines for one dashboard; a failing panel leaves the others alone."""
    return {
        "sales": Pipeline("sales", client.fetch_sales, sales_transform),
        "products": Pipeline("products", client.fetch_products, make_products_transform(palette)),
        "overview": Pipeline("overview", client.fetch_overview, overview_transform),
        "statistics": Pipeline(
            "statistics", client.fetch_statistics, make_statistics_transform(palette)
        ),
        "orders": Pipeline("orders", client.fetch_orders, order_stats_transform),
        "profits": Pipeline("profits", client.fetch_profits, profits_transform),
        "expenses": Pipeline("expenses", client.fetch_expenses, make_expenses_transform(palette)),
    }


__all__ = [
    "Pipeline",
    "dashboard_pipelines",
    "make_expenses_transform",
    "make_products_transform",
    "make_statistics_transform",
    "order_stats_transform",
    "overview_transform",
    "profits_transform",
    "sales_transform",
]
