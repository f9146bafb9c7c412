"""Read-only client for the POS analytics and orders REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from posboard.utils.filter_state import FilterState

logger = logging.getLogger("posboard")


class FetchError(RuntimeError):
    """Network or remote failure while fetching analytics data."""


class AnalyticsClient:
    """Thin wrapper over ``requests.Session`` for the endpoints the dashboards read."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        self.session.headers.setdefault("Cache-Control", "no-cache")
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AnalyticsClient":
        return cls(
            base_url=config.get("API_BASE_URL", ""),
            token=config.get("API_TOKEN"),
            timeout=float(config.get("API_TIMEOUT_S", 15.0)),
        )

    # ---------- transport ----------

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            message = self._error_message(exc.response) or str(exc)
            logger.error("GET %s failed: %s", url, message)
            raise FetchError(message) from exc
        except requests.RequestException as exc:
            logger.error("GET %s failed: %s", url, exc)
            raise FetchError(f"Request failed: {exc}") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise FetchError(f"Response from {url} is not JSON") from exc

    @staticmethod
    def _error_message(response: Optional[requests.Response]) -> Optional[str]:
        if response is None:
            return None
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, Mapping) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}"

    @staticmethod
    def _unwrap(payload: Any) -> Dict[str, Any]:
        if isinstance(payload, Mapping) and isinstance(payload.get("data"), Mapping):
            return dict(payload["data"])
        return dict(payload) if isinstance(payload, Mapping) else {}

    @staticmethod
    def _analytics_params(filters: FilterState, *, with_limit: bool = False) -> Dict[str, Any]:
        params = filters.to_query_params()
        keep = {"start_date", "end_date", "interval"}
        if with_limit:
            keep.add("limit")
        return {k: v for k, v in params.items() if k in keep}

    # ---------- endpoints ----------

    def fetch_sales(self, filters: FilterState) -> Dict[str, Any]:
        """``GET /analytics/sales`` -> ``{sales_by_period, total_sales, ...}``."""
        return self._unwrap(self._get("analytics/sales", self._analytics_params(filters)))

    def fetch_products(self, filters: FilterState) -> Dict[str, Any]:
        """``GET /analytics/products`` -> ``{best_selling, least_selling, sales_by_period}``."""
        params = self._analytics_params(filters, with_limit=True)
        return self._unwrap(self._get("analytics/products", params))

    def fetch_overview(self, filters: FilterState) -> Dict[str, Any]:
        params = self._analytics_params(filters)
        params["interval"] = "yearly"
        return self._unwrap(self._get("analytics/overview", params))

    def fetch_statistics(self, filters: FilterState) -> Dict[str, Any]:
        return self._unwrap(self._get("analytics/statistics", self._analytics_params(filters)))

    def fetch_orders(self, filters: FilterState) -> Dict[str, Any]:
        """``GET /analytics/orders`` -> ``{orders_over_time, top_selling_products, least_selling_products}``."""
        return self._unwrap(self._get("analytics/orders", self._analytics_params(filters)))

    def fetch_profits(self, filters: FilterState) -> Dict[str, Any]:
        """``GET /analytics/profitsdash`` -> ``{profit_overview, total_profit_this_month, highest_profit}``."""
        return self._unwrap(self._get("analytics/profitsdash", self._analytics_params(filters)))

    def fetch_expenses(self, filters: FilterState) -> Dict[str, Any]:
        return self._unwrap(self._get("analytics/expenses", self._analytics_params(filters)))

    def fetch_ready_orders(self, filters: FilterState) -> List[Dict[str, Any]]:
        params = {k: v for k, v in filters.filters.items() if k != "category"}
        params["status"] = "ready"
        payload = self._get("orders/ready/", params)
        if isinstance(payload, Mapping):
            payload = payload.get("data")
        return [o for o in payload if isinstance(o, Mapping)] if isinstance(payload, list) else []

    def close(self) -> None:
        self.session.close()


__all__ = ["AnalyticsClient", "FetchError"]
