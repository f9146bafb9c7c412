from __future__ import annotations

from typing import Any, Callable, Dict, List

import pytest

from posboard.app import create_app


class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when told to."""

    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.function()


class TimerRecorder:
    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    def active(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]


class FakeClient:
    """In-memory analytics client; set an attribute to an exception to make it fail."""

    base_url = "http://api.test"

    def __init__(self):
        self.sales: Any = {
            "sales_by_period": [
                {"period": "2025-01", "total": "1200.50"},
                {"period": "2025-02", "total": 900},
            ],
            "total_sales": "2100.50",
            "order_type_breakdown": {"dine_in": 1500, "take_out": "600.5"},
        }
        self.products: Any = {
            "best_selling": [{"product_name": "Burger", "total_quantity": 40}],
            "least_selling": [{"product_name": "Salad", "total_quantity": 2}],
            "sales_by_period": [
                {"period": "2025-01", "product_name": "Burger", "total_revenue": 100},
                {"period": "2025-02", "product_name": "Burger", "total_revenue": 150},
                {"period": "2025-01", "product_name": "Fries", "total_revenue": 50},
            ],
        }
        self.overview: Any = {"total_sales": "10.00", "total_orders": 3}
        self.statistics: Any = {
            "chart_data": [
                {"period": "2025-01", "total_sales": "10", "total_expenses": 4, "total_profits": 6, "total_orders": 3},
            ]
        }
        self.order_stats: Any = {
            "orders_over_time": [{"date": "2025-01", "orders": 12}, {"date": "2025-02", "orders": "7"}],
            "top_selling_products": [{"product_name": "Burger", "quantity_sold": 30}],
            "least_selling_products": [{"product_name": "Salad", "quantity_sold": 1}],
        }
        self.profits: Any = {
            "profit_overview": [{"date": "2025-01", "profit": "250.5"}, {"date": "2025-02", "profit": -20}],
            "total_profit_this_month": "-20",
            "highest_profit": 250.5,
        }
        self.expenses: Any = {
            "expenses_over_time": [
                {"date": "2025-01", "Rent": 1000, "Supplies": "120.25"},
                {"date": "2025-02", "Rent": 1000},
            ],
            "expense_categories": [{"name": "Rent", "amount": 2000}, {"name": "Supplies", "amount": "120.25"}],
            "total_expenses_this_month": 1000,
        }
        self.ready_orders: Any = []
        self.calls: List[Dict[str, Any]] = []

    def _answer(self, name: str, filters):
        self.calls.append({"endpoint": name, "filters": filters})
        value = getattr(self, name)
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_sales(self, filters):
        return self._answer("sales", filters)

    def fetch_products(self, filters):
        return self._answer("products", filters)

    def fetch_overview(self, filters):
        return self._answer("overview", filters)

    def fetch_statistics(self, filters):
        return self._answer("statistics", filters)

    def fetch_orders(self, filters):
        return self._answer("order_stats", filters)

    def fetch_profits(self, filters):
        return self._answer("profits", filters)

    def fetch_expenses(self, filters):
        return self._answer("expenses", filters)

    def fetch_ready_orders(self, filters):
        return self._answer("ready_orders", filters)


@pytest.fixture
def timers() -> TimerRecorder:
    return TimerRecorder()


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def app(fake_client):
    app = create_app(
        {
            "TESTING": True,
            "API_BASE_URL": "http://api.test",
            "LIVE_ORDERS_ENABLED": False,
            "REJECT_FUTURE_END_DATE": True,
        }
    )
    app.extensions["api_client"] = fake_client
    return app


@pytest.fixture
def client(app):
    return app.test_client()

