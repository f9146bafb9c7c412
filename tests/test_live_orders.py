import pytest

from posboard.services.api_client import FetchError
from posboard.services.live_orders import LiveOrdersFeed
from posboard.services.scheduler import RefreshState
from posboard.utils.filter_state import ValidationError

ORDER = {
    "id": 11,
    "order_type": "dine_in",
    "status": "ready",
    "orderItems": [
        {"product": {"name": "Burger"}, "quantity": 1, "price": 100},
        {"product": {"name": "Burger"}, "quantity": 2, "price": 100},
    ],
}


@pytest.fixture
def feed(fake_client, timers):
    fake_client.ready_orders = [ORDER]
    feed = LiveOrdersFeed(fake_client, poll_interval=0.5, debounce=0.5, page_size=2, timer_factory=timers)
    yield feed
    feed.close()


def test_start_fetches_and_snapshots_aggregated_orders(feed):
    feed.start()
    snap = feed.snapshot()
    assert snap["total_orders"] == 1
    assert snap["orders"][0]["lines"] == [{"product_name": "Burger", "quantity": 3, "total_price": 300.0}]
    assert snap["orders"][0]["total"] == 300.0
    assert snap["state"] == "idle"


def test_filter_update_is_debounced(feed, fake_client, timers):
    feed.start()
    feed.update_filters({"search": "burg"})
    feed.update_filters({"search": "burger"})
    assert len(fake_client.calls) == 1
    debounce = [t for t in timers.active() if t.interval == 0.5 and t is not timers.timers[0]]
    assert len(debounce) == 1
    debounce[0].fire()
    assert len(fake_client.calls) == 2
    assert fake_client.calls[-1]["filters"].filters == {"search": "burger"}


def test_invalid_update_keeps_previous_filters(feed):
    feed.update_filters({"order_type": "take_out"})
    with pytest.raises(ValidationError):
        feed.update_filters({"start_date": "2025-02-01", "end_date": "2025-01-01"})
    assert feed.filters.filters == {"order_type": "take_out"}
    assert feed.filters.end_date is None


def test_clear_filters_refreshes_immediately(feed, fake_client):
    feed.update_filters({"payment_method": "cash"})
    feed.clear_filters()
    assert feed.filters.filters == {}
    assert len(fake_client.calls) == 1


def test_fetch_failure_marks_feed_failed_and_empties_list(feed, fake_client):
    feed.start()
    fake_client.ready_orders = FetchError("orders offline")
    feed.scheduler.run_now("poll")
    snap = feed.snapshot()
    assert snap["state"] == RefreshState.FAILED.value
    assert snap["orders"] == []
    assert snap["error"] == "orders offline"


def test_snapshot_pages(feed, fake_client):
    fake_client.ready_orders = [dict(ORDER, id=i) for i in range(5)]
    feed.start()
    assert feed.snapshot(page=1)["total_pages"] == 3
    assert [o["id"] for o in feed.snapshot(page=3)["orders"]] == [4]
    assert feed.snapshot(page=99)["page"] == 3


def test_close_cancels_timers_and_ignores_late_fetches(feed, timers, fake_client):
    feed.start()
    feed.update_filters({"search": "x"})
    feed.close()
    assert timers.active() == []
    feed.pipeline.refresh(feed.filters)
    assert len(fake_client.calls) == 1
