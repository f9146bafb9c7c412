import pytest

from posboard.services.api_client import FetchError
from posboard.services.scheduler import RefreshScheduler, RefreshState


def make_scheduler(timers, fetch, poll=0.5, debounce=0.5):
    return RefreshScheduler(fetch, poll, debounce, timer_factory=timers, name="test")


def test_start_fetches_and_arms_poll_timer(timers):
    calls = []
    scheduler = make_scheduler(timers, lambda: calls.append("fetch"))
    scheduler.start()
    assert calls == ["fetch"]
    assert len(timers.active()) == 1
    assert timers.active()[0].interval == 0.5
    assert timers.active()[0].daemon is True
    assert scheduler.state is RefreshState.IDLE


def test_poll_timer_rearms_after_firing(timers):
    calls = []
    scheduler = make_scheduler(timers, lambda: calls.append("fetch"), poll=2.0)
    scheduler.start()
    timers.active()[0].fire()
    assert calls == ["fetch", "fetch"]
    assert len(timers.timers) == 2
    assert timers.timers[-1].started


def test_debounce_restarts_on_every_change(timers):
    calls = []
    scheduler = make_scheduler(timers, lambda: calls.append("fetch"), debounce=0.3)
    scheduler.notify_change()
    scheduler.notify_change()
    scheduler.notify_change()
    first, second, third = timers.timers
    assert first.cancelled and second.cancelled and not third.cancelled
    third.fire()
    assert calls == ["fetch"]


def test_fetch_error_moves_to_failed_then_recovers(timers):
    outcomes = [FetchError("boom"), None]

    def fetch():
        outcome = outcomes.pop(0)
        if outcome:
            raise outcome

    scheduler = make_scheduler(timers, fetch)
    assert scheduler.run_now() is RefreshState.FAILED
    assert scheduler.last_error == "boom"
    assert scheduler.run_now() is RefreshState.IDLE
    assert scheduler.last_error is None


def test_state_is_fetching_during_fetch(timers):
    seen = []
    scheduler = make_scheduler(timers, lambda: seen.append(scheduler.state))
    scheduler.run_now()
    assert seen == [RefreshState.FETCHING]


def test_close_cancels_both_timers_and_silences_late_fires(timers):
    calls = []
    scheduler = make_scheduler(timers, lambda: calls.append("fetch"))
    scheduler.start()
    scheduler.notify_change()
    poll, debounce = timers.timers
    scheduler.close()
    assert poll.cancelled and debounce.cancelled
    # a timer thread that was already running when close() hit
    poll.function()
    debounce.function()
    assert calls == ["fetch"]
    assert len(timers.timers) == 2


def test_closed_scheduler_cannot_restart(timers):
    scheduler = make_scheduler(timers, lambda: None)
    scheduler.close()
    with pytest.raises(RuntimeError):
        scheduler.start()
    scheduler.notify_change()
    assert timers.timers == []


def test_invalid_intervals_are_rejected(timers):
    with pytest.raises(ValueError):
        make_scheduler(timers, lambda: None, poll=0)
    with pytest.raises(ValueError):
        make_scheduler(timers, lambda: None, debounce=-1)
