from __future__ import annotations

import itertools
import threading

import pytest

from services.poller import SnapshotPoller


def test_poller_emits_each_fetch_until_max_ticks() -> None:
    counter = itertools.count(1)
    received: list[int] = []
    poller = SnapshotPoller(
        fetch=lambda: next(counter),
        subscriber=received.append,
        interval=0.01,
        max_ticks=3,
    )

    poller.start()
    assert poller.wait(timeout=5)
    poller.stop(timeout=5)

    assert received == [1, 2, 3]
    assert poller.ticks == 3
    assert poller.running is False


def test_poller_skips_failed_fetches() -> None:
    calls = itertools.count(1)
    received: list[int] = []

    def fetch() -> int:
        call = next(calls)
        if call == 2:
            raise RuntimeError("log busy")
        return call

    poller = SnapshotPoller(fetch=fetch, subscriber=received.append, interval=0.01, max_ticks=3)

    poller.start()
    assert poller.wait(timeout=5)
    poller.stop(timeout=5)

    assert received == [1, 3]


def test_poller_stop_cancels_pending_wait() -> None:
    first_tick = threading.Event()
    received: list[str] = []

    def subscriber(value: str) -> None:
        received.append(value)
        first_tick.set()

    poller = SnapshotPoller(fetch=lambda: "snapshot", subscriber=subscriber, interval=60)

    poller.start()
    assert first_tick.wait(timeout=5)
    poller.stop(timeout=5)

    assert received == ["snapshot"]
    assert poller.running is False


def test_poller_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        SnapshotPoller(fetch=lambda: None, subscriber=lambda _value: None, interval=0)
