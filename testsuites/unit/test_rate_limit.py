import threading
import time

import httpx
import pytest

from restactor.client import rate_limit
from restactor.client.rate_limit import RateLimitedTransport, RateLimiter, _as_window
from restactor.exceptions import ConfigurationError

pytestmark = pytest.mark.client


@pytest.mark.parametrize("rate", [0, -5])
def test_rate_must_be_positive(rate):
    with pytest.raises(ConfigurationError):
        RateLimiter(rate)


@pytest.mark.parametrize("rate, window", [(10, (10, 1)), (2.5, (5, 2)), (0.5, (1, 2))])
def test_fractional_rates_are_expressed_as_windows(rate, window):
    assert _as_window(rate) == window


def test_permits_are_limited_per_window():
    limiter = RateLimiter(2)
    assert limiter.try_acquire()
    assert limiter.try_acquire()
    assert not limiter.try_acquire()


def test_acquire_waits_until_permit_is_available(monkeypatch, log_records):
    limiter = RateLimiter(1)
    answers = iter([False, True])
    sleeps = []
    monkeypatch.setattr(limiter, "try_acquire", lambda: next(answers))
    monkeypatch.setattr(rate_limit.time, "sleep", sleeps.append)

    limiter.acquire()

    assert len(sleeps) == 1
    assert sleeps[0] > 0
    assert any(
        record["level"] == "WARNING" and "Rate limit of 1/s reached" in record["message"]
        for record in log_records
    )


def test_transport_acquires_before_sending():
    events = []

    class RecordingLimiter:
        def acquire(self):
            events.append("acquire")
            return 0.0

    def handler(request):
        events.append("send")
        return httpx.Response(204)

    transport = RateLimitedTransport(httpx.MockTransport(handler), RecordingLimiter())
    with httpx.Client(transport=transport) as client:
        client.get("http://api.test/items")

    assert events == ["acquire", "send"]


def run_in_threads(count, target):
    barrier = threading.Barrier(count)

    def worker():
        barrier.wait()
        target()

    threads = [threading.Thread(target=worker) for _ in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return threads


@pytest.mark.P1
def test_concurrent_try_acquire_grants_one_window_of_permits():
    limiter = RateLimiter(5)
    granted = []
    lock = threading.Lock()

    def take():
        result = limiter.try_acquire()
        with lock:
            granted.append(result)

    threads = run_in_threads(12, take)

    assert not any(thread.is_alive() for thread in threads)
    assert len(granted) == 12
    assert granted.count(True) == 5


@pytest.mark.P1
def test_concurrent_acquire_blocks_extra_threads_until_next_window():
    limiter = RateLimiter(5)
    finished = []
    lock = threading.Lock()
    started = time.monotonic()

    def take():
        limiter.acquire()
        with lock:
            finished.append(time.monotonic() - started)

    threads = run_in_threads(12, take)

    assert not any(thread.is_alive() for thread in threads)
    assert len(finished) == 12
    assert sum(1 for elapsed in finished if elapsed < 0.9) <= 5
