from nanoquiz.services.quiz.ratelimit import SlidingWindowRateLimiter


class Ticker:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_first_thirty_admitted_thirty_first_rejected():
    t = Ticker()
    limiter = SlidingWindowRateLimiter(window_sec=10, max_events=30, clock=t)
    results = []
    for _ in range(31):
        results.append(limiter.allow('1.2.3.4'))
        t.now += 0.1
    assert results[:30] == [True] * 30
    assert results[30] is False


def test_admission_resets_after_window_elapses():
    t = Ticker()
    limiter = SlidingWindowRateLimiter(window_sec=10, max_events=30, clock=t)
    for _ in range(31):
        limiter.allow('src')
    assert limiter.allow('src') is False
    t.now = 10.001
    assert limiter.allow('src') is True


def test_rolling_window_counts_only_recent_events():
    t = Ticker()
    limiter = SlidingWindowRateLimiter(window_sec=10, max_events=30, clock=t)
    for _ in range(20):
        limiter.allow('src')
    t.now = 6.0
    for _ in range(10):
        assert limiter.allow('src') is True
    # 30 events inside the window now
    assert limiter.allow('src') is False
    # the first 20 fall out at t > 10, the later 11 remain
    t.now = 10.5
    assert limiter.allow('src') is True


def test_sources_are_limited_independently():
    t = Ticker()
    limiter = SlidingWindowRateLimiter(window_sec=10, max_events=2, clock=t)
    assert limiter.allow('a')
    assert limiter.allow('a')
    assert not limiter.allow('a')
    assert limiter.allow('b')


def test_idle_sources_are_evicted():
    t = Ticker()
    limiter = SlidingWindowRateLimiter(window_sec=10, max_events=30, clock=t)
    limiter.allow('gone')
    limiter.allow('stays')
    t.now = 9.0
    limiter.allow('stays')
    t.now = 12.0
    limiter.allow('new')
    assert limiter.tracked_sources() == 2
