"""
Tests for the sliding window rate limiter
"""
from storefront.core.rate_limit import RateLimiter


class FakeClock:

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRateLimiter:

    def test_counts_down_then_blocks(self):
        limiter = RateLimiter(window_seconds=60, clock=FakeClock())

        assert [limiter.hit("ip:1", 3).remaining for _ in range(3)] == [2, 1, 0]

        decision = limiter.hit("ip:1", 3)
        assert decision.allowed is False
        assert decision.retry_after == 61

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(window_seconds=60, clock=clock)
        limiter.hit("ip:1", 2)
        clock.now += 30
        limiter.hit("ip:1", 2)

        clock.now += 30
        assert limiter.hit("ip:1", 2).allowed is True
        assert limiter.hit("ip:1", 2).allowed is False

    def test_callers_are_independent(self):
        limiter = RateLimiter(clock=FakeClock())
        limiter.hit("ip:1", 1)

        assert limiter.hit("ip:1", 1).allowed is False
        assert limiter.hit("ip:2", 1).allowed is True

    def test_reset(self):
        limiter = RateLimiter(clock=FakeClock())
        limiter.hit("ip:1", 1)
        limiter.reset()

        assert limiter.hit("ip:1", 1).allowed is True
