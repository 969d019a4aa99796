import pytest

from errors import Unauthorized
from security import RateLimiter, check_order_secret


def test_gate_open_without_configured_secret():
    check_order_secret("", None)
    check_order_secret("", "anything")


def test_gate_requires_matching_secret():
    check_order_secret("s3cret", "s3cret")
    with pytest.raises(Unauthorized):
        check_order_secret("s3cret", None)
    with pytest.raises(Unauthorized):
        check_order_secret("s3cret", "wrong")


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_rate_limiter_blocks_after_max_until_window_resets():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.hit("1.2.3.4") is None
    assert limiter.hit("1.2.3.4") is None
    assert limiter.hit("1.2.3.4") == 60
    # other clients have their own counter
    assert limiter.hit("5.6.7.8") is None

    clock.now = 45
    assert limiter.hit("1.2.3.4") == 15

    clock.now = 60
    assert limiter.hit("1.2.3.4") is None


def test_rate_limiter_reset():
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    limiter.hit("ip")
    assert limiter.hit("ip") is not None
    limiter.reset()
    assert limiter.hit("ip") is None
