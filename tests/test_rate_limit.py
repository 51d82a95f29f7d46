from __future__ import annotations

import pytest

from atithi_guardian.api.rate_limit import FixedWindowRateLimiter, parse_limit


class _Ticks:
    def __init__(self) -> None:
        self.t = 0.0

    def __call__(self) -> float:
        return self.t


def test_fixed_window_resets_after_window() -> None:
    ticks = _Ticks()
    limiter = FixedWindowRateLimiter(2, 60, clock=ticks)

    assert limiter.allow("ip")
    assert limiter.allow("ip")
    assert not limiter.allow("ip")
    # Other clients have their own window.
    assert limiter.allow("other-ip")

    ticks.t = 60.0
    assert limiter.allow("ip")


def test_parse_limit() -> None:
    assert parse_limit("20/900") == (20, 900.0)
    with pytest.raises(ValueError):
        parse_limit("twenty")
