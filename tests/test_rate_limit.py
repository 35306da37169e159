from schoolpay.services.rate_limit import RateLimiter


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_limiter(clock, **kwargs):
    return RateLimiter(max_attempts=3, window_seconds=3600, clock=clock, **kwargs)


def test_allows_up_to_max_attempts():
    limiter = make_limiter(FakeClock())
    results = [limiter.check("payroll:generate:u1") for _ in range(3)]
    assert [r.allowed for r in results] == [True, True, True]
    assert [r.remaining_attempts for r in results] == [2, 1, 0]


def test_blocks_after_limit_for_twice_the_window():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for _ in range(3):
        limiter.check("k")

    blocked = limiter.check("k")
    assert not blocked.allowed
    assert blocked.blocked_until is not None

    clock.advance(3601)
    assert not limiter.check("k").allowed

    clock.advance(3600)
    assert limiter.check("k").allowed


def test_window_resets_attempts():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for _ in range(3):
        limiter.check("k")
    clock.advance(3601)
    result = limiter.check("k")
    assert result.allowed
    assert result.remaining_attempts == 2


def test_keys_are_independent():
    limiter = make_limiter(FakeClock())
    for _ in range(4):
        limiter.check("a")
    assert limiter.check("b").allowed


def test_clear_and_cleanup():
    clock = FakeClock()
    limiter = make_limiter(clock, block_seconds=10)
    for _ in range(4):
        limiter.check("a")
    limiter.clear("a")
    assert limiter.check("a").allowed

    limiter.check("b")
    clock.advance(3601)
    limiter.cleanup()
    assert limiter._entries == {}


def test_stale_keys_are_pruned_during_checks():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for i in range(1000):
        limiter.check(f"payroll:generate:user-{i}")

    clock.advance(3 * 3600)
    limiter.check("payroll:generate:fresh")

    assert list(limiter._entries) == ["payroll:generate:fresh"]


def test_blocked_keys_survive_pruning():
    clock = FakeClock()
    limiter = make_limiter(clock, cleanup_interval=0)
    for _ in range(4):
        limiter.check("k")
    clock.advance(3601)
    limiter.check("other")
    assert "k" in limiter._entries
    assert not limiter.check("k").allowed
