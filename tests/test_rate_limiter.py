import unittest

from wamedia.services.rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSlidingWindowRateLimiter(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.limiter = SlidingWindowRateLimiter(3, 60, clock=self.clock)

    def test_blocks_after_limit(self):
        self.assertEqual([self.limiter.allow("1.2.3.4") for _ in range(4)], [True, True, True, False])

    def test_keys_are_independent(self):
        for _ in range(3):
            self.limiter.allow("a")
        self.assertFalse(self.limiter.allow("a"))
        self.assertTrue(self.limiter.allow("b"))

    def test_window_slides(self):
        self.limiter.allow("a")
        self.clock.now += 30
        self.limiter.allow("a")
        self.limiter.allow("a")
        self.assertFalse(self.limiter.allow("a"))
        self.clock.now += 30
        self.assertTrue(self.limiter.allow("a"))
        self.assertFalse(self.limiter.allow("a"))

    def test_retry_after(self):
        self.assertEqual(self.limiter.retry_after("a"), 0)
        for _ in range(3):
            self.limiter.allow("a")
        self.clock.now += 20
        self.assertEqual(self.limiter.retry_after("a"), 40)

    def test_reset(self):
        for _ in range(3):
            self.limiter.allow("a")
        self.limiter.reset()
        self.assertTrue(self.limiter.allow("a"))

    def test_expired_keys_are_dropped(self):
        limiter = SlidingWindowRateLimiter(5, 1, clock=self.clock)
        for i in range(1000):
            limiter.allow(f"10.0.{i // 256}.{i % 256}")
        self.assertEqual(limiter.tracked_keys(), 1000)
        self.clock.now += 100
        self.assertTrue(limiter.allow("x"))
        self.assertEqual(limiter.tracked_keys(), 1)

    def test_rotating_keys_stay_bounded(self):
        limiter = SlidingWindowRateLimiter(5, 10, clock=self.clock)
        for i in range(5000):
            limiter.allow(f"fake-{i}")
            self.clock.now += 0.1
        # uma chave por 0.1 s; só as das últimas duas janelas sobrevivem
        self.assertLessEqual(limiter.tracked_keys(), 200)

    def test_retry_after_drops_expired_key(self):
        self.limiter.allow("a")
        self.clock.now += 61
        self.assertEqual(self.limiter.retry_after("a"), 0)
        self.assertEqual(self.limiter.tracked_keys(), 0)

    def test_rejects_invalid_config(self):
        with self.assertRaises(ValueError):
            SlidingWindowRateLimiter(0, 60)
        with self.assertRaises(ValueError):
            SlidingWindowRateLimiter(10, 0)


if __name__ == "__main__":
    unittest.main()
