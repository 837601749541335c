import asyncio
import unittest

from planboard.navigation import STEP_INTERVAL, AsyncioTicker, HoldNavigator, ManualTicker


class TestHoldNavigator(unittest.TestCase):
    def setUp(self) -> None:
        self.steps = []
        self.ticker = ManualTicker()
        self.nav = HoldNavigator(self.steps.append, self.ticker)

    def test_hold_steps_immediately_then_per_tick(self) -> None:
        self.nav.start(1)
        self.assertEqual(self.steps, [1])
        self.assertTrue(self.nav.holding)
        self.assertEqual(self.ticker.advance(STEP_INTERVAL * 3), 3)
        self.assertEqual(self.steps, [1, 1, 1, 1])

    def test_stop_cancels_ticks(self) -> None:
        self.nav.start(-5)
        self.nav.stop()
        self.assertFalse(self.nav.holding)
        self.assertEqual(self.ticker.advance(10), 0)
        self.assertEqual(self.steps, [-1])
        self.nav.stop()  # idempotent

    def test_second_hold_replaces_first(self) -> None:
        self.nav.start(1)
        self.nav.start(-1)
        self.assertEqual(self.ticker.active, 1)
        self.ticker.advance(STEP_INTERVAL)
        self.assertEqual(self.steps, [1, -1, -1])

    def test_zero_direction_is_ignored(self) -> None:
        self.nav.start(0)
        self.nav.step(0)
        self.assertFalse(self.nav.holding)
        self.assertEqual(self.steps, [])

    def test_single_step(self) -> None:
        self.nav.step(3)
        self.nav.step(-2)
        self.assertEqual(self.steps, [1, -1])
        self.assertFalse(self.nav.holding)

    def test_manual_ticker_partial_periods(self) -> None:
        self.nav.start(1)
        self.assertEqual(self.ticker.advance(STEP_INTERVAL / 2), 0)
        self.assertEqual(self.ticker.advance(STEP_INTERVAL / 2), 1)


class TestAsyncioTickerWithoutLoop(unittest.TestCase):
    def test_no_loop_and_no_fallback_leaves_state_untouched(self) -> None:
        steps = []
        nav = HoldNavigator(steps.append, AsyncioTicker())
        with self.assertRaises(RuntimeError):
            nav.start(1)
        self.assertEqual(steps, [])
        self.assertFalse(nav.holding)
        self.assertEqual(nav.direction, 0)

    def test_no_loop_uses_fallback(self) -> None:
        steps = []
        fallback = ManualTicker()
        nav = HoldNavigator(steps.append, AsyncioTicker(fallback=fallback))
        nav.start(-1)
        self.assertTrue(nav.holding)
        self.assertEqual(fallback.advance(STEP_INTERVAL * 2), 2)
        nav.stop()
        self.assertEqual(steps, [-1, -1, -1])
        self.assertEqual(fallback.active, 0)


class TestAsyncioTicker(unittest.IsolatedAsyncioTestCase):
    async def test_ticks_on_running_loop_until_cancelled(self) -> None:
        hits = []
        nav = HoldNavigator(hits.append, AsyncioTicker(), period=0.01)
        nav.start(1)
        await asyncio.sleep(0.055)
        nav.stop()
        seen = len(hits)
        self.assertGreaterEqual(seen, 3)
        await asyncio.sleep(0.03)
        self.assertEqual(len(hits), seen)


if __name__ == "__main__":
    unittest.main(verbosity=2)
