import asyncio
import unittest

from fetchproxy.app.sweeper import PeriodicSweeper


class SweeperTests(unittest.IsolatedAsyncioTestCase):
    async def test_runs_periodically_until_stopped(self):
        calls = []
        sweeper = PeriodicSweeper("test", lambda: calls.append(1) or 0, interval_seconds=0.01)

        sweeper.start()
        await asyncio.sleep(0.1)
        await sweeper.stop()
        seen = len(calls)
        await asyncio.sleep(0.05)

        self.assertGreaterEqual(seen, 2)
        self.assertEqual(len(calls), seen)
        self.assertFalse(sweeper.running)

    async def test_failing_sweep_keeps_running(self):
        def boom():
            raise RuntimeError("sweep failed")

        sweeper = PeriodicSweeper("test", boom, interval_seconds=0.01)
        self.assertEqual(sweeper.run_once(), 0)

        sweeper.start()
        await asyncio.sleep(0.05)
        self.assertTrue(sweeper.running)
        await sweeper.stop()

    async def test_stop_without_start(self):
        await PeriodicSweeper("test", lambda: 0, interval_seconds=1).stop()


if __name__ == "__main__":
    unittest.main()
