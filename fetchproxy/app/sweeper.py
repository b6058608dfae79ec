import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Calls ``sweep`` every ``interval_seconds`` on the running event loop until stopped."""
    def __init__(self, name: str, sweep: Callable[[], int], interval_seconds: float):
        self.name = name
        self.sweep = sweep
        self.interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"sweep-{self.name}")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def run_once(self) -> int:
        try:
            removed = self.sweep()
        except Exception:
            logger.exception("Sweep of %s failed", self.name)
            return 0
        if removed:
            logger.debug("Swept %d expired %s entries", removed, self.name)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.run_once()
