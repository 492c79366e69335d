"""
Step Scheduler

Background task that advances the simulation engine on a fixed period
(default every 5 seconds).

Usage:
    scheduler = StepScheduler(engine, interval_ms=5000)
    await scheduler.start()
    # ... later ...
    await scheduler.stop()
"""

import asyncio
import time
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from citysim.simulation.engine import SimulationEngine


DEFAULT_STEP_INTERVAL_MS = 5000


class StepScheduler:
    """
    Periodic driver for SimulationEngine.step()

    A failing tick is logged and the loop keeps going.
    """

    def __init__(self,
                 engine: 'SimulationEngine',
                 interval_ms: int = DEFAULT_STEP_INTERVAL_MS):
        """
        Initialize step scheduler

        Args:
            engine: Engine to advance
            interval_ms: Milliseconds between steps
        """
        if interval_ms <= 0:
            raise ValueError("Step interval must be positive")

        self.engine = engine
        self.interval_ms = interval_ms

        self._running = False
        self._task: Optional[asyncio.Task] = None

        # Statistics
        self.total_ticks = 0
        self.failed_ticks = 0
        self.last_tick_time = 0.0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the background step task"""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._step_loop())
        print(f"[Scheduler] Step scheduler started ({self.interval_ms}ms interval)")

    async def stop(self):
        """Stop the background step task"""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            print("[Scheduler] Step scheduler stopped")

    async def _step_loop(self):
        """Main step loop"""
        while self._running:
            await asyncio.sleep(self.interval_ms / 1000)
            self.tick()

    def tick(self):
        """Run one engine step"""
        try:
            self.engine.step()
            self.total_ticks += 1
            self.last_tick_time = time.time()
        except Exception as e:
            self.failed_ticks += 1
            print(f"[ERROR] Simulation step failed: {e}")

    def get_statistics(self) -> dict:
        """Get scheduler statistics"""
        return {
            'running': self._running,
            'intervalMs': self.interval_ms,
            'totalTicks': self.total_ticks,
            'failedTicks': self.failed_ticks,
            'lastTickTime': self.last_tick_time
        }


# Global scheduler instance
_step_scheduler: Optional[StepScheduler] = None


def get_step_scheduler() -> Optional[StepScheduler]:
    """Get the global step scheduler instance"""
    return _step_scheduler


def init_step_scheduler(engine: 'SimulationEngine',
                        interval_ms: int = DEFAULT_STEP_INTERVAL_MS) -> StepScheduler:
    """Initialize the global step scheduler"""
    global _step_scheduler
    _step_scheduler = StepScheduler(engine, interval_ms)
    return _step_scheduler
