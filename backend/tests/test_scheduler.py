"""
Step Scheduler Tests

Tests for the periodic background driver of the simulation engine.
"""

import asyncio

import pytest

from citysim.simulation.engine import SimulationEngine
from citysim.simulation.scheduler import (
    StepScheduler,
    get_step_scheduler,
    init_step_scheduler,
)


class FailingEngine:
    """Engine stand-in whose step always fails"""

    def __init__(self):
        self.calls = 0

    def step(self):
        self.calls += 1
        raise RuntimeError("boom")


def test_scheduler_creation():
    """Test scheduler defaults"""
    scheduler = StepScheduler(SimulationEngine(seed=1))
    assert scheduler.interval_ms == 5000
    assert scheduler.running is False
    assert scheduler.get_statistics()["totalTicks"] == 0


def test_invalid_interval():
    """Test interval must be positive"""
    with pytest.raises(ValueError):
        StepScheduler(SimulationEngine(seed=1), interval_ms=0)


def test_tick_advances_engine():
    """Test a single tick steps the engine"""
    engine = SimulationEngine(seed=1)
    scheduler = StepScheduler(engine, interval_ms=1000)

    scheduler.tick()

    assert engine.step_count == 1
    assert scheduler.total_ticks == 1
    assert scheduler.last_tick_time > 0


def test_failed_tick_is_counted():
    """Test a failing step is logged and counted, not raised"""
    engine = FailingEngine()
    scheduler = StepScheduler(engine, interval_ms=1000)

    scheduler.tick()
    scheduler.tick()

    assert engine.calls == 2
    assert scheduler.failed_ticks == 2
    assert scheduler.total_ticks == 0


@pytest.mark.asyncio
async def test_scheduler_runs_periodically():
    """Test the background task steps the engine until stopped"""
    engine = SimulationEngine(seed=1)
    scheduler = StepScheduler(engine, interval_ms=10)

    await scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.2)
    await scheduler.stop()

    steps = engine.step_count
    assert steps > 0
    assert not scheduler.running

    await asyncio.sleep(0.05)
    assert engine.step_count == steps


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent():
    """Test repeated start/stop calls are safe"""
    scheduler = StepScheduler(SimulationEngine(seed=1), interval_ms=10)

    await scheduler.stop()
    await scheduler.start()
    first_task = scheduler._task
    await scheduler.start()
    assert scheduler._task is first_task

    await scheduler.stop()
    await scheduler.stop()
    assert scheduler._task is None


@pytest.mark.asyncio
async def test_loop_survives_failures():
    """Test the loop keeps running after failing ticks"""
    engine = FailingEngine()
    scheduler = StepScheduler(engine, interval_ms=10)

    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert engine.calls >= 2
    assert scheduler.failed_ticks == engine.calls


def test_global_scheduler():
    """Test global scheduler accessors"""
    engine = SimulationEngine(seed=1)
    scheduler = init_step_scheduler(engine, 250)
    assert get_step_scheduler() is scheduler
    assert scheduler.interval_ms == 250
