"""
Sensor Drift Model

Advances per-approach sensor readings by one period. Queue dynamics are a
stochastic approximation: a bounded random walk scaled by the active mode,
with emergency vehicles drawn independently every period.
"""

import math
import random
from typing import Iterable, Mapping, Dict

from citysim.models.junction import Reading
from citysim.simulation.modes import ModeProfile


MIN_QUEUE = 2
MAX_QUEUE = 40
MIN_WAIT_SECONDS = 5
WAIT_PER_VEHICLE = 1.8               # seconds of wait per queued vehicle

# Adaptive ("smart") signal timing smooths demand
SMART_QUEUE_ATTENUATION = 0.82
SMART_WAIT_ATTENUATION = 0.78

# Initial reading ranges
INITIAL_QUEUE_RANGE = (5, 15)
INITIAL_WAIT_RANGE = (20, 45)


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves rounding up"""
    return int(math.floor(value + 0.5))


def clamp_queue(queue_length: int) -> int:
    return min(MAX_QUEUE, max(MIN_QUEUE, queue_length))


def initial_reading(rng: random.Random) -> Reading:
    """Reading used when a junction is first created"""
    return Reading(
        queue_length=rng.randint(*INITIAL_QUEUE_RANGE),
        avg_wait_seconds=rng.randint(*INITIAL_WAIT_RANGE),
        emergency_vehicle=False
    )


def drift_reading(
    reading: Reading,
    profile: ModeProfile,
    smart_mode: bool,
    rng: random.Random
) -> Reading:
    """
    Produce the next reading for one approach

    Steps:
    1. Random walk: add a uniform integer in [-drift, +drift]
    2. Scale by the mode's queue multiplier (and the smart attenuation)
    3. Clamp to [MIN_QUEUE, MAX_QUEUE]
    4. Independent Bernoulli draw for an emergency vehicle
    5. Wait time proportional to queue, floored at MIN_WAIT_SECONDS

    Args:
        reading: Current reading
        profile: Drift parameters of the active mode
        smart_mode: Whether adaptive optimisation is enabled
        rng: Random source

    Returns:
        New Reading
    """
    delta = rng.randint(-profile.drift, profile.drift)
    queue_length = reading.queue_length + delta
    queue_length = round_half_up(queue_length * profile.queue_multiplier)
    if smart_mode:
        queue_length = round_half_up(queue_length * SMART_QUEUE_ATTENUATION)
    queue_length = clamp_queue(queue_length)

    emergency_vehicle = rng.random() < profile.emergency_probability

    avg_wait = round_half_up(queue_length * WAIT_PER_VEHICLE * profile.wait_factor)
    if smart_mode:
        avg_wait = round_half_up(avg_wait * SMART_WAIT_ATTENUATION)

    return Reading(
        queue_length=queue_length,
        avg_wait_seconds=max(MIN_WAIT_SECONDS, avg_wait),
        emergency_vehicle=emergency_vehicle
    )


def drift_readings(
    readings: Mapping[str, Reading],
    approaches: Iterable[str],
    profile: ModeProfile,
    smart_mode: bool,
    rng: random.Random
) -> Dict[str, Reading]:
    """Advance every approach of a junction, in declared order"""
    return {
        approach: drift_reading(readings[approach], profile, smart_mode, rng)
        for approach in approaches
    }
