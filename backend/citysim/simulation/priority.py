"""
Priority Lane Selection

Chooses which approach of a junction holds the green light for the next
period. Emergency vehicles outrank any queue: the bonus equals MAX_QUEUE,
so an approach with an emergency always beats one without.
"""

from typing import Mapping, Sequence

from citysim.models.junction import Junction, Reading
from citysim.simulation.sensor_drift import MAX_QUEUE


EMERGENCY_BONUS = MAX_QUEUE


def is_override_active(junction: Junction, now_ms: int) -> bool:
    """Check whether a manual override is still pinning the junction"""
    return junction.override_until is not None and now_ms < junction.override_until


def priority_score(reading: Reading) -> int:
    return reading.queue_length + (EMERGENCY_BONUS if reading.emergency_vehicle else 0)


def highest_priority_approach(approaches: Sequence[str], readings: Mapping[str, Reading]) -> str:
    """Approach with the highest priority score; ties go to the first declared"""
    # max() keeps the first of equal scores
    return max(approaches, key=lambda approach: priority_score(readings[approach]))


def pick_priority_approach(junction: Junction, now_ms: int) -> str:
    """
    Select the approach that should get the green light

    An unexpired override keeps the current active approach. Otherwise the
    highest-scoring approach wins; ties go to the first declared approach.

    Args:
        junction: Junction with already-updated readings
        now_ms: Current time (epoch milliseconds)

    Returns:
        Approach name
    """
    if is_override_active(junction, now_ms):
        return junction.active_approach
    return highest_priority_approach(junction.approaches, junction.readings)
