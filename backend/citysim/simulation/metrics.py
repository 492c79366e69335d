"""
City-Wide Metrics Module

Derive city-wide and per-junction summary statistics from the current
junction state.

Features:
- Average queue length and wait time over every approach reading
- Active emergency vehicle count
- Per-junction congestion index (load fraction assuming saturation)
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from citysim.models.junction import Junction
from citysim.models.metrics import CityMetrics, JunctionCongestion
from citysim.simulation.sensor_drift import MAX_QUEUE


def round_to(value: float, places: int) -> float:
    """Round half-up to a fixed number of decimal places

    Works on the exact binary value of the float, so 0.075 (stored just
    below) rounds to 0.07.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def congestion_index(junction: Junction) -> float:
    """
    Queue load of a junction relative to full saturation

    Returns:
        sum(queue) / (approach_count * MAX_QUEUE), rounded to 2 places
    """
    pressure = sum(reading.queue_length for reading in junction.readings.values())
    return round_to(pressure / (len(junction.approaches) * MAX_QUEUE), 2)


def compute_city_metrics(junctions: Iterable[Junction]) -> CityMetrics:
    """
    Calculate city-wide metrics

    Args:
        junctions: Current junction state

    Returns:
        CityMetrics; averages are 0 when there are no readings
    """
    metrics = CityMetrics()

    total_queue = 0
    total_wait = 0
    count = 0

    for junction in junctions:
        for reading in junction.readings.values():
            total_queue += reading.queue_length
            total_wait += reading.avg_wait_seconds
            count += 1
            if reading.emergency_vehicle:
                metrics.active_emergencies += 1

        metrics.junction_congestion.append(JunctionCongestion(
            id=junction.id,
            name=junction.name,
            congestion_index=congestion_index(junction)
        ))

    if count > 0:
        metrics.avg_queue = round_to(total_queue / count, 1)
        metrics.avg_wait_seconds = round_to(total_wait / count, 1)

    return metrics
