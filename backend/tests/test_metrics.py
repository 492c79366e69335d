"""
City Metrics Tests

Tests for averages, emergency counts and congestion indices.
"""

from citysim.models.junction import Junction, Reading
from citysim.simulation.metrics import compute_city_metrics, congestion_index, round_to


def make_junction(junction_id, readings):
    """Build a junction from {approach: (queue, wait, emergency)}"""
    approaches = tuple(readings.keys())
    return Junction(
        id=junction_id,
        name=f"Junction {junction_id}",
        approaches=approaches,
        baseline_cycle_seconds=120,
        active_approach=approaches[0],
        readings={
            approach: Reading(
                queue_length=queue,
                avg_wait_seconds=wait,
                emergency_vehicle=emergency
            )
            for approach, (queue, wait, emergency) in readings.items()
        },
        last_updated=0
    )


class TestCityMetrics:
    """Tests for compute_city_metrics"""

    def test_two_approach_congestion_index(self):
        """Test 10 + 20 queued over 2 approaches gives 0.38"""
        junction = make_junction("j-1", {
            "north": (10, 18, False),
            "south": (20, 36, False)
        })

        metrics = compute_city_metrics([junction])

        assert metrics.junction_congestion[0].congestion_index == 0.38
        assert metrics.avg_queue == 15.0
        assert metrics.avg_wait_seconds == 27.0
        assert metrics.active_emergencies == 0

    def test_averages_over_all_readings(self):
        """Test averages pool every junction approach"""
        a = make_junction("a", {"north": (10, 20, True), "south": (11, 20, False)})
        b = make_junction("b", {"east": (11, 21, True), "west": (2, 5, False)})

        metrics = compute_city_metrics([a, b])

        assert metrics.avg_queue == 8.5           # 34 / 4
        assert metrics.avg_wait_seconds == 16.5   # 66 / 4
        assert metrics.active_emergencies == 2
        assert [jc.id for jc in metrics.junction_congestion] == ["a", "b"]

    def test_average_rounds_to_one_decimal(self):
        """Test averages are rounded to one decimal place"""
        junction = make_junction("j", {
            "north": (10, 10, False),
            "south": (11, 11, False),
            "east": (11, 11, False)
        })

        metrics = compute_city_metrics([junction])

        assert metrics.avg_queue == 10.7

    def test_no_junctions(self):
        """Test empty input yields zero metrics"""
        metrics = compute_city_metrics([])

        assert metrics.avg_queue == 0
        assert metrics.avg_wait_seconds == 0
        assert metrics.active_emergencies == 0
        assert metrics.junction_congestion == []

    def test_saturated_junction(self):
        """Test full queues give an index of 1"""
        junction = make_junction("j", {"north": (40, 72, False), "south": (40, 72, False)})
        assert congestion_index(junction) == 1.0

    def test_to_dict(self):
        """Test serialisation uses API field names"""
        junction = make_junction("j-1", {"north": (10, 18, True), "south": (20, 36, False)})
        data = compute_city_metrics([junction]).to_dict()

        assert data == {
            'avgQueue': 15.0,
            'avgWaitSeconds': 27.0,
            'activeEmergencies': 1,
            'junctionCongestion': [
                {'id': 'j-1', 'name': 'Junction j-1', 'congestionIndex': 0.38}
            ]
        }


def test_round_to_half_up():
    """Test decimal rounding goes half-up"""
    assert round_to(0.375, 2) == 0.38
    assert round_to(0.125, 2) == 0.13
    assert round_to(10.25, 1) == 10.3


def test_round_to_uses_binary_value():
    """Test values stored just below a half round down"""
    assert round_to(12 / 160, 2) == 0.07
    assert round_to(1.005, 2) == 1.0


def test_congestion_index_of_light_four_way_junction():
    """Test 3 queued on each of 4 approaches gives 0.07"""
    junction = make_junction("j", {
        "north": (3, 5, False),
        "south": (3, 5, False),
        "east": (3, 5, False),
        "west": (3, 5, False)
    })
    assert congestion_index(junction) == 0.07
