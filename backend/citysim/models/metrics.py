"""
City Metrics Models

Aggregated summary statistics derived from current junction state.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class JunctionCongestion:
    """Load fraction for one junction"""
    id: str
    name: str
    congestion_index: float = 0.0     # 0-1, 1 = every approach saturated

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'congestionIndex': self.congestion_index
        }


@dataclass
class CityMetrics:
    """City-wide traffic metrics"""
    avg_queue: float = 0.0
    avg_wait_seconds: float = 0.0
    active_emergencies: int = 0
    junction_congestion: List[JunctionCongestion] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'avgQueue': self.avg_queue,
            'avgWaitSeconds': self.avg_wait_seconds,
            'activeEmergencies': self.active_emergencies,
            'junctionCongestion': [jc.to_dict() for jc in self.junction_congestion]
        }
