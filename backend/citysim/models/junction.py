"""
Junction and Reading Data Models

Value types for the junction simulation. Reading and Junction are immutable:
every step builds new instances through their constructors, so a reader
never observes a half-updated junction.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from citysim.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Reading:
    """Sensor reading for one approach of a junction"""
    queue_length: int
    avg_wait_seconds: int
    emergency_vehicle: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'queueLength': self.queue_length,
            'avgWaitSeconds': self.avg_wait_seconds,
            'emergencyVehicle': self.emergency_vehicle
        }


class JunctionDefinition(BaseModel):
    """
    Static junction configuration

    Supplied once at engine construction; the approach set never changes
    afterwards.
    """
    id: str = Field(min_length=1)
    name: str
    approaches: List[str] = Field(min_length=2)
    baselineCycleSeconds: int = Field(default=120, gt=0)

    @field_validator('approaches')
    @classmethod
    def approaches_unique(cls, value: List[str]) -> List[str]:
        if any(not approach for approach in value):
            raise ValueError("approach names must be non-empty")
        if len(set(value)) != len(value):
            raise ValueError("approach names must be unique")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "id": "junction-1",
                "name": "MG Road & Residency Road",
                "approaches": ["north", "south", "east", "west"],
                "baselineCycleSeconds": 120
            }
        }


@dataclass(frozen=True)
class Junction:
    """
    One signalled intersection

    Invariants checked on construction:
    - at least two approaches
    - readings keys equal the approaches
    - active_approach is one of the approaches
    """
    id: str
    name: str
    approaches: Tuple[str, ...]
    baseline_cycle_seconds: int
    active_approach: str
    readings: Mapping[str, Reading]
    last_updated: int
    override_until: Optional[int] = None

    def __post_init__(self):
        approaches = tuple(self.approaches)
        if len(approaches) < 2:
            raise InvalidArgumentError(f"Junction {self.id} needs at least two approaches")
        if set(self.readings.keys()) != set(approaches) or len(self.readings) != len(approaches):
            raise InvalidArgumentError(f"Readings for {self.id} do not match its approaches")
        if self.active_approach not in approaches:
            raise InvalidArgumentError(
                f"Approach {self.active_approach} not valid for {self.name}"
            )

        # Freeze readings in declared approach order
        ordered = {approach: self.readings[approach] for approach in approaches}
        object.__setattr__(self, 'approaches', approaches)
        object.__setattr__(self, 'readings', MappingProxyType(ordered))

    def has_approach(self, approach: str) -> bool:
        return approach in self.approaches

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'name': self.name,
            'approaches': list(self.approaches),
            'baselineCycleSeconds': self.baseline_cycle_seconds,
            'activeApproach': self.active_approach,
            'overrideUntil': self.override_until,
            'lastUpdated': self.last_updated,
            'readings': {
                approach: reading.to_dict()
                for approach, reading in self.readings.items()
            }
        }


@dataclass(frozen=True)
class JunctionSnapshot:
    """Visible state of one junction inside a history snapshot"""
    id: str
    name: str
    active_approach: str
    readings: Tuple[Tuple[str, Reading], ...]

    @classmethod
    def from_junction(cls, junction: Junction) -> 'JunctionSnapshot':
        return cls(
            id=junction.id,
            name=junction.name,
            active_approach=junction.active_approach,
            readings=tuple(junction.readings.items())
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'activeApproach': self.active_approach,
            'readings': {approach: reading.to_dict() for approach, reading in self.readings}
        }


@dataclass(frozen=True)
class HistorySnapshot:
    """Point-in-time copy of every junction's visible state"""
    timestamp: int
    junctions: Tuple[JunctionSnapshot, ...] = field(default_factory=tuple)

    @classmethod
    def capture(cls, timestamp: int, junctions: List[Junction]) -> 'HistorySnapshot':
        return cls(
            timestamp=timestamp,
            junctions=tuple(JunctionSnapshot.from_junction(j) for j in junctions)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'timestamp': self.timestamp,
            'junctions': [j.to_dict() for j in self.junctions]
        }


@dataclass(frozen=True)
class OverrideResult:
    """Override applied to a junction"""
    id: str
    active_approach: str
    override_until: int

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'activeApproach': self.active_approach,
            'overrideUntil': self.override_until
        }

