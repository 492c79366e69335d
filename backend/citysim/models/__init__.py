"""
Data Models Package

Value types for the junction simulation.
Import from here for convenience.
"""

from .junction import (
    Reading,
    JunctionDefinition,
    Junction,
    JunctionSnapshot,
    HistorySnapshot,
    OverrideResult,
)

from .metrics import (
    JunctionCongestion,
    CityMetrics,
)

__all__ = [
    'Reading',
    'JunctionDefinition',
    'Junction',
    'JunctionSnapshot',
    'HistorySnapshot',
    'OverrideResult',
    'JunctionCongestion',
    'CityMetrics',
]
