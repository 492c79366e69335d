"""Junction simulation engine"""

from .modes import TrafficMode, ModeProfile, MODE_PROFILES, available_modes
from .engine import (
    SimulationEngine,
    DEFAULT_JUNCTIONS,
    get_simulation_engine,
    init_simulation_engine,
)
from .history import HistoryLedger
from .scheduler import StepScheduler, get_step_scheduler, init_step_scheduler

__all__ = [
    'TrafficMode',
    'ModeProfile',
    'MODE_PROFILES',
    'available_modes',
    'SimulationEngine',
    'DEFAULT_JUNCTIONS',
    'get_simulation_engine',
    'init_simulation_engine',
    'HistoryLedger',
    'StepScheduler',
    'get_step_scheduler',
    'init_step_scheduler',
]
