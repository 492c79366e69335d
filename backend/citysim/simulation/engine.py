"""
Simulation Engine

Owns every junction, the traffic mode, the adaptive ("smart") flag and the
history ledger, and is the only code that mutates them.

Concurrency: one lock guards all mutable state. step() builds the next
junction batch from immutable values and publishes it with a single
assignment, so queries see either the pre-step or post-step state in full.
Mutations take the same lock and land entirely before or after a step.
"""

import math
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from citysim.exceptions import InvalidArgumentError, NotFoundError
from citysim.models.junction import (
    HistorySnapshot,
    Junction,
    JunctionDefinition,
    OverrideResult,
)
from citysim.simulation.history import HISTORY_CAPACITY, HistoryLedger
from citysim.simulation.metrics import compute_city_metrics
from citysim.simulation.modes import (
    ModeProfile,
    TrafficMode,
    available_modes,
    get_mode_profile,
    parse_mode,
)
from citysim.simulation.priority import highest_priority_approach, is_override_active
from citysim.simulation.sensor_drift import drift_readings, initial_reading


DEFAULT_OVERRIDE_DURATION = 90       # seconds
DEFAULT_HISTORY_LIMIT = 20

DEFAULT_JUNCTIONS: List[Dict[str, Any]] = [
    {
        "id": "junction-1",
        "name": "MG Road & Residency Road",
        "approaches": ["north", "south", "east", "west"],
        "baselineCycleSeconds": 120
    },
    {
        "id": "junction-2",
        "name": "Indiranagar 100ft & CMH Road",
        "approaches": ["north", "south", "east", "west"],
        "baselineCycleSeconds": 110
    },
    {
        "id": "junction-3",
        "name": "Silk Board Junction",
        "approaches": ["north", "south", "east", "west", "service"],
        "baselineCycleSeconds": 150
    },
]

JunctionConfig = Union[JunctionDefinition, Dict[str, Any]]


def load_definitions(junctions: Sequence[JunctionConfig]) -> List[JunctionDefinition]:
    """
    Validate static junction configuration

    Raises:
        InvalidArgumentError: malformed definition or duplicate junction id
    """
    definitions = []
    seen_ids = set()

    for raw in junctions:
        try:
            definition = (
                raw if isinstance(raw, JunctionDefinition)
                else JunctionDefinition.model_validate(raw)
            )
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid junction definition: {e}")

        if definition.id in seen_ids:
            raise InvalidArgumentError(f"Duplicate junction id {definition.id}")
        seen_ids.add(definition.id)
        definitions.append(definition)

    return definitions


def _duration_to_ms(duration_seconds: Any) -> int:
    """
    Convert an override duration to whole milliseconds

    Raises:
        InvalidArgumentError: not a positive number, or too large to represent
    """
    error = InvalidArgumentError(
        f"Override duration must be a positive number of seconds, got {duration_seconds}"
    )
    if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, (int, float)):
        raise error

    try:
        duration_ms = float(duration_seconds) * 1000
    except OverflowError:
        raise error

    if not math.isfinite(duration_ms) or duration_ms <= 0:
        raise error
    return int(round(duration_ms))


class SimulationEngine:
    """
    Periodic junction simulation

    Handles sensor drift, priority lane selection, history snapshots and
    operator controls (mode, smart mode, signal overrides).

    Usage:
        engine = SimulationEngine(seed=42)
        engine.step()
        state = engine.get_state()
    """

    def __init__(self,
                 junctions: Optional[Sequence[JunctionConfig]] = None,
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None,
                 clock: Optional[Callable[[], float]] = None,
                 history_capacity: int = HISTORY_CAPACITY,
                 mode: Union[str, TrafficMode] = TrafficMode.NORMAL,
                 smart_mode: bool = True):
        """
        Initialize simulation engine

        Args:
            junctions: Junction definitions (default: three Bengaluru junctions)
            rng: Random source for drift and emergency draws
            seed: Seed for a new random source (ignored when rng is given)
            clock: Returns current time in seconds (default time.time)
            history_capacity: Snapshots kept in the history ledger
            mode: Initial traffic mode
            smart_mode: Initial adaptive optimisation flag
        """
        self._lock = threading.Lock()
        self._rng = rng if rng is not None else random.Random(seed)
        self._clock = clock or time.time

        self._definitions = load_definitions(
            junctions if junctions is not None else DEFAULT_JUNCTIONS
        )
        self._mode = parse_mode(mode)
        self._smart_mode = bool(smart_mode)
        self._history = HistoryLedger(capacity=history_capacity)

        # Statistics
        self._step_count = 0
        self._skipped_steps = 0

        self._junctions = self._build_initial_junctions()
        self._history.record(HistorySnapshot.capture(self._now_ms(), self._junctions))

        print(f"[SimulationEngine] Initialized {len(self._junctions)} junctions")
        print(f"   Mode: {self._mode.value}, smart mode: {self._smart_mode}")

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _build_initial_junctions(self) -> List[Junction]:
        now = self._now_ms()
        return [
            Junction(
                id=definition.id,
                name=definition.name,
                approaches=tuple(definition.approaches),
                baseline_cycle_seconds=definition.baselineCycleSeconds,
                active_approach=definition.approaches[0],
                readings={
                    approach: initial_reading(self._rng)
                    for approach in definition.approaches
                },
                last_updated=now,
                override_until=None
            )
            for definition in self._definitions
        ]

    # ============================================
    # Step
    # ============================================

    def step(self):
        """
        Advance every junction by one period and record a snapshot

        Not idempotent: each call consumes randomness and moves time forward.
        A failure while building the new batch skips the tick and leaves the
        previous state untouched.
        """
        with self._lock:
            now = self._now_ms()
            profile = get_mode_profile(self._mode)

            try:
                updated = [
                    self._advance_junction(junction, profile, now)
                    for junction in self._junctions
                ]
                snapshot = HistorySnapshot.capture(now, updated)
            except Exception as e:
                self._skipped_steps += 1
                print(f"[SimulationEngine] Step skipped: {e}")
                return

            self._junctions = updated
            self._history.record(snapshot)
            self._step_count += 1

    def _advance_junction(self, junction: Junction, profile: ModeProfile, now: int) -> Junction:
        readings = drift_readings(
            junction.readings,
            junction.approaches,
            profile,
            self._smart_mode,
            self._rng
        )
        if is_override_active(junction, now):
            active_approach = junction.active_approach
        else:
            active_approach = highest_priority_approach(junction.approaches, readings)

        return Junction(
            id=junction.id,
            name=junction.name,
            approaches=junction.approaches,
            baseline_cycle_seconds=junction.baseline_cycle_seconds,
            active_approach=active_approach,
            readings=readings,
            last_updated=now,
            override_until=junction.override_until
        )

    # ============================================
    # Queries
    # ============================================

    def get_state(self) -> Dict[str, Any]:
        """
        Get current junctions, metrics, mode and smart flag

        Returns a detached copy; callers cannot reach engine internals.
        """
        with self._lock:
            junctions = self._junctions
            mode = self._mode
            smart_mode = self._smart_mode

        return {
            'updatedAt': self._now_ms(),
            'junctions': [junction.to_dict() for junction in junctions],
            'metrics': compute_city_metrics(junctions).to_dict(),
            'mode': mode.value,
            'smartMode': smart_mode
        }

    def get_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[Dict[str, Any]]:
        """
        Get the most recent snapshots, oldest first

        Args:
            limit: Maximum number of snapshots (callers clamp to 1-120)
        """
        with self._lock:
            snapshots = self._history.read(limit)
        return [snapshot.to_dict() for snapshot in snapshots]

    def get_config(self) -> Dict[str, Any]:
        """Get current mode, smart flag and the valid modes"""
        with self._lock:
            return {
                'mode': self._mode.value,
                'smartMode': self._smart_mode,
                'availableModes': available_modes()
            }

    def get_junction(self, junction_id: str) -> Junction:
        """
        Get one junction by id

        Raises:
            NotFoundError: unknown junction id
        """
        with self._lock:
            return self._find_junction(junction_id)

    def _find_junction(self, junction_id: str) -> Junction:
        for junction in self._junctions:
            if junction.id == junction_id:
                return junction
        raise NotFoundError(f"Intersection {junction_id} not found")

    @property
    def mode(self) -> TrafficMode:
        return self._mode

    @property
    def smart_mode(self) -> bool:
        return self._smart_mode

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def skipped_steps(self) -> int:
        return self._skipped_steps

    def get_statistics(self) -> Dict[str, Any]:
        """Get engine statistics"""
        with self._lock:
            return {
                'junctions': len(self._junctions),
                'steps': self._step_count,
                'skippedSteps': self._skipped_steps,
                'history': self._history.get_stats()
            }

    # ============================================
    # Mutations
    # ============================================

    def override_signal(self,
                        junction_id: str,
                        approach: str,
                        duration_seconds: Optional[float] = None) -> OverrideResult:
        """
        Pin a junction's green light to one approach for a while

        Args:
            junction_id: Junction ID
            approach: Approach to hold green
            duration_seconds: Override length (default 90s, must be positive)

        Returns:
            OverrideResult with the applied approach and expiry (epoch ms)

        Raises:
            NotFoundError: unknown junction id
            InvalidArgumentError: approach not at this junction, or bad duration
        """
        if duration_seconds is None:
            duration_seconds = DEFAULT_OVERRIDE_DURATION

        with self._lock:
            target = self._find_junction(junction_id)

            if not target.has_approach(approach):
                raise InvalidArgumentError(f"Approach {approach} not valid for {target.name}")

            duration_ms = _duration_to_ms(duration_seconds)

            now = self._now_ms()
            override_until = now + duration_ms
            overridden = Junction(
                id=target.id,
                name=target.name,
                approaches=target.approaches,
                baseline_cycle_seconds=target.baseline_cycle_seconds,
                active_approach=approach,
                readings=target.readings,
                last_updated=target.last_updated,
                override_until=override_until
            )
            self._junctions = [
                overridden if junction.id == target.id else junction
                for junction in self._junctions
            ]

        print(f"[SimulationEngine] Override: {junction_id} {approach} GREEN for {duration_seconds}s")

        return OverrideResult(
            id=overridden.id,
            active_approach=approach,
            override_until=override_until
        )

    def set_mode(self, mode: Union[str, TrafficMode]) -> Dict[str, str]:
        """
        Switch the traffic mode

        Raises:
            InvalidArgumentError: unknown mode (current mode is kept)
        """
        new_mode = parse_mode(mode)

        with self._lock:
            previous = self._mode
            self._mode = new_mode

        if previous != new_mode:
            print(f"[SimulationEngine] Mode: {previous.value} -> {new_mode.value}")

        return {'mode': new_mode.value}

    def set_smart_mode(self, enabled: Any) -> Dict[str, bool]:
        """Enable or disable adaptive optimisation"""
        smart_mode = bool(enabled)

        with self._lock:
            self._smart_mode = smart_mode

        print(f"[SimulationEngine] Smart mode {'enabled' if smart_mode else 'disabled'}")

        return {'smartMode': smart_mode}


# Global simulation engine instance
_simulation_engine: Optional[SimulationEngine] = None


def get_simulation_engine() -> SimulationEngine:
    """Get the global simulation engine instance"""
    global _simulation_engine
    if _simulation_engine is None:
        _simulation_engine = SimulationEngine()
    return _simulation_engine


def init_simulation_engine(**kwargs) -> SimulationEngine:
    """
    Initialize the global simulation engine

    Replaces any existing instance; keyword arguments go to SimulationEngine.
    """
    global _simulation_engine
    _simulation_engine = SimulationEngine(**kwargs)
    return _simulation_engine
