"""
Configuration Management System

Simulation settings come from YAML and JSON files under backend/config,
read through dot-notation keys, with environment variables taking
precedence for the deployment knobs.
"""

import os
import yaml
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

from citysim.simulation.engine import DEFAULT_JUNCTIONS
from citysim.simulation.history import HISTORY_CAPACITY
from citysim.simulation.scheduler import DEFAULT_STEP_INTERVAL_MS


DEFAULT_PORT = 4000


class ConfigManager:
    """
    Read-only view over the config directory

    Each file is stored under its stem, so simulation.yaml is reached as
    config.get('simulation.stepIntervalMs').
    """

    def __init__(self, config_dir: str = None):
        """
        Args:
            config_dir: Path to config directory (default: backend/config)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent.parent / "config"

        self.configs: Dict[str, Any] = {}
        self._load_all_configs()

    def _load_all_configs(self):
        if not self.config_dir.exists():
            print(f"   [WARN] Config directory not found: {self.config_dir}, using defaults")
            return

        loaders = (("*.yaml", yaml.safe_load, yaml.YAMLError),
                   ("*.json", json.load, json.JSONDecodeError))

        for pattern, load, parse_error in loaders:
            for path in sorted(self.config_dir.glob(pattern)):
                try:
                    with open(path, 'r') as f:
                        self.configs[path.stem] = load(f) or {}
                except (OSError, parse_error) as e:
                    print(f"   [WARN] Failed to load {path.name}: {e}")
                    continue
                print(f"   [CONFIG] Loaded: {path.name}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dot-separated key

        Returns default when any segment is missing or a parent is not a mapping.
        """
        value = self.configs
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value


@dataclass
class SimulationSettings:
    """Resolved settings for engine, scheduler and server"""
    junctions: List[Dict[str, Any]] = field(default_factory=lambda: list(DEFAULT_JUNCTIONS))
    step_interval_ms: int = DEFAULT_STEP_INTERVAL_MS
    history_capacity: int = HISTORY_CAPACITY
    mode: str = "normal"
    smart_mode: bool = True
    seed: Optional[int] = None
    port: int = DEFAULT_PORT


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        print(f"[WARN] Ignoring non-integer {name}={raw!r}")
        return default


def load_settings(manager: Optional['ConfigManager'] = None) -> SimulationSettings:
    """
    Resolve simulation settings

    Precedence: environment variables, then config files, then defaults.

    Environment:
        PORT              - HTTP port (default 4000)
        STEP_INTERVAL_MS  - Milliseconds between steps (default 5000)
        SIMULATION_SEED   - Seed for the random source
    """
    manager = manager or get_config()

    step_interval_ms = _env_int(
        'STEP_INTERVAL_MS',
        int(manager.get('simulation.stepIntervalMs', DEFAULT_STEP_INTERVAL_MS))
    )
    if step_interval_ms is None or step_interval_ms <= 0:
        print(f"[WARN] Invalid step interval {step_interval_ms}, using {DEFAULT_STEP_INTERVAL_MS}ms")
        step_interval_ms = DEFAULT_STEP_INTERVAL_MS

    return SimulationSettings(
        junctions=manager.get('simulation.junctions') or list(DEFAULT_JUNCTIONS),
        step_interval_ms=step_interval_ms,
        history_capacity=int(manager.get('simulation.historyCapacity', HISTORY_CAPACITY)),
        mode=manager.get('simulation.mode', 'normal'),
        smart_mode=bool(manager.get('simulation.smartMode', True)),
        seed=_env_int('SIMULATION_SEED', manager.get('simulation.seed')),
        port=_env_int('PORT', DEFAULT_PORT)
    )


# Global configuration instance
config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the global configuration instance"""
    global config
    if config is None:
        config = ConfigManager()
    return config
