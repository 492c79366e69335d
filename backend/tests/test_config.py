"""
Configuration Tests

Tests for YAML/JSON config loading and settings resolution.
"""

import json

import pytest

from citysim.config import ConfigManager, SimulationSettings, load_settings
from citysim.simulation.engine import DEFAULT_JUNCTIONS, SimulationEngine


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "simulation.yaml").write_text(
        "stepIntervalMs: 2000\n"
        "historyCapacity: 60\n"
        "mode: rush_hour\n"
        "smartMode: false\n"
        "seed: 17\n"
        "junctions:\n"
        "  - id: j-a\n"
        "    name: Alpha\n"
        "    approaches: [north, south]\n"
        "    baselineCycleSeconds: 60\n"
    )
    (tmp_path / "extra.json").write_text(json.dumps({"feature": {"enabled": True}}))
    return tmp_path


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for name in ("PORT", "STEP_INTERVAL_MS", "SIMULATION_SEED"):
        monkeypatch.delenv(name, raising=False)


class TestConfigManager:
    """Tests for ConfigManager class"""

    def test_loads_yaml_and_json(self, config_dir):
        """Test files load under their stem"""
        manager = ConfigManager(str(config_dir))
        assert manager.get("simulation.stepIntervalMs") == 2000
        assert manager.get("extra.feature.enabled") is True

    def test_missing_key_default(self, config_dir):
        """Test missing keys return the default"""
        manager = ConfigManager(str(config_dir))
        assert manager.get("simulation.nope", 5) == 5
        assert manager.get("simulation.stepIntervalMs.deeper") is None

    def test_missing_directory(self, tmp_path):
        """Test a missing directory yields empty config"""
        manager = ConfigManager(str(tmp_path / "absent"))
        assert manager.configs == {}

    def test_bundled_config(self):
        """Test the shipped simulation.yaml matches the built-in defaults"""
        manager = ConfigManager()
        assert manager.get("simulation.junctions") == DEFAULT_JUNCTIONS


class TestLoadSettings:
    """Tests for load_settings"""

    def test_settings_from_files(self, config_dir):
        """Test values come from config files"""
        settings = load_settings(ConfigManager(str(config_dir)))

        assert settings.step_interval_ms == 2000
        assert settings.history_capacity == 60
        assert settings.mode == "rush_hour"
        assert settings.smart_mode is False
        assert settings.seed == 17
        assert settings.port == 4000
        assert settings.junctions[0]["id"] == "j-a"

    def test_environment_overrides(self, config_dir, monkeypatch):
        """Test environment variables take precedence"""
        monkeypatch.setenv("STEP_INTERVAL_MS", "750")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("SIMULATION_SEED", "3")

        settings = load_settings(ConfigManager(str(config_dir)))

        assert settings.step_interval_ms == 750
        assert settings.port == 8080
        assert settings.seed == 3

    def test_invalid_environment_falls_back(self, config_dir, monkeypatch):
        """Test malformed env values are ignored"""
        monkeypatch.setenv("STEP_INTERVAL_MS", "fast")
        monkeypatch.setenv("PORT", "")

        settings = load_settings(ConfigManager(str(config_dir)))

        assert settings.step_interval_ms == 2000
        assert settings.port == 4000

    def test_non_positive_interval_uses_default(self, config_dir, monkeypatch):
        """Test a zero interval falls back to 5000ms"""
        monkeypatch.setenv("STEP_INTERVAL_MS", "0")
        assert load_settings(ConfigManager(str(config_dir))).step_interval_ms == 5000

    def test_partial_file_falls_back_per_key(self, tmp_path):
        """Test keys absent from simulation.yaml keep their defaults"""
        (tmp_path / "simulation.yaml").write_text("mode: emergency\n")
        (tmp_path / "broken.yaml").write_text("key: [unclosed\n")

        manager = ConfigManager(str(tmp_path))
        settings = load_settings(manager)

        assert "broken" not in manager.configs
        assert settings.mode == "emergency"
        assert settings.step_interval_ms == 5000
        assert settings.history_capacity == 120
        assert settings.junctions == DEFAULT_JUNCTIONS

    def test_defaults_without_files(self, tmp_path):
        """Test built-in defaults apply when no config exists"""
        settings = load_settings(ConfigManager(str(tmp_path / "absent")))
        assert settings == SimulationSettings()

    def test_settings_build_engine(self, config_dir):
        """Test resolved settings construct an engine"""
        settings = load_settings(ConfigManager(str(config_dir)))
        engine = SimulationEngine(
            junctions=settings.junctions,
            seed=settings.seed,
            history_capacity=settings.history_capacity,
            mode=settings.mode,
            smart_mode=settings.smart_mode
        )
        config = engine.get_config()
        assert config["mode"] == "rush_hour"
        assert config["smartMode"] is False
        assert [j["id"] for j in engine.get_state()["junctions"]] == ["j-a"]
