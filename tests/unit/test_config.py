"""Unit tests for engine configuration.

Tests cover:
- Defaults
- Loading from YAML
- IFCORE_* environment overrides
- Validation of the log level
- configure_logging()
"""

import logging

import pytest
from pydantic import ValidationError

from ifcore.config import ENV_PREFIX, EngineConfig, configure_logging, load_config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove IFCORE_* variables set outside the test."""
    for field in EngineConfig.model_fields:
        monkeypatch.delenv(f"{ENV_PREFIX}{field.upper()}", raising=False)


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.log_level == "WARNING"
        assert config.entities_namespace == "entities"
        assert config.random_seed is None
        assert config.trace_matching is False

    def test_log_level_normalised(self) -> None:
        assert EngineConfig(log_level="debug").log_level == "DEBUG"

    def test_bad_log_level(self) -> None:
        with pytest.raises(ValidationError, match="Unknown log level"):
            EngineConfig(log_level="chatty")


class TestLoadConfig:
    """Tests for load_config()."""

    def test_no_file(self) -> None:
        assert load_config() == EngineConfig()

    def test_missing_file(self, tmp_path) -> None:
        assert load_config(tmp_path / "missing.yaml") == EngineConfig()

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "ifcore.yaml"
        path.write_text("log_level: info\nrandom_seed: 42\ntrace_matching: true\n")
        config = load_config(path)
        assert config.log_level == "INFO"
        assert config.random_seed == 42
        assert config.trace_matching is True

    def test_empty_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "ifcore.yaml"
        path.write_text("")
        assert load_config(path) == EngineConfig()

    def test_environment_overrides_file(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "ifcore.yaml"
        path.write_text("random_seed: 1\n")
        monkeypatch.setenv("IFCORE_RANDOM_SEED", "7")
        monkeypatch.setenv("IFCORE_ENTITIES_NAMESPACE", "things")
        config = load_config(path)
        assert config.random_seed == 7
        assert config.entities_namespace == "things"


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_sets_package_level(self) -> None:
        logger = logging.getLogger("ifcore")
        previous = logger.level
        try:
            configure_logging(EngineConfig(log_level="DEBUG"))
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)


class TestMakeRng:
    """Tests for EngineConfig.make_rng()."""

    def test_seeded(self) -> None:
        config = EngineConfig(random_seed=42)
        assert config.make_rng().random() == config.make_rng().random()

    def test_fresh_source_each_call(self) -> None:
        config = EngineConfig()
        assert config.make_rng() is not config.make_rng()
