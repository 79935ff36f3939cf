"""
Engine configuration.

Settings come from, in increasing priority:
    1. EngineConfig defaults
    2. An optional YAML file
    3. ``IFCORE_*`` environment variables (a ``.env`` file is loaded first)

Example YAML:
    log_level: DEBUG
    random_seed: 42
    trace_matching: true
"""

from __future__ import annotations

import logging
import os
import random
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "IFCORE_"


class EngineConfig(BaseModel):
    """Settings for the command-interpretation core.

    Attributes:
        log_level: Level for the ``ifcore`` logger hierarchy
        entities_namespace: Environment namespace holding the world's
            entities; phase actions expose its members by bare name
        random_seed: Seed for ``random`` rules and the ``random()`` builtin;
            None for a nondeterministic source
        trace_matching: Log the score of every candidate phase action
    """

    log_level: str = "WARNING"
    entities_namespace: str = "entities"
    random_seed: int | None = None
    trace_matching: bool = False

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    def make_rng(self) -> random.Random:
        """Random source for scripts, seeded when ``random_seed`` is set."""
        return random.Random(self.random_seed)


def _env_overrides() -> dict[str, Any]:
    overrides = {}
    for field in EngineConfig.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{field.upper()}")
        if value is not None:
            overrides[field] = value
    return overrides


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration from an optional YAML file and the environment.

    Args:
        path: YAML file to read; missing files are ignored

    Returns:
        Validated EngineConfig
    """
    load_dotenv()

    data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        else:
            logger.debug(f"No config file at {config_path}, using defaults")

    data.update(_env_overrides())
    return EngineConfig(**data)


def configure_logging(config: EngineConfig) -> None:
    """Apply the configured level to the ``ifcore`` loggers."""
    logging.getLogger("ifcore").setLevel(config.log_level)
