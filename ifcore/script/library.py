"""
Builtin functions available to every script.

- ``write(value)``: send ``value`` to the output consumer bound under
  OUTPUT in scope
- ``random(low, high)``: a uniformly random integer in ``[low, high]``
"""

from __future__ import annotations

import random as _random
from typing import Any

from ifcore.config import EngineConfig
from ifcore.engine.env import Environment, create_root_env
from ifcore.output import OUTPUT, OutputConsumer, PrintMessage
from ifcore.script.evaluator import bind_params, to_display_string


def _write(env: Environment) -> None:
    value = env.get("value")
    output = env.get(OUTPUT)
    output(PrintMessage(value=to_display_string(value)))


def make_random(rng: _random.Random | None = None):
    """Create a ``random(low, high)`` builtin drawing from ``rng``."""
    source = rng or _random.Random()

    def _random_int(env: Environment) -> int:
        return source.randint(int(env.get("low")), int(env.get("high")))

    return bind_params(["low", "high"], _random_int)


WRITE = bind_params(["value"], _write)


def install_library(
    env: Environment,
    output: OutputConsumer | None = None,
    rng: _random.Random | None = None,
) -> Environment:
    """Define the builtin functions (and optionally OUTPUT) in ``env``."""
    if output is not None:
        env.define(OUTPUT, output)
    env.define("write", WRITE)
    env.define("random", make_random(rng))
    return env


def create_engine_env(
    world: Any,
    output: OutputConsumer | None = None,
    config: EngineConfig | None = None,
) -> Environment:
    """Create a root Environment over ``world`` ready to run scripts.

    The configured entities namespace is declared on the root, and the
    ``random()`` builtin draws from ``config.make_rng()``.

    Example:
        >>> env = create_engine_env({"entities": {"apple": apple}}, output=print)
        >>> parse("write(entities.apple.name)")(env)
    """
    config = config or EngineConfig()
    env = create_root_env(world, [config.entities_namespace])
    return install_library(env, output, rng=config.make_rng())
