"""
Shared pytest fixtures for ifcore tests.

This module provides:
- output / env: an Environment with the builtin library and a capturing
  output consumer
- Sample verbs (go, look, push, stir, put, get, drop, eat, sit, stand)
- Sample entities (cave, box, soup, spoon, ball, bag, apple, chair)
- Custom markers for test categorization
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Add the project root to path for imports
project_path = Path(__file__).parent.parent
if str(project_path) not in sys.path:
    sys.path.insert(0, str(project_path))

from ifcore.engine.env import Environment, create_root_env  # noqa: E402
from ifcore.models.entity import Entity, VerbMatcher  # noqa: E402
from ifcore.models.verb import Verb, VerbTrait  # noqa: E402
from ifcore.output import OutputMessage  # noqa: E402
from ifcore.script.evaluator import parse_to_thunk  # noqa: E402
from ifcore.script.library import install_library  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def output() -> list[OutputMessage]:
    """Messages written by scripts."""
    return []


@pytest.fixture
def env(output) -> Environment:
    """Root Environment with the builtin library and a capturing output."""
    root = create_root_env({"entities": {}}, ["entities"])
    install_library(root, output.append, rng=random.Random(0))
    return root


# =============================================================================
# Verb Fixtures
# =============================================================================


@pytest.fixture
def go_verb() -> Verb:
    return Verb(id="go", traits=[VerbTrait.INTRANSITIVE], modifiers=["direction"])


@pytest.fixture
def look_verb() -> Verb:
    return Verb(id="look", traits=[VerbTrait.INTRANSITIVE])


@pytest.fixture
def push_verb() -> Verb:
    return Verb(id="push", traits=[VerbTrait.TRANSITIVE], modifiers=["direction"])


@pytest.fixture
def stir_verb() -> Verb:
    return Verb(
        id="stir",
        traits=[VerbTrait.TRANSITIVE, VerbTrait.INDIRECT_OPTIONAL],
        attributes=["with"],
    )


@pytest.fixture
def put_verb() -> Verb:
    return Verb(id="put", traits=[VerbTrait.TRANSITIVE], attributes=["in"])


@pytest.fixture
def get_verb() -> Verb:
    return Verb(id="get", traits=[VerbTrait.TRANSITIVE], contexts=[("direct", "environment")])


@pytest.fixture
def drop_verb() -> Verb:
    return Verb(id="drop", traits=[VerbTrait.TRANSITIVE], contexts=[("direct", "inventory")])


@pytest.fixture
def eat_verb() -> Verb:
    return Verb(id="eat", traits=[VerbTrait.TRANSITIVE])


@pytest.fixture
def sit_verb() -> Verb:
    return Verb(id="sit", traits=[VerbTrait.TRANSITIVE])


@pytest.fixture
def stand_verb() -> Verb:
    return Verb(id="stand", traits=[VerbTrait.TRANSITIVE])


# =============================================================================
# Entity Fixtures
# =============================================================================


@pytest.fixture
def cave() -> Entity:
    """A room with two exits."""
    return Entity(
        id="cave",
        verbs=[VerbMatcher(verb="go"), VerbMatcher(verb="look")],
        verb_modifiers={"direction": ["north", "east"]},
    )


@pytest.fixture
def box() -> Entity:
    return Entity(id="box", verbs=[VerbMatcher(verb="push")])


@pytest.fixture
def soup() -> Entity:
    return Entity(id="soup", verbs=[VerbMatcher(verb="stir")])


@pytest.fixture
def spoon() -> Entity:
    return Entity(id="spoon", verbs=[VerbMatcher(verb="stir", attribute="with")])


@pytest.fixture
def ball() -> Entity:
    return Entity(id="ball", verbs=[VerbMatcher(verb="put")])


@pytest.fixture
def bag() -> Entity:
    return Entity(id="bag", verbs=[VerbMatcher(verb="put", attribute="in")])


@pytest.fixture
def apple() -> Entity:
    return Entity(
        id="apple",
        name="red apple",
        verbs=[VerbMatcher(verb="get"), VerbMatcher(verb="drop"), VerbMatcher(verb="eat")],
        eaten=False,
    )


@pytest.fixture
def chair() -> Entity:
    """A chair you can sit on, then stand up from."""
    return Entity(
        id="chair",
        verbs=[
            VerbMatcher(verb="sit", condition=parse_to_thunk("!sat_on")),
            VerbMatcher(verb="stand", condition=parse_to_thunk("sat_on")),
        ],
        sat_on=False,
    )
