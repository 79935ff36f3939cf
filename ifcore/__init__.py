"""
ifcore - command-interpretation core for interactive fiction.

Given the entities and verbs currently in scope, ifcore enumerates the
commands a player could type, resolves typed words to a Command, and runs
the before/main/after actions that content authors attach to entities and
verbs using a small scripting language.

Subpackages:
    - ifcore.models: Pydantic data models (Verb, Entity, Word, MatchResult)
    - ifcore.script: Expression language, match expressions, phase actions
    - ifcore.engine: Environment, Command model, matchers, search, rules,
      and the phase-ordered command executor

Import directly from submodules:
    from ifcore.engine.command_search import get_all_commands
    from ifcore.script.phase_action import PhaseActionBuilder
"""

__version__ = "0.1.0"

# Note: No eager imports to avoid circular import issues
