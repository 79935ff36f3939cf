"""Engine components.

- Environment: scoped lookup and mutation (`engine/env.py`)
- Command model and matchers (`engine/command.py`, `engine/command_matcher.py`)
- Command search: enumeration, autocomplete, exact resolution
  (`engine/command_search.py`)
- Rule builder (`engine/rule_builder.py`)
- Phase-ordered command execution (`engine/executor.py`)

Import directly from submodules to avoid circular imports:
    from ifcore.engine.env import Environment, create_root_env
    from ifcore.engine.command_search import search_exact
"""

# Note: No eager imports to avoid circular import issues
