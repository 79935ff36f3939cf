"""Scripting language for content authors.

Expressions are parsed into an AST (`script/parser.py`), compiled into
Thunks (`script/evaluator.py`) and resolved against an Environment.
Match expressions such as ``push($item, north)`` compile to command
Matchers (`script/match_parser.py`), and phase actions pair a Matcher with
a Thunk (`script/phase_action.py`).
"""

# Note: No eager imports to avoid circular import issues
