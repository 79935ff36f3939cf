"""
ifcore Test Suite

Test structure:
- unit/: Test components in isolation
  - test_script/: lexer, parser, evaluator, match expressions, phase actions
  - test_engine/: environment, commands, matchers, search, rules, executor
  - test_models/: pydantic models
- integration/: Search, matching and execution working together
"""
