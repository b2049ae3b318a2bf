"""
TomeLoot Test Suite
===================

Test Organization
-----------------
- tests/unit/          : Fast unit tests (pure functions, scripted randomness)
- tests/unit/domain/   : Domain model validation
- tests/integration/   : Full session flows against the YAML config in config/

Testing Philosophy
------------------
- Randomness is injected: scripted sequences for exact paths, seeded
  generators for distribution bounds
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
