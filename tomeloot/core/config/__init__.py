"""
Configuration package for TomeLoot.

- `Config`: static settings from the environment (.env aware)
- `ConfigManager`: balance values from YAML, imported from
  `tomeloot.core.config.manager` (kept out of this namespace because the
  manager depends on the logging package, which itself reads `Config`)
"""

from tomeloot.core.config.config import Config, Environment

__all__ = ["Config", "Environment"]
