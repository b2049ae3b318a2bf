"""
TomeLoot: reward and loot economy engine for time-tracked reading sessions.

Entry points
------------
- `SessionRewardService.process_session_end` converts one session into XP,
  levels, loot boxes and bonus drops.
- `open_loot_box` resolves a stored box into a concrete reward.
"""

__version__ = "0.1.0"
