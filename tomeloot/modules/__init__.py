"""
TomeLoot game modules.

Each subpackage owns one concern of the reward economy:

- shared: constants, formulas, exceptions, BaseService
- effects: modifier and buff aggregation
- consumables: catalog, buff lifecycle, instant effects
- loot: probability tables and the loot engine
- drops: checkpoint bonus drops
- streak: daily streak tracking
- rewards: session-end orchestration and box opening
"""
