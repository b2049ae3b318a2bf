"""
Weighted random selection.

The only place a table meets the random source. `rng` is anything with a
`random()` method returning a float in [0, 1): `random.Random`, a seeded
instance, or a scripted stub in tests.
"""

from __future__ import annotations

from typing import Protocol, Sequence, Tuple, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def weighted_choice(table: Sequence[Tuple[T, float]], rng: RandomSource) -> T:
    """
    Pick one outcome from an ordered `(outcome, weight)` table.

    Draws `r = rng.random() * total` and subtracts weights in table order
    until `r <= 0`. Zero-weight buckets are never returned, even for a
    draw of exactly 0. Floating-point leftovers fall back to the last
    positive bucket; a table with no positive weight returns its last
    bucket. Exactly one draw is consumed either way.

    Raises:
        ValueError: If the table is empty
    """
    if not table:
        raise ValueError("weighted_choice requires a non-empty table")

    total = sum(weight for _, weight in table if weight > 0)
    remaining = rng.random() * total

    fallback = table[-1][0]
    for outcome, weight in table:
        if weight <= 0:
            continue
        fallback = outcome
        remaining -= weight
        if remaining <= 0:
            return outcome

    return fallback
