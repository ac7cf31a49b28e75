"""
Soft anti-repetition for daily and weekly rules.

The gate never excludes a rule outright: when every rule in the pool was
used recently it still returns one, so a puzzle is always produced.
"""
from typing import Callable, List, Optional, Sequence

from rumb.engine.rng import RandomFn, hash_string, mulberry32
from rumb.engine.rules import RuleDefinition

RULE_HISTORY_LIMIT = 60


def seeded_shuffle(items: Sequence, seed_key: str, rng_factory: Callable[[int], RandomFn] = mulberry32) -> list:
    """Fisher-Yates shuffle driven by a generator seeded from seed_key"""
    rng = rng_factory(hash_string(seed_key))
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def pick_with_history(
    pool: Sequence[RuleDefinition],
    cadence_key: str,
    recent_ids: Sequence[str] = (),
    rng_factory: Callable[[int], RandomFn] = mulberry32,
) -> Optional[RuleDefinition]:
    if not pool:
        return None
    recent = set(recent_ids)
    shuffled = seeded_shuffle(pool, cadence_key, rng_factory)
    for rule in shuffled:
        if rule.id not in recent:
            return rule
    return shuffled[0]


def push_history(history: Sequence[str], rule_id: str, limit: int = RULE_HISTORY_LIMIT) -> List[str]:
    """New history with rule_id appended, oldest entries dropped past the limit"""
    return [*history, rule_id][-limit:]
