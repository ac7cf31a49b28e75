from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from rumb.engine.rules import RuleDefinition, Tier


@dataclass(frozen=True)
class Difficulty:
    id: str
    label: str
    rule_tiers: Tuple[Tier, ...]
    min_internal: int


DIFFICULTIES: Dict[str, Difficulty] = {
    difficulty.id: difficulty
    for difficulty in (
        Difficulty("pixapi", "Pixapí", (Tier.EASY,), 3),
        Difficulty("dominguero", "Dominguero", (Tier.EASY, Tier.MEDIUM), 4),
        Difficulty("rondinaire", "Rondinaire", (Tier.MEDIUM, Tier.HARD), 6),
        Difficulty("cap-colla-rutes", "Cap de colla de rutes", (Tier.EXPERT,), 9),
    )
}

# tags a rule needs to be picked for daily and weekly puzzles
FIXED_CADENCE_TAGS = frozenset({"geo", "cultural"})


def get_difficulty(difficulty_id: str) -> Difficulty:
    try:
        return DIFFICULTIES[difficulty_id]
    except KeyError:
        raise ValueError(f"Unknown difficulty: {difficulty_id}") from None


def rule_pool(
    catalog: Sequence[RuleDefinition], difficulty: Difficulty, fixed_cadence: bool = False
) -> Tuple[RuleDefinition, ...]:
    """Rules eligible for a puzzle at this difficulty, never empty for a non-empty catalog"""
    tier_pool = tuple(rule for rule in catalog if rule.tier in difficulty.rule_tiers)
    if fixed_cadence:
        high_pool = tuple(
            rule for rule in catalog
            if rule.tier == Tier.EXPERT and rule.tags & FIXED_CADENCE_TAGS
        )
        if high_pool:
            return high_pool
    return tier_pool or tuple(catalog)
