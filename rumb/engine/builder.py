"""
Level building.

A level is a start region, a target region and usually a rule. The builder
samples candidates from a seeded generator until the rule makes the best
route strictly longer than the free shortest route and long enough for
the requested number of internal stops. Every random draw goes through the
supplied generator, so a given seed always yields the same level.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from rumb.engine.graph import RegionGraph
from rumb.engine.history import pick_with_history
from rumb.engine.pathfinder import shortest_path
from rumb.engine.rng import RandomFn, pick_random, rng_from_key
from rumb.engine.rules import (
    ResolvedRule,
    RuleContext,
    RuleDefinition,
    RuleKind,
    build_name_index,
    is_feasible,
    path_under,
    pick_rule,
    prepare_rule,
)

logger = logging.getLogger(__name__)

ATTEMPTS_PER_PASS = 500
PASSES = 2


@dataclass(frozen=True)
class LevelData:
    start_id: str
    target_id: str
    shortest_path: List[str]
    rule_id: Optional[str] = None
    avoid_ids: Optional[List[str]] = None
    must_pass_ids: Optional[List[str]] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class GeneratedLevel:
    level: LevelData
    # catalog id to record in the rule history, None for rule-less levels
    history_rule_id: Optional[str] = None


def is_acceptable(path: Sequence[str], base_path: Sequence[str], min_length: int) -> bool:
    """A rule must cost extra steps and the route must be long enough"""
    if not path:
        return False
    if len(path) <= len(base_path):
        return False
    return len(path) >= min_length


def _rule_for_pair(
    ctx: RuleContext, pool: Sequence[RuleDefinition], fixed_rule: Optional[RuleDefinition]
) -> Optional[ResolvedRule]:
    if fixed_rule is None:
        return pick_rule(pool, ctx) if pool else None

    rule = prepare_rule(fixed_rule, ctx)
    if rule.kind != RuleKind.AVOID and not rule.region_ids:
        return None
    return rule if is_feasible(rule, ctx) else None


def _level_from(start: str, target: str, path: List[str], rule: Optional[ResolvedRule]) -> LevelData:
    avoid_ids = list(rule.region_ids) if rule and rule.kind == RuleKind.AVOID else []
    must_pass_ids = list(rule.region_ids) if rule and rule.kind == RuleKind.MUST_INCLUDE_ANY else []
    return LevelData(
        start_id=start,
        target_id=target,
        shortest_path=path,
        rule_id=rule.id if rule else None,
        avoid_ids=avoid_ids or None,
        must_pass_ids=must_pass_ids or None,
    )


def search_level(
    rng: RandomFn,
    graph: RegionGraph,
    min_internal: int,
    pool: Sequence[RuleDefinition],
    fixed_rule: Optional[RuleDefinition] = None,
    name_index: Optional[Dict[str, str]] = None,
) -> Tuple[LevelData, Optional[ResolvedRule]]:
    """Level plus the rule that won it, None when the fallback was taken"""
    ids = graph.all_ids()
    name_index = name_index if name_index is not None else build_name_index(graph)
    min_length = max(min_internal + 2, 3)

    if pool or fixed_rule is not None:
        for attempt in range(ATTEMPTS_PER_PASS * PASSES):
            start = pick_random(ids, rng)
            target = pick_random(ids, rng)
            if start == target or graph.are_adjacent(start, target):
                continue

            ctx = RuleContext(graph=graph, rng=rng, start_id=start, target_id=target, name_index=name_index)
            rule = _rule_for_pair(ctx, pool, fixed_rule)
            if rule is None:
                continue

            path = path_under(graph, rule, start, target)
            base_path = shortest_path(graph, start, target)
            if not is_acceptable(path, base_path, min_length):
                continue

            logger.debug("Accepted %s -> %s with %s after %s attempts", start, target, rule.id, attempt + 1)
            return _level_from(start, target, path, rule), rule

    logger.warning("No constrained level found, falling back to %s -> %s without rule", ids[0], ids[1])
    return _level_from(ids[0], ids[1], shortest_path(graph, ids[0], ids[1]), None), None


def build_level(
    rng: RandomFn,
    graph: RegionGraph,
    min_internal: int,
    pool: Sequence[RuleDefinition],
    fixed_rule: Optional[RuleDefinition] = None,
    name_index: Optional[Dict[str, str]] = None,
) -> LevelData:
    level, _ = search_level(rng, graph, min_internal, pool, fixed_rule, name_index)
    return level


def seed_key(cadence_key: str, difficulty_id: str) -> str:
    return f"{cadence_key}-{difficulty_id}"


def generate_level(
    cadence_key: str,
    graph: RegionGraph,
    pool: Sequence[RuleDefinition],
    difficulty_id: str,
    min_internal: int,
    recent_rule_ids: Optional[Sequence[str]] = None,
) -> GeneratedLevel:
    """Level for one cadence key. Passing recent_rule_ids fixes the rule through the history gate."""
    fixed_rule = None
    if recent_rule_ids is not None:
        fixed_rule = pick_with_history(pool, cadence_key, recent_rule_ids)

    rng = rng_from_key(seed_key(cadence_key, difficulty_id))
    level, rule = search_level(rng, graph, min_internal, pool, fixed_rule=fixed_rule)
    if rule is None and fixed_rule is not None:
        logger.info("Rule %s fits no pair for %s, sampling the whole pool", fixed_rule.id, cadence_key)
        level, rule = search_level(rng, graph, min_internal, pool)
    return GeneratedLevel(level=level, history_rule_id=rule.source_id if rule else None)
