"""
Route constraints ("rules") and how they apply to one start/target pair.

A RuleDefinition is static catalog data naming regions. Preparing it for a
puzzle resolves random placeholders and turns names into region ids; the
result is a ResolvedRule that lives for one generation attempt.
"""
import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from rumb.engine.graph import RegionGraph
from rumb.engine.pathfinder import reachable_via, shortest_path, shortest_path_within
from rumb.engine.rng import RandomFn, pick_random


class RuleKind(str, Enum):
    AVOID = "avoid"
    MUST_INCLUDE_ANY = "mustIncludeAny"
    AVOID_RANDOM = "avoidRandom"


class Tier(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


@dataclass(frozen=True)
class RuleDefinition:
    id: str
    kind: RuleKind
    target_names: Tuple[str, ...] = ()
    tier: Tier = Tier.MEDIUM
    tags: FrozenSet[str] = field(default_factory=frozenset)
    label: str = ""


@dataclass(frozen=True)
class ResolvedRule:
    id: str
    kind: RuleKind
    target_names: Tuple[str, ...]
    region_ids: Tuple[str, ...]
    tier: Tier
    tags: FrozenSet[str]
    label: str = ""
    source_id: str = ""  # catalog id the rule was prepared from


@dataclass
class RuleContext:
    """Everything a rule needs to know about the puzzle being built"""
    graph: RegionGraph
    rng: RandomFn
    start_id: str
    target_id: str
    name_index: Dict[str, str]

    @property
    def start_name(self) -> Optional[str]:
        return self.graph.name_of(self.start_id)

    @property
    def target_name(self) -> Optional[str]:
        return self.graph.name_of(self.target_id)


def normalize_name(value: str) -> str:
    """Case, accent and punctuation insensitive form of a region name"""
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return re.sub(r"[^a-z0-9]+", " ", stripped).strip()


def slugify(value: str) -> str:
    return normalize_name(value).replace(" ", "-")


def build_name_index(graph: RegionGraph) -> Dict[str, str]:
    return {normalize_name(graph.name_of(region_id)): region_id for region_id in graph.all_ids()}


def resolve_rule(definition: RuleDefinition, ctx: RuleContext) -> RuleDefinition:
    """Turn an avoid-random placeholder into a concrete avoid rule"""
    if definition.kind != RuleKind.AVOID_RANDOM:
        return definition

    names = ctx.graph.names()
    pool = [name for name in names if name != ctx.start_name and name != ctx.target_name]
    picked = pick_random(pool, ctx.rng) if pool else names[0]
    return RuleDefinition(
        id=f"{definition.id}-{slugify(picked)}",
        kind=RuleKind.AVOID,
        target_names=(picked,),
        tier=Tier.MEDIUM,
        tags=definition.tags,
        label=definition.label.replace("{comarca}", picked),
    )


def prepare_rule(definition: RuleDefinition, ctx: RuleContext) -> ResolvedRule:
    resolved = resolve_rule(definition, ctx)
    region_ids = []
    for name in resolved.target_names:
        region_id = ctx.name_index.get(normalize_name(name))
        if region_id:
            region_ids.append(region_id)
    return ResolvedRule(
        id=resolved.id,
        kind=resolved.kind,
        target_names=resolved.target_names,
        region_ids=tuple(region_ids),
        tier=resolved.tier,
        tags=resolved.tags,
        label=resolved.label,
        source_id=definition.id,
    )


def is_feasible(rule: Optional[ResolvedRule], ctx: RuleContext) -> bool:
    if rule is None:
        return True

    graph = ctx.graph
    if rule.kind == RuleKind.AVOID:
        if not rule.region_ids:
            return False
        blocked = set(rule.region_ids)
        allowed = {region_id for region_id in graph.all_ids() if region_id not in blocked}
        return bool(shortest_path_within(graph, ctx.start_id, ctx.target_id, allowed))

    if rule.kind == RuleKind.MUST_INCLUDE_ANY:
        # passing through an endpoint constrains nothing
        allowed = set(graph.all_ids())
        return any(
            reachable_via(graph, ctx.start_id, ctx.target_id, region_id, allowed)
            for region_id in rule.region_ids
            if region_id not in (ctx.start_id, ctx.target_id)
        )

    return False


def path_under(graph: RegionGraph, rule: Optional[ResolvedRule], start: str, target: str) -> List[str]:
    """Shortest route from start to target that honours the rule"""
    if rule is None:
        return shortest_path(graph, start, target)

    if rule.kind == RuleKind.AVOID:
        blocked = set(rule.region_ids)
        allowed = {region_id for region_id in graph.all_ids() if region_id not in blocked}
        return shortest_path_within(graph, start, target, allowed)

    if rule.kind == RuleKind.MUST_INCLUDE_ANY:
        best: List[str] = []
        for via in rule.region_ids:
            first = shortest_path(graph, start, via)
            second = shortest_path(graph, via, target)
            if not first or not second:
                continue
            combined = first + second[1:]
            if not best or len(combined) < len(best):
                best = combined
        return best or shortest_path(graph, start, target)

    return shortest_path(graph, start, target)


def pick_rule(pool: Sequence[RuleDefinition], ctx: RuleContext) -> Optional[ResolvedRule]:
    """Sample the pool until a rule is feasible for ctx, or give up"""
    attempts = max(len(pool) * 3, 60)
    for _ in range(attempts):
        definition = pick_random(pool, ctx.rng)
        rule = prepare_rule(definition, ctx)
        if rule.kind != RuleKind.AVOID and not rule.region_ids:
            continue
        if is_feasible(rule, ctx):
            return rule
    return None
