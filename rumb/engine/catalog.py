"""
Rule catalog loading.

Two entry formats are accepted in the same file. The bundled catalog
stores rule definitions directly:

    {"id": ..., "kind": "mustIncludeAny", "comarques": [...], "difficulty": "hard", "tags": [...]}

Rules authored with the rule generator use the schema format:

    {"id": ..., "type": "REQUIRE", "text": ..., "comarques": [...], "difficultyCultural": 4, "tags": [...]}
"""
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from rumb.engine.errors import CatalogError
from rumb.engine.rules import RuleDefinition, RuleKind, Tier

logger = logging.getLogger(__name__)

SCHEMA_TYPES = {
    "REQUIRE": RuleKind.MUST_INCLUDE_ANY,
    "ONE_OF": RuleKind.MUST_INCLUDE_ANY,
    "FORBID": RuleKind.AVOID,
}

DEFAULT_TAGS = ("geo",)


def tier_from_cultural(value: Optional[float]) -> Tier:
    if not isinstance(value, (int, float)):
        value = 3
    if value >= 5:
        return Tier.EXPERT
    if value >= 4:
        return Tier.HARD
    if value >= 3:
        return Tier.MEDIUM
    return Tier.EASY


def parse_rule(entry: dict) -> RuleDefinition:
    if not isinstance(entry, dict) or not entry.get("id"):
        raise CatalogError(f"Rule entry without id: {entry!r}")

    names = tuple(entry.get("comarques") or ())
    tags = frozenset(entry.get("tags") or DEFAULT_TAGS)

    if "type" in entry:
        kind = SCHEMA_TYPES.get(str(entry["type"]).upper())
        if kind is None:
            raise CatalogError(f"Unknown rule type {entry['type']!r} in {entry['id']}")
        return RuleDefinition(
            id=str(entry["id"]),
            kind=kind,
            target_names=names,
            tier=tier_from_cultural(entry.get("difficultyCultural")),
            tags=tags,
            label=entry.get("text", ""),
        )

    try:
        kind = RuleKind(entry.get("kind"))
        tier = Tier(entry.get("difficulty") or Tier.MEDIUM.value)
    except ValueError as e:
        raise CatalogError(f"Invalid rule {entry['id']}: {e}") from e
    if kind != RuleKind.AVOID_RANDOM and not names:
        raise CatalogError(f"Rule {entry['id']} names no regions")
    return RuleDefinition(
        id=str(entry["id"]),
        kind=kind,
        target_names=names,
        tier=tier,
        tags=tags,
        label=entry.get("label", ""),
    )


def build_catalog(entries: Iterable[dict]) -> Tuple[RuleDefinition, ...]:
    rules: List[RuleDefinition] = []
    seen = set()
    for entry in entries:
        rule = parse_rule(entry)
        if rule.id in seen:
            raise CatalogError(f"Duplicate rule id: {rule.id}")
        seen.add(rule.id)
        rules.append(rule)
    if not rules:
        raise CatalogError("Rule catalog is empty")
    return tuple(rules)


def load_catalog(path) -> Tuple[RuleDefinition, ...]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogError(f"Cannot read rule catalog {path}: {e}") from e
    if not isinstance(raw, list):
        raise CatalogError(f"Rule catalog {path} must be a list")

    catalog = build_catalog(raw)
    logger.info("Loaded %s rules from %s", len(catalog), path)
    return catalog
