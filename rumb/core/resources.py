"""Topology and rule catalog, loaded once per process."""
from functools import lru_cache
from typing import Tuple

from rumb.core.config import settings
from rumb.engine import RegionGraph, RuleDefinition, load_catalog, load_topology

@lru_cache
def get_region_graph() -> RegionGraph:
    return load_topology(settings.TOPOLOGY_PATH)

@lru_cache
def get_rule_catalog() -> Tuple[RuleDefinition, ...]:
    return load_catalog(settings.RULES_PATH)
