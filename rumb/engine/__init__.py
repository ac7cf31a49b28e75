from rumb.engine.builder import GeneratedLevel, LevelData, build_level, generate_level
from rumb.engine.catalog import load_catalog
from rumb.engine.errors import CatalogError, EngineError, TopologyError
from rumb.engine.graph import Region, RegionGraph, load_topology
from rumb.engine.rules import ResolvedRule, RuleDefinition, RuleKind, Tier
