class EngineError(Exception):
    """Base error for the level generation engine"""


class TopologyError(EngineError):
    """Region topology is empty or malformed"""


class CatalogError(EngineError):
    """Rule catalog is empty or malformed"""
