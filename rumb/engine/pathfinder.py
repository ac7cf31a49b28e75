"""Breadth-first shortest routes over the region graph."""
from collections import deque
from typing import AbstractSet, Dict, List, Optional

from rumb.engine.graph import RegionGraph


def _bfs(graph: RegionGraph, start: str, target: str, allowed: Optional[AbstractSet[str]]) -> List[str]:
    queue = deque([start])
    visited = {start}
    previous: Dict[str, str] = {}

    while queue:
        current = queue.popleft()
        for neighbor in graph.neighbors(current):
            if neighbor in visited:
                continue
            if allowed is not None and neighbor not in allowed:
                continue
            visited.add(neighbor)
            previous[neighbor] = current
            if neighbor == target:
                path = [target]
                step = target
                while step in previous:
                    step = previous[step]
                    path.append(step)
                path.reverse()
                return path
            queue.append(neighbor)
    return []


def shortest_path(graph: RegionGraph, start: Optional[str], target: Optional[str]) -> List[str]:
    """Geodesic route including both endpoints, [] when unreachable"""
    if not start or not target:
        return []
    if start == target:
        return [start]
    return _bfs(graph, start, target, None)


def shortest_path_within(
    graph: RegionGraph, start: Optional[str], target: Optional[str], allowed: AbstractSet[str]
) -> List[str]:
    """Same as shortest_path but every visited region must be in `allowed`"""
    if not start or not target:
        return []
    if start not in allowed or target not in allowed:
        return []
    if start == target:
        return [start]
    return _bfs(graph, start, target, allowed)


def reachable_via(graph: RegionGraph, start: str, target: str, via: str, allowed: AbstractSet[str]) -> bool:
    if via not in allowed:
        return False
    if not shortest_path_within(graph, start, via, allowed):
        return False
    return bool(shortest_path_within(graph, via, target, allowed))
