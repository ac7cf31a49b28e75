"""
Region adjacency graph.

Regions are loaded once from a topology file and never change afterwards.
Ids are kept in load order because the level builder samples by index and
falls back to the first two ids.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from rumb.engine.errors import TopologyError

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class Region:
    id: str
    name: str


class RegionGraph:
    """Undirected "shares a border" relation between regions"""

    def __init__(self, regions: Sequence[Region], adjacency: Dict[str, Iterable[str]]):
        if len(regions) < 2:
            raise TopologyError("A topology needs at least two regions")

        self._regions: Dict[str, Region] = {}
        for region in regions:
            if not region.id:
                raise TopologyError(f"Region without id: {region!r}")
            if region.id in self._regions:
                raise TopologyError(f"Duplicate region id: {region.id}")
            self._regions[region.id] = region
        self._ids: Tuple[str, ...] = tuple(region.id for region in regions)

        # symmetrise: a border seen from one side is a border from both
        links: Dict[str, set] = {region_id: set() for region_id in self._ids}
        for region_id, neighbors in adjacency.items():
            if region_id not in links:
                raise TopologyError(f"Adjacency for unknown region: {region_id}")
            for neighbor_id in neighbors:
                if neighbor_id not in links:
                    raise TopologyError(f"Unknown neighbor {neighbor_id} of {region_id}")
                if neighbor_id == region_id:
                    continue
                links[region_id].add(neighbor_id)
                links[neighbor_id].add(region_id)
        # neighbor order follows load order so BFS tie-breaks are reproducible
        position = {region_id: index for index, region_id in enumerate(self._ids)}
        self._neighbors: Dict[str, Tuple[str, ...]] = {
            region_id: tuple(sorted(neighbors, key=position.__getitem__))
            for region_id, neighbors in links.items()
        }
        self._neighbor_sets: Dict[str, FrozenSet[str]] = {
            region_id: frozenset(neighbors) for region_id, neighbors in links.items()
        }

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._regions

    def neighbors(self, region_id: str) -> Tuple[str, ...]:
        return self._neighbors.get(region_id, ())

    def neighbor_set(self, region_id: str) -> FrozenSet[str]:
        return self._neighbor_sets.get(region_id, frozenset())

    def all_ids(self) -> Tuple[str, ...]:
        return self._ids

    def names(self) -> List[str]:
        return [self._regions[region_id].name for region_id in self._ids]

    def region(self, region_id: str) -> Optional[Region]:
        return self._regions.get(region_id)

    def name_of(self, region_id: str) -> Optional[str]:
        region = self._regions.get(region_id)
        return region.name if region else None

    def are_adjacent(self, a: str, b: str) -> bool:
        return b in self.neighbor_set(a)

    def edge_count(self) -> int:
        return sum(len(neighbors) for neighbors in self._neighbors.values()) // 2

    @classmethod
    def from_index_lists(cls, regions: Sequence[Region], neighbors: Sequence[Sequence[int]]) -> "RegionGraph":
        """Build from a neighbor list aligned by index with the region list"""
        if len(neighbors) != len(regions):
            raise TopologyError(
                f"Neighbor list has {len(neighbors)} entries for {len(regions)} regions"
            )
        adjacency: Dict[str, List[str]] = {}
        for index, indexes in enumerate(neighbors):
            region_neighbors = []
            for neighbor_index in indexes:
                if not isinstance(neighbor_index, int) or not 0 <= neighbor_index < len(regions):
                    raise TopologyError(
                        f"Neighbor index {neighbor_index!r} out of range for {regions[index].id}"
                    )
                region_neighbors.append(regions[neighbor_index].id)
            adjacency[regions[index].id] = region_neighbors
        return cls(regions, adjacency)

    @classmethod
    def from_geojson(cls, collection: dict, id_field: str = "id", name_field: str = "name") -> "RegionGraph":
        """Derive adjacency from a GeoJSON FeatureCollection of (multi)polygons.

        Two regions are adjacent when their boundaries touch, overlap or
        intersect: a shared vertex or two crossing ring segments.
        """
        features = collection.get("features") or []
        if not features:
            raise TopologyError("GeoJSON collection has no features")

        regions: List[Region] = []
        rings: List[List[List[Point]]] = []
        for feature in features:
            properties = feature.get("properties") or {}
            region_id = properties.get(id_field)
            name = properties.get(name_field)
            if not region_id or not name:
                raise TopologyError(f"Feature without {id_field}/{name_field}: {properties!r}")
            regions.append(Region(id=str(region_id), name=str(name)))
            rings.append(_feature_rings(feature.get("geometry") or {}))

        boxes = [_bounding_box(feature_rings) for feature_rings in rings]
        vertices = [
            {_snap(point) for ring in feature_rings for point in ring} for feature_rings in rings
        ]
        adjacency: Dict[str, List[str]] = {region.id: [] for region in regions}
        for i in range(len(regions)):
            for j in range(i + 1, len(regions)):
                if not _boxes_overlap(boxes[i], boxes[j]):
                    continue
                if vertices[i] & vertices[j] or _rings_intersect(rings[i], rings[j]):
                    adjacency[regions[i].id].append(regions[j].id)

        graph = cls(regions, adjacency)
        logger.info("Derived %s borders between %s regions", graph.edge_count(), len(graph))
        return graph


def load_topology(path) -> RegionGraph:
    """Load `{regions: [{id, name}], neighbors: [[index, ...]]}` from disk"""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise TopologyError(f"Cannot read topology {path}: {e}") from e

    if raw.get("type") == "FeatureCollection":
        return RegionGraph.from_geojson(raw)

    region_rows = raw.get("regions")
    neighbor_rows = raw.get("neighbors")
    if not isinstance(region_rows, list) or not isinstance(neighbor_rows, list):
        raise TopologyError(f"Topology {path} needs 'regions' and 'neighbors' lists")

    regions = []
    for row in region_rows:
        if not isinstance(row, dict) or not row.get("id") or not row.get("name"):
            raise TopologyError(f"Malformed region entry: {row!r}")
        regions.append(Region(id=str(row["id"]), name=str(row["name"])))

    graph = RegionGraph.from_index_lists(regions, neighbor_rows)
    logger.info("Loaded topology %s: %s regions, %s borders", path, len(graph), graph.edge_count())
    return graph


# geometry helpers

def _feature_rings(geometry: dict) -> List[List[Point]]:
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates") or []
    if kind == "Polygon":
        polygons = [coordinates]
    elif kind == "MultiPolygon":
        polygons = coordinates
    else:
        raise TopologyError(f"Unsupported geometry type: {kind}")
    return [[(float(x), float(y)) for x, y, *_ in ring] for polygon in polygons for ring in polygon]


def _snap(point: Point) -> Point:
    return round(point[0], 6), round(point[1], 6)


def _bounding_box(rings: List[List[Point]]) -> Tuple[float, float, float, float]:
    xs = [x for ring in rings for x, _ in ring]
    ys = [y for ring in rings for _, y in ring]
    if not xs:
        raise TopologyError("Geometry without coordinates")
    return min(xs), min(ys), max(xs), max(ys)


def _boxes_overlap(a, b) -> bool:
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def _orientation(p: Point, q: Point, r: Point) -> float:
    return (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])


def _on_segment(p: Point, q: Point, r: Point) -> bool:
    return min(p[0], r[0]) <= q[0] <= max(p[0], r[0]) and min(p[1], r[1]) <= q[1] <= max(p[1], r[1])


def _segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)
    if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
        return True
    # collinear touching
    return (
        (d1 == 0 and _on_segment(q1, p1, q2))
        or (d2 == 0 and _on_segment(q1, p2, q2))
        or (d3 == 0 and _on_segment(p1, q1, p2))
        or (d4 == 0 and _on_segment(p1, q2, p2))
    )


def _rings_intersect(a: List[List[Point]], b: List[List[Point]]) -> bool:
    for ring_a in a:
        for ring_b in b:
            for i in range(len(ring_a) - 1):
                for j in range(len(ring_b) - 1):
                    if _segments_intersect(ring_a[i], ring_a[i + 1], ring_b[j], ring_b[j + 1]):
                        return True
    return False
