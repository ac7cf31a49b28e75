import json

import pytest

from rumb.engine import Region, RegionGraph, TopologyError, load_topology


def _square(x: float, y: float, size: float = 1.0) -> dict:
    return {
        "type": "Polygon",
        "coordinates": [[[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]],
    }


def _feature(region_id: str, geometry: dict) -> dict:
    return {"type": "Feature", "properties": {"id": region_id, "name": f"Region {region_id}"}, "geometry": geometry}


def _collection() -> dict:
    crossing = {
        "type": "Polygon",
        "coordinates": [[[0.5, 0.25], [0.75, 0.25], [0.75, 2.5], [0.5, 2.5], [0.5, 0.25]]],
    }
    return {
        "type": "FeatureCollection",
        "features": [
            _feature("A", _square(0, 0)),
            _feature("B", _square(1, 0)),  # shares an edge with A
            _feature("C", _square(2, 1)),  # touches B at one corner
            _feature("D", _square(5, 5)),  # island
            _feature("E", crossing),  # crosses the top edge of A
        ],
    }


def test_ring_adjacency_is_symmetric_and_ordered(ring_graph) -> None:
    assert ring_graph.neighbors("A") == ("B", "F")
    assert ring_graph.neighbors("D") == ("C", "E")
    assert ring_graph.are_adjacent("F", "A")
    assert not ring_graph.are_adjacent("A", "D")
    assert ring_graph.edge_count() == 6
    assert ring_graph.all_ids() == ("A", "B", "C", "D", "E", "F")


def test_bundled_topology_is_symmetric(bundled_graph) -> None:
    assert len(bundled_graph) == 42
    for region_id in bundled_graph.all_ids():
        for neighbor_id in bundled_graph.neighbors(region_id):
            assert region_id in bundled_graph.neighbor_set(neighbor_id)
    assert bundled_graph.name_of("val-d-aran") == "Val d'Aran"


def test_self_loops_are_dropped() -> None:
    graph = RegionGraph([Region("a", "A"), Region("b", "B")], {"a": ["a", "b"]})
    assert graph.neighbors("a") == ("b",)
    assert graph.neighbors("b") == ("a",)


def test_region_without_neighbors_is_valid() -> None:
    graph = RegionGraph([Region("a", "A"), Region("b", "B"), Region("c", "C")], {"a": ["b"]})
    assert graph.neighbors("c") == ()
    assert "c" in graph
    assert "z" not in graph


@pytest.mark.parametrize(
    "regions, adjacency",
    [
        ([Region("a", "A")], {}),
        ([Region("a", "A"), Region("a", "Again")], {}),
        ([Region("a", "A"), Region("b", "B")], {"a": ["z"]}),
        ([Region("a", "A"), Region("b", "B")], {"z": ["a"]}),
    ],
)
def test_malformed_topology_is_rejected(regions, adjacency) -> None:
    with pytest.raises(TopologyError):
        RegionGraph(regions, adjacency)


def test_from_index_lists_validates_alignment() -> None:
    regions = [Region("a", "A"), Region("b", "B"), Region("c", "C")]
    graph = RegionGraph.from_index_lists(regions, [[1], [0, 2], [1]])
    assert graph.neighbors("b") == ("a", "c")

    with pytest.raises(TopologyError):
        RegionGraph.from_index_lists(regions, [[1], [0]])
    with pytest.raises(TopologyError):
        RegionGraph.from_index_lists(regions, [[1], [0, 5], []])


def test_geojson_adjacency_from_shared_and_crossing_borders() -> None:
    graph = RegionGraph.from_geojson(_collection())
    assert graph.neighbor_set("A") == {"B", "E"}
    assert graph.neighbor_set("B") == {"A", "C"}
    assert graph.neighbor_set("C") == {"B"}
    assert graph.neighbor_set("D") == frozenset()
    assert graph.neighbor_set("E") == {"A"}


def test_geojson_rejects_unsupported_geometry() -> None:
    collection = _collection()
    collection["features"][0]["geometry"] = {"type": "Point", "coordinates": [0, 0]}
    with pytest.raises(TopologyError):
        RegionGraph.from_geojson(collection)


def test_load_topology_reads_both_formats(tmp_path) -> None:
    index_file = tmp_path / "index.json"
    index_file.write_text(json.dumps({
        "regions": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}],
        "neighbors": [[1], []],
    }), encoding="utf-8")
    assert load_topology(index_file).neighbors("b") == ("a",)

    geo_file = tmp_path / "regions.geojson"
    geo_file.write_text(json.dumps(_collection()), encoding="utf-8")
    assert len(load_topology(geo_file)) == 5


def test_load_topology_errors(tmp_path) -> None:
    with pytest.raises(TopologyError):
        load_topology(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(TopologyError):
        load_topology(broken)

    incomplete = tmp_path / "incomplete.json"
    incomplete.write_text(json.dumps({"regions": [{"id": "a", "name": "A"}]}), encoding="utf-8")
    with pytest.raises(TopologyError):
        load_topology(incomplete)
