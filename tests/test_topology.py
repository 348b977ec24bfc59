import json

import pytest
import requests

from world_pulse.topology import (
    TopologyError,
    build_geometry,
    decode_arcs,
    feature,
    load_topology,
    load_world,
    merge_land,
    mesh,
)


def test_decode_quantized_arcs():
    topo = {
        "type": "Topology",
        "transform": {"scale": [0.5, 2.0], "translate": [-10, 5]},
        "arcs": [[[0, 0], [2, 1], [-1, 3]]],
        "objects": {},
    }
    assert decode_arcs(topo) == [[(-10.0, 5.0), (-9.0, 7.0), (-9.5, 13.0)]]


def test_feature_builds_closed_rings_with_ids(topology):
    feats = feature(topology, "countries")
    assert [f.id for f in feats] == ["840", "124", "010"]
    ring = feats[0].polygons[0][0]
    assert ring[0] == ring[-1]
    assert (-20.0, 10.0) in ring
    assert feats[0].properties == {"name": "US"}


def test_reversed_arc_index(topology):
    land = merge_land(topology, "land")
    assert len(land.polygons) == 2
    outer = land.polygons[0][0]
    assert outer[0] == outer[-1]
    assert (40.0, -10.0) in outer
    assert land.bounds() == (-20.0, -75.0, 40.0, 10.0)


def test_mesh_emits_shared_arc_once(topology):
    borders = mesh(topology, "countries")
    assert len(borders.lines) == 4
    assert borders.lines.count([(20.0, -10.0), (20.0, 10.0)]) == 1


def test_mesh_keep_filter(topology):
    # 只保留两个不同国家之间的 arc
    borders = mesh(topology, "countries", lambda a, b: a is not b)
    assert borders.lines == [[(20.0, -10.0), (20.0, 10.0)]]


def test_missing_object_raises(topology):
    with pytest.raises(TopologyError):
        feature(topology, "rivers")


def test_build_geometry(topology):
    bundle = build_geometry(topology, topology)
    assert not bundle.land.is_empty()
    assert len(bundle.countries) == 3
    assert len(bundle.borders.lines) == 4


def test_build_geometry_warns_on_empty_land(topology, caplog):
    topology["objects"]["land"]["geometries"] = []
    with caplog.at_level("WARNING", logger="world_pulse.topology"):
        bundle = build_geometry(topology, topology)
    assert bundle.land.is_empty()
    assert "no polygons" in caplog.text



def test_load_topology_from_file(tmp_path, topology):
    path = tmp_path / "world.json"
    path.write_text(json.dumps(topology), encoding="utf-8")
    assert load_topology(path)["objects"].keys() == {"countries", "land"}


def test_load_topology_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(TopologyError):
        load_topology(path)


def test_load_topology_wrong_type(tmp_path):
    path = tmp_path / "geo.json"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": []}), encoding="utf-8")
    with pytest.raises(TopologyError):
        load_topology(path)


def test_load_topology_url(monkeypatch, topology):
    class FakeResponse:
        def raise_for_status(self):
            pass

        def json(self):
            return topology

    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse()

    monkeypatch.setattr(requests, "get", fake_get)
    assert load_topology("https://example.test/land.json")["type"] == "Topology"
    assert calls == ["https://example.test/land.json"]


def test_load_topology_network_error(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", fake_get)
    with pytest.raises(TopologyError):
        load_topology("https://example.test/land.json")


def test_load_world_wraps_malformed_geometry(tmp_path, topology):
    topology["objects"]["countries"]["geometries"][0]["arcs"] = [[99]]
    path = tmp_path / "world.json"
    path.write_text(json.dumps(topology), encoding="utf-8")
    with pytest.raises(TopologyError):
        load_world(path, path)


@pytest.mark.parametrize("entry", [None, 7, "Polygon", [1, 2]])
def test_non_object_geometry_entry_raises(tmp_path, topology, entry):
    topology["objects"]["countries"]["geometries"].append(entry)
    path = tmp_path / "world.json"
    path.write_text(json.dumps(topology), encoding="utf-8")
    with pytest.raises(TopologyError):
        load_world(path, path)
    with pytest.raises(TopologyError):
        feature(topology, "countries")
