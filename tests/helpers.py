"""Small hand-built topologies shared by the tests."""

US = "840"  # box around the equator
CA = "124"  # east neighbour of US, shares the lon=20 edge
AQ = "010"  # box below the south gate


def synthetic_topology():
    arcs = [
        [[20, -10], [20, 10]],                                   # 0: US | CA
        [[20, 10], [-20, 10], [-20, -10], [20, -10]],            # 1: US
        [[20, 10], [40, 10], [40, -10], [20, -10]],              # 2: CA
        [[-20, -65], [20, -65], [20, -75], [-20, -75], [-20, -65]],  # 3: AQ
    ]
    return {
        "type": "Topology",
        "arcs": arcs,
        "objects": {
            "countries": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": US, "arcs": [[1, 0]], "properties": {"name": "US"}},
                    {"type": "Polygon", "id": CA, "arcs": [[2, 0]], "properties": {"name": "CA"}},
                    {"type": "Polygon", "id": AQ, "arcs": [[3]], "properties": {"name": "AQ"}},
                ],
            },
            "land": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "MultiPolygon", "arcs": [[[1, -3]], [[3]]]},
                ],
            },
        },
    }
