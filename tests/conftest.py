import json

import pytest

from canton_maps.topology import topology_to_features


def two_cantons_topology():
    """
    Two unit squares sharing the edge x=1.

    Arc 0 is the shared border, walked upwards by A and backwards (~0) by B.
    """
    return {
        'type': 'Topology',
        'arcs': [
            [[1, 0], [1, 1]],
            [[1, 1], [0, 1], [0, 0], [1, 0]],
            [[1, 0], [2, 0], [2, 1], [1, 1]],
        ],
        'objects': {
            'cantons': {
                'type': 'GeometryCollection',
                'geometries': [
                    {'type': 'Polygon', 'id': 'a', 'arcs': [[0, 1]], 'properties': {'name': 'A'}},
                    {'type': 'Polygon', 'id': 'b', 'arcs': [[~0, 2]], 'properties': {'name': 'B'}},
                ],
            },
            'outline': {'type': 'LineString', 'arcs': [0]},
        },
    }


@pytest.fixture
def topology():
    return two_cantons_topology()


@pytest.fixture
def collection(topology):
    return topology_to_features(topology)


@pytest.fixture
def unnamed_topology():
    topology = two_cantons_topology()
    topology['objects']['cantons']['geometries'][1]['properties'] = {}
    return topology


@pytest.fixture
def topology_dir(tmp_path, topology):
    (tmp_path / 'suiza.topojson').write_text(json.dumps(topology), encoding='utf-8')
    return tmp_path


@pytest.fixture
def csv_bytes():
    return b"Canton,Total,Year\nA,5,2024\nB,15,2024\nC,25,2024\n"


@pytest.fixture
def csv_file(tmp_path, csv_bytes):
    path = tmp_path / 'cantons.csv'
    path.write_bytes(csv_bytes)
    return path


@pytest.fixture
def slider_payload():
    return {
        'type': 'thumbMoved',
        'thumbCount': 1,
        'values': [10],
        'colors': ['red', 'blue'],
        'ranges': [
            {'min': 0, 'max': 10, 'color': 'red'},
            {'min': 11, 'max': 20, 'color': 'blue'},
        ],
        'movedIndex': 0,
    }
