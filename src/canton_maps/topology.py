"""
TopoJSON to GeoJSON conversion.

A TopoJSON topology stores every shared border once, as an "arc", and
describes each geometry as a list of arc indices. The arcs are stitched back
into coordinates by the ``topojson`` package; this module picks the layer,
keeps geometry ids and properties, and wraps the result in a
BoundaryFeatureCollection.

Only the first object layer of the topology is converted.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from topojson.utils import serialize_as_geojson

from .errors import EmptyTopologyError

logger = logging.getLogger(__name__)

GEOMETRY_TYPES = ('Point', 'MultiPoint', 'LineString', 'MultiLineString',
                  'Polygon', 'MultiPolygon', 'GeometryCollection')


@dataclass
class BoundaryFeatureCollection:
    """GeoJSON FeatureCollection whose features carry ``properties.name``."""

    features: List[Dict[str, Any]] = field(default_factory=list)
    layer: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.features, list):
            raise ValueError("features must be a list of GeoJSON features")
        for feature in self.features:
            if not isinstance(feature, dict) or feature.get('type') != 'Feature':
                raise ValueError(f"Not a GeoJSON feature: {feature!r}")

    @classmethod
    def from_geojson(cls, data: Dict[str, Any], layer: Optional[str] = None) -> 'BoundaryFeatureCollection':
        if data.get('type') != 'FeatureCollection':
            raise ValueError("Input is not a GeoJSON FeatureCollection")
        return cls(features=list(data.get('features', [])), layer=layer)

    def to_geojson(self) -> Dict[str, Any]:
        return {'type': 'FeatureCollection', 'features': self.features}

    def names(self) -> List[Optional[str]]:
        return [(feature.get('properties') or {}).get('name') for feature in self.features]

    def bounds(self) -> Optional[List[List[float]]]:
        """[[south, west], [north, east]] of all features, None when there are no coordinates."""
        lons: List[float] = []
        lats: List[float] = []
        for feature in self.features:
            for lon, lat in _iter_positions(feature.get('geometry')):
                lons.append(lon)
                lats.append(lat)
        if not lons:
            return None
        return [[min(lats), min(lons)], [max(lats), max(lons)]]

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.features)


def _iter_positions(geometry: Optional[Dict[str, Any]]) -> Iterator[List[float]]:
    """Recursively yield (lon, lat) of every position in a GeoJSON geometry."""
    if not geometry:
        return
    if geometry.get('type') == 'GeometryCollection':
        for g in geometry.get('geometries', []):
            yield from _iter_positions(g)
        return

    def walk(coords):
        if coords and isinstance(coords[0], (int, float)):
            yield coords[:2]
            return
        for c in coords:
            yield from walk(c)

    yield from walk(geometry.get('coordinates') or [])


def _as_lists(coords):
    """Coordinates as nested lists of floats; the library may return tuples or numpy values."""
    if hasattr(coords, 'tolist'):
        coords = coords.tolist()
    if isinstance(coords, (list, tuple)):
        return [_as_lists(c) for c in coords]
    return float(coords)


def _plain_geometry(geometry: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not geometry:
        return None
    if geometry.get('type') == 'GeometryCollection':
        return {'type': 'GeometryCollection',
                'geometries': [_plain_geometry(g) for g in geometry.get('geometries', [])]}
    return {'type': geometry['type'], 'coordinates': _as_lists(geometry['coordinates'])}


def topology_to_features(topology: Dict[str, Any]) -> BoundaryFeatureCollection:
    """
    Convert the first object layer of a TopoJSON topology to GeoJSON.

    Args:
        topology: Parsed TopoJSON document with a non-empty ``objects`` mapping

    Returns:
        BoundaryFeatureCollection with one feature per geometry of the layer

    Raises:
        EmptyTopologyError: If ``objects`` has no keys
        ValueError: If a geometry has an unknown type
    """
    objects = topology.get('objects') or {}
    if not objects:
        raise EmptyTopologyError("No objects found in TopoJSON")

    # Layers keep the order of the source document
    layer = next(iter(objects))
    obj = objects[layer]
    if obj.get('type') == 'GeometryCollection':
        geometries = obj.get('geometries', [])
    else:
        geometries = [obj]

    for g in geometries:
        if g.get('type') is not None and g['type'] not in GEOMETRY_TYPES:
            raise ValueError(f"Unsupported TopoJSON geometry type: {g['type']}")

    # serialize_as_geojson reads a GeometryCollection layer without null geometries
    drawable = [g for g in geometries if g.get('type') is not None]
    converted = []
    if drawable:
        layer_topology = dict(topology)
        layer_topology['arcs'] = topology.get('arcs', [])
        layer_topology['objects'] = {layer: {'type': 'GeometryCollection',
                                             'geometries': copy.deepcopy(drawable)}}
        converted = serialize_as_geojson(layer_topology, objectname=layer)['features']
    converted = iter(converted)

    features = []
    for index, g in enumerate(geometries):
        geometry = _plain_geometry(next(converted)['geometry']) if g.get('type') is not None else None
        features.append({
            'type': 'Feature',
            'id': g['id'] if g.get('id') is not None else index,
            'properties': dict(g.get('properties') or {}),
            'geometry': geometry,
        })

    logger.debug("Converted layer '%s' with %d features", layer, len(features))
    return BoundaryFeatureCollection(features=features, layer=layer)


def load_topology_file(path: Union[str, Path]) -> BoundaryFeatureCollection:
    """Read a .topojson file from disk and convert it."""
    with open(path, 'r', encoding='utf-8') as f:
        return topology_to_features(json.load(f))
