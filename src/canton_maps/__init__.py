"""Choropleth maps of cantons from TopoJSON boundaries and CSV totals."""

from .boundaries import fetch_country_boundaries, read_country_boundaries
from .errors import (CantonMapsError, EmptyDatasetError, EmptyTopologyError, InvalidEventError,
                     LoadError, MissingColumnError)
from .map_controller import LayerHandle, MapController, MapState, Region
from .ranges import ChangeEvent, Range, classify, ranges_from_bounds, value_bounds
from .tabular import RegionValue, load_table, region_values
from .topology import BoundaryFeatureCollection, load_topology_file, topology_to_features

__version__ = '0.1.0'
