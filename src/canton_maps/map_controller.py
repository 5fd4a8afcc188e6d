"""
Map Controller Module

Owns the interactive map widget and the single boundary layer drawn on it.

The controller moves through three states:

    EMPTY   no boundaries on the map yet
    LOADED  a country's boundaries are drawn with the default Leaflet style
    PAINTED regions are filled according to the current value ranges

Loading a new country replaces the layer (LOADED -> LOADED is the common
case when the user switches country); every range-slider change event
repaints it (PAINTED -> PAINTED).

Example Usage:
    controller = MapController()
    controller.load_country('Suiza', fetch_country_boundaries)
    rows = load_table('cantons.csv')
    controller.paint(ChangeEvent.from_dict(slider_payload), rows)
    controller.save('cantons.html')
"""

import copy
import html
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import branca.element
import folium
import pandas as pd

from . import config
from .errors import EmptyTopologyError
from .ranges import ChangeEvent, Range, classify
from .tabular import region_values
from .topology import BoundaryFeatureCollection

logger = logging.getLogger(__name__)

LEGEND_NAME = 'range-legend'
POPUP_FIELD = 'popup_html'


class MapState(Enum):
    EMPTY = 'empty'
    LOADED = 'loaded'
    PAINTED = 'painted'


@dataclass(frozen=True)
class Region:
    """Painted state of one rendered feature."""
    name: Optional[str]
    total: Optional[float]
    color: str

    @property
    def label(self) -> str:
        return self.name or config.FALLBACK_LABEL


def format_total(value: Optional[float]) -> str:
    """Format a total for display, e.g. 1234567 -> '1,234,567' and 12.5 -> '12.50'."""
    if value is None or pd.isna(value):
        return "No data"
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def popup_content(region: Region) -> str:
    """HTML shown when a region is clicked: its name and, if joined, its value."""
    label = html.escape(region.label)
    if region.total is None:
        return f"<b>{label}</b>"
    return f"<b>{label}</b><br>Total: {format_total(region.total)}"


# branca elements keep their children in the private ``_children`` dict and
# offer no public removal (branca 0.6-0.8, as shipped with folium 0.14-0.19).
def _detach_child(parent: branca.element.Element, name: str):
    return parent._children.pop(name, None)


def _find_child(parent: branca.element.Element, name: str):
    return parent._children.get(name)


class LayerHandle:
    """
    Slot holding the one boundary layer on the map.

    ``replace`` always takes the old layer off the map before adding the new
    one, so at most one boundary layer is ever active.
    """

    def __init__(self, parent: folium.Map):
        self._parent = parent
        self.layer: Optional[folium.GeoJson] = None

    def replace(self, new_layer: folium.GeoJson) -> folium.GeoJson:
        self.remove()
        new_layer.add_to(self._parent)
        self.layer = new_layer
        return new_layer

    def remove(self):
        if self.layer is not None:
            _detach_child(self._parent, self.layer.get_name())
            self.layer = None

    def __bool__(self) -> bool:
        return self.layer is not None


class MapController:
    """
    Creates the map, swaps boundary layers and repaints region fill colors.
    """

    def __init__(self):
        self.map = self._create_map()
        self.layer = LayerHandle(self.map)
        self.state = MapState.EMPTY
        self.collection: Optional[BoundaryFeatureCollection] = None
        self.regions: List[Region] = []
        self.ranges: Optional[List[Range]] = None
        self._generation = 0

    @staticmethod
    def _create_map() -> folium.Map:
        m = folium.Map(location=config.INITIAL_LOCATION,
                       zoom_start=config.INITIAL_ZOOM, tiles=None)
        folium.TileLayer(tiles=config.TILE_URL, attr=config.TILE_ATTRIBUTION,
                         name='OpenStreetMap').add_to(m)

        # Point Leaflet's default marker icons at the CDN images
        options = ', '.join(f"{key}: '{url}'" for key, url in config.MARKER_ICON_URLS.items())
        script = (
            "delete L.Icon.Default.prototype._getIconUrl;\n"
            f"L.Icon.Default.mergeOptions({{{options}}});"
        )
        m.get_root().script.add_child(branca.element.Element(script), name='marker-icons')
        return m

    # -- boundary loading -------------------------------------------------

    def begin_load(self) -> int:
        """Start a boundary load; returns the generation that must still be current on finish."""
        self._generation += 1
        return self._generation

    def finish_load(self, generation: int, collection: BoundaryFeatureCollection) -> bool:
        """
        Show ``collection`` if no newer load was started since ``generation``.

        Returns:
            True if the boundaries were drawn, False if the result was stale and discarded
        """
        if generation != self._generation:
            logger.info(f"Discarding stale boundaries (load {generation}, current {self._generation})")
            return False
        self.show_boundaries(collection)
        return True

    def load_country(self, country: str,
                     source: Callable[..., BoundaryFeatureCollection], **kwargs) -> bool:
        """
        Fetch a country's boundaries with ``source`` and draw them.

        Args:
            country: Country name passed to ``source``
            source: fetch_country_boundaries, read_country_boundaries or compatible callable
            **kwargs: Extra arguments for ``source`` (base_url, directory, session...)
        """
        generation = self.begin_load()
        collection = source(country, **kwargs)
        return self.finish_load(generation, collection)

    def show_boundaries(self, collection: BoundaryFeatureCollection) -> folium.GeoJson:
        """
        Replace the current boundary layer and fit the viewport to it.

        Raises:
            EmptyTopologyError: If the collection has no features
        """
        if not len(collection):
            raise EmptyTopologyError("Boundary collection has no features")

        self.collection = collection
        self.regions = []
        self.ranges = None
        self._remove_legend()

        layer = self._build_layer()
        self.layer.replace(layer)

        bounds = collection.bounds()
        if bounds:
            self.map.fit_bounds(bounds)

        self.state = MapState.LOADED
        logger.info(f"Showing {len(collection)} regions from layer '{collection.layer}'")
        return layer

    # -- painting ---------------------------------------------------------

    def paint(self, event: Optional[ChangeEvent], rows: Union[pd.DataFrame, List[Dict[str, Any]]]) -> List[Region]:
        """
        Recolor every region from the tabular rows and the event's ranges.

        Each feature is joined to its row by exact name match. Features with
        no matching row keep the default color and show no value.

        Args:
            event: Latest range-slider change event; None paints everything with the default color
            rows: Rows with 'Canton' and 'Total' columns

        Returns:
            The Region of each feature, in feature order

        Raises:
            RuntimeError: If no boundaries were loaded yet
        """
        if self.state is MapState.EMPTY:
            raise RuntimeError("No boundaries loaded; call show_boundaries first")

        if not isinstance(rows, pd.DataFrame):
            rows = pd.DataFrame(rows, columns=[config.NAME_COLUMN, config.VALUE_COLUMN])

        # First row wins when a name repeats
        values: Dict[str, Optional[float]] = {}
        for rv in region_values(rows):
            values.setdefault(rv.name, rv.total)

        ranges = event.ranges if event is not None else None

        regions = []
        for name in self.collection.names():
            total = values.get(name) if name is not None else None
            regions.append(Region(name=name, total=total, color=classify(total, ranges)))

        self.regions = regions
        self.ranges = list(ranges) if ranges is not None else None
        self.layer.replace(self._build_layer(regions))
        self._add_legend(self.ranges or [])

        self.state = MapState.PAINTED
        matched = sum(1 for r in regions if r.total is not None)
        logger.debug(f"Painted {len(regions)} regions, {matched} joined to a value")
        return regions

    def region(self, name: str) -> Optional[Region]:
        for r in self.regions:
            if r.name == name:
                return r
        return None

    # -- layer construction -----------------------------------------------

    def _build_layer(self, regions: Optional[List[Region]] = None) -> folium.GeoJson:
        """Build the GeoJson layer; painted when ``regions`` is given."""
        geojson_copy = copy.deepcopy(self.collection.to_geojson())

        for i, feature in enumerate(geojson_copy['features']):
            properties = feature.setdefault('properties', {})
            properties.setdefault('name', None)
            if regions is not None:
                region = regions[i]
            else:
                region = Region(name=properties.get('name'), total=None, color=config.DEFAULT_COLOR)
            properties[POPUP_FIELD] = popup_content(region)

        style_function = None
        if regions is not None:
            colors = [r.color for r in regions]
            # Regions line up with features by position
            for i, feature in enumerate(geojson_copy['features']):
                feature['properties']['_region'] = i

            def style_function(feature):
                return {'fillColor': colors[feature['properties']['_region']], **config.REGION_STYLE}

        popup = folium.GeoJsonPopup(fields=[POPUP_FIELD], labels=False)
        return folium.GeoJson(
            geojson_copy,
            name=self.collection.layer or 'boundaries',
            style_function=style_function,
            popup=popup,
        )

    def _add_legend(self, ranges: List[Range]):
        """Attach (or replace) the legend listing the active ranges."""
        items = []
        for r in ranges:
            items.append(
                f"<div class='legend-item'><span class='swatch' style='background:{html.escape(r.color)};'></span>"
                f"{format_total(r.min)} to {format_total(r.max)}</div>"
            )
        items.append(
            f"<div class='legend-item'><span class='swatch' style='background:{config.DEFAULT_COLOR};'></span>"
            "No data</div>"
        )

        legend_html = f'''
        <div id='maplegend' class='maplegend'>
            {''.join(items)}
        </div>

        <style type='text/css'>
        .maplegend {{
            position: absolute;
            z-index: 9999;
            background-color: rgba(255, 255, 255, 0.95);
            border-radius: 8px;
            border: 2px solid #ccc;
            padding: 6px 10px;
            font-size: 12px;
            font-family: 'Helvetica', sans-serif;
            right: 20px;
            bottom: 40px;
        }}

        .maplegend .swatch {{
            display: inline-block;
            width: 14px;
            height: 14px;
            margin-right: 6px;
            vertical-align: middle;
            border: 1px solid #999;
        }}
        </style>
        '''
        self.map.get_root().html.add_child(branca.element.Element(legend_html), name=LEGEND_NAME)

    def _remove_legend(self):
        _detach_child(self.map.get_root().html, LEGEND_NAME)

    def legend_html(self) -> Optional[str]:
        legend = _find_child(self.map.get_root().html, LEGEND_NAME)
        return legend.render() if legend is not None else None

    def save(self, path: Union[str, Path]):
        """Write the map as a standalone HTML file."""
        self.map.save(str(path))
        logger.info(f"Map saved to {path}")
