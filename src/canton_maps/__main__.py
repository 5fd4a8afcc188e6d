"""
Command line front end.

USAGE:
    canton-maps render --country Suiza --csv cantons.csv [--event event.json] [--output map.html]
    canton-maps convert suiza.topojson suiza.geojson

``render`` draws the country's boundaries, paints them from the CSV totals
and writes a standalone HTML map. Without ``--event`` the value range of the
CSV is split into equal-width ranges, one per ``--colors`` entry.

``convert`` turns the first layer of a TopoJSON file into GeoJSON.
"""

import argparse
import json
import logging
import sys

from . import config
from .boundaries import fetch_country_boundaries, read_country_boundaries
from .errors import CantonMapsError, InvalidEventError
from .map_controller import MapController
from .ranges import ChangeEvent, ranges_from_bounds, value_bounds
from .tabular import load_table
from .topology import load_topology_file

logger = logging.getLogger('canton_maps')

DEFAULT_COLORS = ['#fdfde6', '#d6ebca', '#7fcdbb', '#41b6c4', '#2c7fb8', '#253494']


def _load_event(path, rows, colors):
    if path:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return ChangeEvent.from_dict(json.load(f))
        except (ValueError, KeyError, TypeError, OSError) as e:
            raise InvalidEventError(f"Invalid change event in {path}: {e!r}") from e

    bounds = value_bounds(rows)
    ranges = ranges_from_bounds(bounds, colors)
    return ChangeEvent(
        type='thumbsReset',
        thumb_count=max(len(ranges) - 1, 0),
        values=[r.max for r in ranges[:-1]],
        colors=list(colors),
        ranges=ranges,
    )


def render(args):
    controller = MapController()
    if args.boundary_dir:
        controller.load_country(args.country, read_country_boundaries, directory=args.boundary_dir)
    else:
        controller.load_country(args.country, fetch_country_boundaries, base_url=args.boundary_url)

    rows = load_table(args.csv, strict=args.strict)
    event = _load_event(args.event, rows, args.colors)
    regions = controller.paint(event, rows)

    unmatched = [r.label for r in regions if r.total is None]
    if unmatched:
        logger.warning(f"{len(unmatched)} regions without a value: {', '.join(unmatched)}")

    controller.save(args.output)


def convert(args):
    collection = load_topology_file(args.input)
    with open(args.output, 'w', encoding='utf-8') as f:
        json.dump(collection.to_geojson(), f)
    logger.info(f"Wrote {len(collection)} features from layer '{collection.layer}' to {args.output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='canton-maps', description="Choropleth maps of cantons.")
    parser.add_argument('-v', '--verbose', action='store_true', help="Log debug messages")
    subparsers = parser.add_subparsers(dest='command', required=True)

    p_render = subparsers.add_parser('render', help="Render a painted map to HTML")
    p_render.add_argument('--country', required=True, help="Country whose boundaries are drawn")
    p_render.add_argument('--csv', required=True, help="Delimited file with Canton and Total columns")
    p_render.add_argument('--event', help="JSON file with a range-slider change event")
    p_render.add_argument('--colors', nargs='+', default=DEFAULT_COLORS,
                          help="Range colors used when no event is given")
    p_render.add_argument('--output', default='map.html', help="HTML file to write")
    p_render.add_argument('--boundary-url', default=config.BOUNDARY_BASE_URL,
                          help="Server serving /topojson/<country>.topojson")
    p_render.add_argument('--boundary-dir', help="Read <country>.topojson from this directory instead")
    p_render.add_argument('--strict', action='store_true',
                          help="Check the required columns on every row, not only the first")
    p_render.set_defaults(func=render)

    p_convert = subparsers.add_parser('convert', help="Convert TopoJSON to GeoJSON")
    p_convert.add_argument('input', help="TopoJSON file")
    p_convert.add_argument('output', help="GeoJSON file to write")
    p_convert.set_defaults(func=convert)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')
    try:
        args.func(args)
    except CantonMapsError as e:
        logger.error(f"ERROR: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
