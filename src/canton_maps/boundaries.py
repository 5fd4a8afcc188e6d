import json
import logging
from pathlib import Path
from typing import Optional, Union

import requests

from . import config
from .errors import LoadError
from .topology import BoundaryFeatureCollection, topology_to_features

logger = logging.getLogger(__name__)


def boundary_filename(country: str) -> str:
    """File name of a country's boundaries, e.g. 'Suiza' -> 'suiza.topojson'."""
    return f"{country.lower()}.topojson"


def boundary_url(country: str, base_url: Optional[str] = None) -> str:
    base = (base_url or config.BOUNDARY_BASE_URL).rstrip('/')
    return f"{base}/topojson/{boundary_filename(country)}"


def fetch_country_boundaries(country: str, base_url: Optional[str] = None,
                             session: Optional[requests.Session] = None,
                             timeout: Optional[float] = None) -> BoundaryFeatureCollection:
    """
    Download a country's TopoJSON boundaries and convert them to GeoJSON.

    Args:
        country: Country name, lowercased to build the file name
        base_url: Server root; defaults to config.BOUNDARY_BASE_URL
        session: Optional requests session (anything with a ``get`` method)
        timeout: Request timeout in seconds; defaults to config.REQUEST_TIMEOUT

    Returns:
        BoundaryFeatureCollection of the first object layer

    Raises:
        LoadError: On a non-2xx response (``status_code`` set) or a network failure
        EmptyTopologyError: If the topology has no object layers
    """
    url = boundary_url(country, base_url)
    http = session or requests
    logger.info(f"Fetching boundaries for {country} from {url}")

    try:
        response = http.get(url, timeout=timeout or config.REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise LoadError(f"Error loading data: {e}") from e

    if not response.ok:
        raise LoadError(f"Error loading data: {response.status_code}",
                        status_code=response.status_code)

    try:
        topology = response.json()
    except ValueError as e:
        raise LoadError(f"Invalid TopoJSON from {url}: {e}",
                        status_code=response.status_code) from e

    return topology_to_features(topology)


def read_country_boundaries(country: str, directory: Union[str, Path]) -> BoundaryFeatureCollection:
    """Offline counterpart of fetch_country_boundaries, reading <directory>/<country>.topojson."""
    path = Path(directory) / boundary_filename(country)
    logger.info(f"Reading boundaries for {country} from {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            topology = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        raise LoadError(f"Could not load {path}: {e}") from e
    return topology_to_features(topology)
