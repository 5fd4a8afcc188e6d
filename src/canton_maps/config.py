import os

# Fill used for regions without a value or without a matching range
DEFAULT_COLOR = '#cccccc'

# Fixed stroke applied to every painted region
REGION_STYLE = {
    'color': '#555555',     # Border color
    'weight': 1,            # Border width
    'opacity': 1,           # Border transparency
    'fillOpacity': 0.75     # Fill transparency
}

# Popup label for features without a display name
FALLBACK_LABEL = 'Sin nombre'

# Tabular join key and value column
NAME_COLUMN = 'Canton'
VALUE_COLUMN = 'Total'
REQUIRED_COLUMNS = (VALUE_COLUMN, NAME_COLUMN)

# Map widget
TILE_URL = 'https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png'
TILE_ATTRIBUTION = '© OpenStreetMap contributors'
INITIAL_LOCATION = [0, 0]
INITIAL_ZOOM = 10

LEAFLET_IMAGES = 'https://cdnjs.cloudflare.com/ajax/libs/leaflet/1.9.4/images'
MARKER_ICON_URLS = {
    'iconRetinaUrl': f'{LEAFLET_IMAGES}/marker-icon-2x.png',
    'iconUrl': f'{LEAFLET_IMAGES}/marker-icon.png',
    'shadowUrl': f'{LEAFLET_IMAGES}/marker-shadow.png',
}

# Boundary source, overridable from the environment
BOUNDARY_BASE_URL = os.environ.get('CANTON_MAPS_BOUNDARY_URL', 'http://localhost:8000')
REQUEST_TIMEOUT = float(os.environ.get('CANTON_MAPS_TIMEOUT', '30'))
