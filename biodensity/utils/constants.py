"""
Application Constants

This module contains all application-wide constants to avoid magic numbers
and improve maintainability.
"""

# Earth model shared by distance and area (mean radius, km)
EARTH_RADIUS_KM = 6371.0088

# Distance conversion
METERS_PER_KM = 1000.0

# Default analysis parameters
DEFAULT_BUFFER_DISTANCE_KM = 0.1  # 100 m trail buffer
DEFAULT_DENSITY_BREAKPOINTS = (0, 1, 5, 15, 40, 100)
DEFAULT_TOP_N = 5

# Presentation rounding
SCORE_DECIMALS = 3
DENSITY_DECIMALS = 2

# Trail score tier cutoffs (upper bounds, exclusive) for tiers 1..3; tier 0 is score <= 0
TRAIL_SCORE_CUTOFFS = (0.25, 0.5, 0.75)

# Base layer file names inside the data directory
WATERSHEDS_FILE = "watersheds-huc8.geojson"
TRAILS_FILE = "trails.geojson"

# New Hampshire bounding box used for placeholder layers
NH_WEST = -72.55
NH_EAST = -70.70
NH_SOUTH = 42.70
NH_NORTH = 45.30

# Config
DEFAULT_CONFIG_PATH = "config/analysis_rulebook.yml"
CONFIG_PATH_ENV = "BIODENSITY_CONFIG"
BUFFER_DISTANCE_ENV = "BUFFER_DISTANCE_KM"
