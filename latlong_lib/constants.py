# -*- coding: utf-8 -*-
"""Constants used throughout the latlong_lib library.

This module centralizes all constant values to ensure consistency
and avoid magic numbers/strings scattered across the codebase.
"""

# -----------------------------------------------------------------------------
# Encodings
# -----------------------------------------------------------------------------

#: Encoding used for JSON / GeoJSON output
JSON_ENCODING = "utf-8"

# -----------------------------------------------------------------------------
# Coordinate Reference Systems
# -----------------------------------------------------------------------------

#: EPSG code of the default CRS (WGS 84 geographic)
DEFAULT_CRS_CODE: str = "4326"

#: Label shown for the default CRS before the full CRS list is loaded
DEFAULT_CRS_LABEL: str = "WGS 84 (EPSG:4326)"

#: PROJ definition of WGS 84 (longitude, latitude axis order)
WGS84_PROJ4: str = "+proj=longlat +datum=WGS84 +no_defs"

#: Authority used when querying the PROJ database
CRS_AUTHORITY: str = "EPSG"

# -----------------------------------------------------------------------------
# Accurate Position Sampling
# -----------------------------------------------------------------------------

#: Default warm-up duration before any fix is counted (milliseconds)
DEFAULT_WARMUP_MS: int = 30_000

#: Default collection window duration (milliseconds)
DEFAULT_COLLECTION_MS: int = 60_000

#: Fixes with a reported accuracy above this radius are discarded (meters)
MAX_ACCEPTABLE_ACCURACY_M: float = 10.0

#: Interval between periodic progress reports (milliseconds)
DEFAULT_PROGRESS_INTERVAL_MS: int = 500

#: Expected number of accepted samples, used for progress display only
DEFAULT_TARGET_SAMPLES: int = 20

#: Number of serial captures added by one extension batch
DEFAULT_EXTENSION_BATCH_SIZE: int = 10

#: Delay between two serial captures of an extension batch (milliseconds)
DEFAULT_EXTENSION_CAPTURE_DELAY_MS: int = 5_000

#: Single-shot capture timeout (milliseconds)
DEFAULT_CAPTURE_TIMEOUT_MS: int = 10_000

#: Interval between fixes replayed by the fixture location provider (ms)
FIXTURE_FIX_INTERVAL_MS: int = 800

# -----------------------------------------------------------------------------
# Settings Bounds
# -----------------------------------------------------------------------------

#: Lower bound for any duration setting (seconds)
SETTINGS_MIN_SECONDS: int = 1

#: Upper bound for any duration setting (seconds)
SETTINGS_MAX_SECONDS: int = 600

#: Prefix of the environment variables read by ``load_settings``
SETTINGS_ENV_PREFIX: str = "LATLONG_"

# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

#: Decimal precision for GeoJSON coordinates (WGS84)
GEOJSON_COORDINATE_PRECISION: int = 7

#: Fallback name used when a requested name is blank
FALLBACK_RECORD_NAME: str = "1"

#: Suffix appended to records created by a CRS transform
TRANSFORM_NAME_SUFFIX: str = "_Transform"

#: Suffix appended to records created by a bearing/distance projection
PROJECT_NAME_SUFFIX: str = "_Project"
