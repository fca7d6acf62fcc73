# -*- coding: utf-8 -*-
"""LatLong Library.

A Python library to manage a working set of named coordinates: CRS
transforms, bearing / distance projection on planar grids, and accurate
positions averaged from noisy location fixes.

Usage:
    # Keep a working set of coordinates
    from latlong_lib import CoordinateStore
    store = CoordinateStore()
    start = store.add("7850", 391159.523179, 6452622.726701, name="Entrance")
    target = store.project(start.id, bearing_deg=45, distance=100)

    # Transform through the PROJ database
    from latlong_lib import CrsCatalog
    catalog = CrsCatalog()
    wgs84 = await store.transform(start.id, "4326", catalog)

    # Average location fixes into one accurate position
    from latlong_lib import FeedLocationProvider, SamplingSessionController
    controller = SamplingSessionController(scheduler, FeedLocationProvider(scheduler))
    session = controller.start(SessionConfig(), SessionCallbacks(on_success=print))
"""

__version__ = "0.1.0"

# Constants
from latlong_lib.constants import DEFAULT_CRS_CODE
from latlong_lib.constants import MAX_ACCEPTABLE_ACCURACY_M
from latlong_lib.constants import WGS84_PROJ4

# CRS
from latlong_lib.crs import CrsCatalog
from latlong_lib.crs import CrsRegistry
from latlong_lib.crs import PyprojCrsRegistry

# Enums
from latlong_lib.enums import ErrorKind
from latlong_lib.enums import LocationErrorCode
from latlong_lib.enums import RecordOrigin
from latlong_lib.enums import SessionPhase

# Errors
from latlong_lib.errors import CrsNotFoundError
from latlong_lib.errors import ErrorRecord
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.errors import LatLongError
from latlong_lib.errors import PositionUnavailableError
from latlong_lib.errors import ProviderError
from latlong_lib.errors import RecordNotFoundError
from latlong_lib.errors import SessionStateError
from latlong_lib.errors import TransformFailureError
from latlong_lib.estimator import compute_weighted_average
from latlong_lib.export import records_to_feature_collection

# Location
from latlong_lib.location import FeedLocationProvider
from latlong_lib.location import FixtureLocationProvider
from latlong_lib.location import LocationProvider
from latlong_lib.location import PositionOptions

# Models
from latlong_lib.models import BearingDistance
from latlong_lib.models import CoordinateRecord
from latlong_lib.models import CRSDefinition
from latlong_lib.models import CRSOption
from latlong_lib.models import GeoLocation
from latlong_lib.models import LocationFix
from latlong_lib.models import LocationSample
from latlong_lib.models import PlanarPoint

# Naming
from latlong_lib.naming import derive_unique_name
from latlong_lib.naming import generate_record_id
from latlong_lib.naming import next_numeric_suggested_name

# Core computations
from latlong_lib.projection import bearing_distance_between
from latlong_lib.projection import project_from_bearing_distance

# Scheduling
from latlong_lib.scheduling import AsyncioScheduler
from latlong_lib.scheduling import ManualScheduler
from latlong_lib.scheduling import Scheduler

# Sessions
from latlong_lib.session import SamplingSession
from latlong_lib.session import SamplingSessionController
from latlong_lib.session import SessionCallbacks
from latlong_lib.session import SessionConfig
from latlong_lib.session import SessionProgress
from latlong_lib.session import SessionResult
from latlong_lib.settings import LatLongSettings
from latlong_lib.settings import load_settings
from latlong_lib.store import CoordinateStore
from latlong_lib.transform import transform_coordinate

__all__ = [
    "DEFAULT_CRS_CODE",
    "MAX_ACCEPTABLE_ACCURACY_M",
    "WGS84_PROJ4",
    "AsyncioScheduler",
    "BearingDistance",
    "CRSDefinition",
    "CRSOption",
    "CoordinateRecord",
    "CoordinateStore",
    "CrsCatalog",
    "CrsNotFoundError",
    "CrsRegistry",
    "ErrorKind",
    "ErrorRecord",
    "FeedLocationProvider",
    "FixtureLocationProvider",
    "GeoLocation",
    "InvalidArgumentError",
    "LatLongError",
    "LatLongSettings",
    "LocationErrorCode",
    "LocationFix",
    "LocationProvider",
    "LocationSample",
    "ManualScheduler",
    "PlanarPoint",
    "PositionOptions",
    "PositionUnavailableError",
    "ProviderError",
    "PyprojCrsRegistry",
    "RecordNotFoundError",
    "RecordOrigin",
    "SamplingSession",
    "SamplingSessionController",
    "Scheduler",
    "SessionCallbacks",
    "SessionConfig",
    "SessionPhase",
    "SessionProgress",
    "SessionResult",
    "SessionStateError",
    "TransformFailureError",
    "bearing_distance_between",
    "compute_weighted_average",
    "derive_unique_name",
    "generate_record_id",
    "load_settings",
    "next_numeric_suggested_name",
    "project_from_bearing_distance",
    "records_to_feature_collection",
    "transform_coordinate",
]
