# -*- coding: utf-8 -*-
"""GeoJSON export of coordinate records.

Every record becomes a WGS84 Point feature (longitude, latitude).  Records
expressed in another CRS are transformed with the transform adapter, using
the CRS definitions supplied by the caller (typically loaded through a
``CrsCatalog``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

import orjson
from geojson import Feature
from geojson import FeatureCollection
from geojson import Point
from pydantic import ValidationError

from latlong_lib.constants import DEFAULT_CRS_CODE
from latlong_lib.constants import GEOJSON_COORDINATE_PRECISION
from latlong_lib.constants import JSON_ENCODING
from latlong_lib.constants import WGS84_PROJ4
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.models import GeoLocation
from latlong_lib.transform import transform_coordinate

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Mapping
    from pathlib import Path

    from latlong_lib.models import CoordinateRecord
    from latlong_lib.models import CRSDefinition
    from latlong_lib.transform import TransformEngine

logger = logging.getLogger(__name__)


def record_to_wgs84(
    record: CoordinateRecord,
    definition: CRSDefinition | None,
    engine: TransformEngine | None = None,
) -> GeoLocation | None:
    """WGS84 position of a record, or None if its CRS definition is missing.

    Raises:
        InvalidArgumentError: If the position is outside the WGS84 range
        TransformFailureError: If the projection engine fails
    """
    if record.crs_code == DEFAULT_CRS_CODE:
        lon, lat = record.x, record.y
    elif definition is None:
        return None
    else:
        lon, lat = transform_coordinate(
            definition.projection_params, WGS84_PROJ4, record.x, record.y, engine=engine
        )

    try:
        return GeoLocation(latitude=lat, longitude=lon)
    except ValidationError as e:
        raise InvalidArgumentError(
            f"`{record.name}` is not a valid WGS84 position: ({lon}, {lat})"
        ) from e


def record_to_feature(record: CoordinateRecord, location: GeoLocation) -> Feature:
    """Convert a record to a GeoJSON Point Feature."""
    properties: dict[str, Any] = {
        "id": record.id,
        "name": record.name,
        "crs_code": record.crs_code,
        "x": record.x,
        "y": record.y,
        "origin": record.origin.value,
        "notes": record.notes,
    }
    return Feature(
        id=record.id,
        geometry=Point(location.as_tuple(), precision=GEOJSON_COORDINATE_PRECISION),
        properties=properties,
    )


def records_to_feature_collection(
    records: Iterable[CoordinateRecord],
    definitions: Mapping[str, CRSDefinition],
    *,
    engine: TransformEngine | None = None,
) -> FeatureCollection:
    """Convert records to a GeoJSON FeatureCollection.

    Args:
        records: Records to export, in output order
        definitions: CRS definitions keyed by code
        engine: Projection engine (default: pyproj)

    Returns:
        GeoJSON FeatureCollection. Records whose CRS definition is missing
        are skipped.

    Raises:
        TransformFailureError: If a record cannot be transformed to WGS84
    """
    features = []
    for record in records:
        location = record_to_wgs84(record, definitions.get(record.crs_code), engine)
        if location is None:
            logger.warning(
                "Skipping `%s`: no definition for EPSG:%s", record.name, record.crs_code
            )
            continue
        features.append(record_to_feature(record, location))

    return FeatureCollection(features)


def dumps_feature_collection(
    feature_collection: FeatureCollection,
    output_path: Path | None = None,
    *,
    minify: bool = False,
) -> str:
    """Serialize a FeatureCollection, optionally writing it to ``output_path``."""
    opts = 0 if minify else orjson.OPT_INDENT_2
    json_str = orjson.dumps(feature_collection, option=opts).decode(JSON_ENCODING)

    if output_path:
        output_path.write_text(json_str, encoding=JSON_ENCODING)

    return json_str
