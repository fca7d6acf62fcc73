# -*- coding: utf-8 -*-
"""Core data models for coordinate records, CRS definitions and location samples.

This module contains the Pydantic models shared by the projection kernel,
the transform adapter, the position estimator and the record store.
"""

from __future__ import annotations

import math
from typing import Annotated
from typing import NamedTuple

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic_extra_types.coordinate import Latitude  # noqa: TC002
from pydantic_extra_types.coordinate import Longitude  # noqa: TC002

from latlong_lib.constants import GEOJSON_COORDINATE_PRECISION
from latlong_lib.enums import RecordOrigin

# ---------------------------------------------------------------------------
# Planar primitives
# ---------------------------------------------------------------------------


class PlanarPoint(NamedTuple):
    """A point on a projected (easting, northing) grid."""

    easting: float
    northing: float


class BearingDistance(NamedTuple):
    """Bearing in degrees clockwise from North, and planar distance."""

    bearing_deg: float
    distance: float


# ---------------------------------------------------------------------------
# Geographic models
# ---------------------------------------------------------------------------


class GeoLocation(BaseModel):
    """A WGS84 latitude / longitude pair."""

    model_config = ConfigDict(frozen=True)

    latitude: Latitude
    longitude: Longitude

    def as_tuple(self) -> tuple[float, float]:
        """Return the position as a GeoJSON ``(longitude, latitude)`` tuple."""
        return (
            round(self.longitude, GEOJSON_COORDINATE_PRECISION),
            round(self.latitude, GEOJSON_COORDINATE_PRECISION),
        )


class LocationSample(BaseModel):
    """A location fix tagged with its reported accuracy.

    Attributes:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        accuracy: 1-sigma radius of uncertainty in meters (smaller is better).
            Infinity means the provider did not report an accuracy.
    """

    model_config = ConfigDict(frozen=True)

    latitude: Latitude
    longitude: Longitude
    accuracy: Annotated[float, Field(ge=0.0)] = math.inf

    @field_validator("accuracy", mode="before")
    @classmethod
    def missing_accuracy_is_infinite(cls, value: float | None) -> float:
        """Providers that cannot estimate accuracy report None."""
        if value is None:
            return math.inf
        return value


class LocationFix(LocationSample):
    """A raw fix delivered by a location provider."""

    timestamp_ms: float = 0.0

    def to_sample(self) -> LocationSample:
        """Drop the timestamp, keeping only what the estimator needs."""
        return LocationSample(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
        )


# ---------------------------------------------------------------------------
# Coordinate Reference Systems
# ---------------------------------------------------------------------------


class CRSOption(BaseModel):
    """A CRS entry of the full CRS list (code and name only)."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str

    @property
    def label(self) -> str:
        """Display label, e.g. ``WGS 84 (EPSG:4326)``."""
        return f"{self.name} (EPSG:{self.code})"


class CRSDefinition(BaseModel):
    """A loaded CRS definition. Immutable once loaded.

    Attributes:
        code: Authority code, e.g. "4326"
        name: CRS name, e.g. "WGS 84"
        kind: CRS type name, indicates geographic vs projected
        projection_params: PROJ definition string
    """

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    kind: str
    projection_params: str

    @property
    def is_projected(self) -> bool:
        """Whether the CRS is projected (e.g. UTM) rather than geographic."""
        kind = self.kind.lower()
        return "projected" in kind or "projcrs" in kind

    @property
    def axis_labels(self) -> tuple[str, str]:
        """Axis labels for display (x axis first)."""
        if self.is_projected:
            return ("Easting", "Northing")
        return ("Longitude", "Latitude")


# ---------------------------------------------------------------------------
# Coordinate records
# ---------------------------------------------------------------------------


class CoordinateRecord(BaseModel):
    """A single named coordinate of the working set.

    Attributes:
        id: Opaque unique identifier, immutable once assigned
        name: User-visible name, unique among live records
        crs_code: EPSG code of the CRS the coordinates are expressed in
        x: Longitude / easting (depends on the CRS)
        y: Latitude / northing (depends on the CRS)
        origin: How the record was created
        notes: Optional free-form user note
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Annotated[str, Field(frozen=True, min_length=1)]
    name: Annotated[str, Field(min_length=1)]
    crs_code: str
    x: Annotated[float, Field(allow_inf_nan=False)]
    y: Annotated[float, Field(allow_inf_nan=False)]
    origin: RecordOrigin = RecordOrigin.MANUAL
    notes: str | None = None

    def __str__(self) -> str:
        """Format as human-readable string."""
        return (
            f"CoordinateRecord(name={self.name}, "
            f"crs=EPSG:{self.crs_code}, "
            f"x={self.x}, "
            f"y={self.y})"
        )
