# -*- coding: utf-8 -*-
"""Planar projection kernel.

Forward projection of a point by bearing and distance, and the inverse
bearing / distance between two points.  Both operate on a flat
(easting, northing) grid: earth curvature is deliberately ignored, so the
results only make sense for projected CRSs over short distances.

Bearings are measured in degrees clockwise from North:

* 0°   -> pure +northing
* 90°  -> pure +easting
* 180° -> pure -northing
* 270° -> pure -easting
"""

from __future__ import annotations

import math

from latlong_lib.errors import InvalidArgumentError
from latlong_lib.models import BearingDistance
from latlong_lib.models import PlanarPoint
from latlong_lib.validation import validate_finite


def normalize_bearing(bearing_deg: float) -> float:
    """Bring a bearing into ``[0, 360)``."""
    validate_finite(bearing_deg=bearing_deg)
    normalized = math.fmod(bearing_deg, 360.0)
    if normalized < 0:
        normalized += 360.0
    # fmod(-1e-20, 360) + 360 rounds to exactly 360.0
    if normalized >= 360.0:
        normalized = 0.0
    return normalized


def project_from_bearing_distance(
    easting: float,
    northing: float,
    bearing_deg: float,
    distance: float,
) -> PlanarPoint:
    """Project a new point from ``(easting, northing)`` by bearing and distance.

    Args:
        easting: Start easting
        northing: Start northing
        bearing_deg: Bearing in degrees clockwise from North. Any real value
            is accepted, the formula is periodic.
        distance: Distance in the units of the CRS (e.g. meters), >= 0

    Returns:
        The projected point

    Raises:
        InvalidArgumentError: If any argument is not a finite number, or if
            the distance is negative

    Examples:
        >>> project_from_bearing_distance(0.0, 0.0, 90.0, 10.0)
        PlanarPoint(easting=10.0, northing=6.123233995736766e-16)
    """
    validate_finite(
        easting=easting,
        northing=northing,
        bearing_deg=bearing_deg,
        distance=distance,
    )
    if distance < 0:
        raise InvalidArgumentError("Distance must be non-negative.")

    rad = bearing_deg * math.pi / 180
    return PlanarPoint(
        easting=easting + distance * math.sin(rad),
        northing=northing + distance * math.cos(rad),
    )


def bearing_distance_between(
    from_easting: float,
    from_northing: float,
    to_easting: float,
    to_northing: float,
) -> BearingDistance:
    """Compute bearing and distance from one planar point to another.

    When both points are identical the distance is 0 and the bearing is 0,
    which is what ``atan2(0, 0)`` yields.

    Args:
        from_easting: Start easting
        from_northing: Start northing
        to_easting: Target easting
        to_northing: Target northing

    Returns:
        Bearing in ``[0, 360)`` and Euclidean distance

    Raises:
        InvalidArgumentError: If any argument is not a finite number
    """
    validate_finite(
        from_easting=from_easting,
        from_northing=from_northing,
        to_easting=to_easting,
        to_northing=to_northing,
    )
    d_easting = to_easting - from_easting
    d_northing = to_northing - from_northing

    distance = math.hypot(d_easting, d_northing)
    bearing_deg = math.degrees(math.atan2(d_easting, d_northing))
    if bearing_deg < 0:
        bearing_deg += 360.0
    if bearing_deg >= 360.0:
        bearing_deg = 0.0
    return BearingDistance(bearing_deg=bearing_deg, distance=distance)


def format_bearing_note(target_name: str, result: BearingDistance) -> str:
    """Note line appended to a record after a bearing lookup."""
    return (
        f"Bearing to {target_name}: {result.bearing_deg:.1f}°, "
        f"distance: {result.distance:.2f} units"
    )


def format_projection_note(
    source_name: str,
    bearing_deg: float,
    distance: float,
) -> str:
    """Note attached to a record created by projection."""
    return (
        f"Projected from {source_name}: bearing {bearing_deg:.1f}°, "
        f"distance {distance:.2f} units"
    )
