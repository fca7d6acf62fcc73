# -*- coding: utf-8 -*-
"""Bearing command: bearing and distance between two planar points."""

from __future__ import annotations

import argparse
import logging

from latlong_lib.errors import LatLongError
from latlong_lib.projection import bearing_distance_between

logger = logging.getLogger(__name__)


def bearing(args: list[str]) -> int:
    """Entry point for the bearing command."""
    parser = argparse.ArgumentParser(
        prog="latlong bearing",
        description="Compute the bearing and distance between two points",
    )
    parser.add_argument("from_easting", type=float)
    parser.add_argument("from_northing", type=float)
    parser.add_argument("to_easting", type=float)
    parser.add_argument("to_northing", type=float)

    parsed_args = parser.parse_args(args)

    try:
        result = bearing_distance_between(
            parsed_args.from_easting,
            parsed_args.from_northing,
            parsed_args.to_easting,
            parsed_args.to_northing,
        )
    except LatLongError as e:
        logger.error("Bearing computation failed: %s", e)  # noqa: TRY400
        return 1

    print(f"bearing: {result.bearing_deg:.6f}°, distance: {result.distance:.6f}")  # noqa: T201
    return 0
