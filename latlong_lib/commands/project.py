# -*- coding: utf-8 -*-
"""Project command: new point from a start point, a bearing and a distance."""

from __future__ import annotations

import argparse
import logging

from latlong_lib.errors import LatLongError
from latlong_lib.projection import project_from_bearing_distance

logger = logging.getLogger(__name__)


def project(args: list[str]) -> int:
    """Entry point for the project command."""
    parser = argparse.ArgumentParser(
        prog="latlong project",
        description="Project a point by bearing and distance on a planar grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  latlong project 391159.523179 6452622.726701 45 100

Notes:
  - Bearings are in degrees clockwise from North
  - Earth curvature is ignored, use a projected CRS (e.g. UTM)
""",
    )
    parser.add_argument("easting", type=float, help="Start easting")
    parser.add_argument("northing", type=float, help="Start northing")
    parser.add_argument("bearing", type=float, help="Bearing in degrees")
    parser.add_argument("distance", type=float, help="Distance (CRS units)")

    parsed_args = parser.parse_args(args)

    try:
        point = project_from_bearing_distance(
            parsed_args.easting,
            parsed_args.northing,
            parsed_args.bearing,
            parsed_args.distance,
        )
    except LatLongError as e:
        logger.error("Projection failed: %s", e)  # noqa: TRY400
        return 1

    print(f"{point.easting} {point.northing}")  # noqa: T201
    return 0
