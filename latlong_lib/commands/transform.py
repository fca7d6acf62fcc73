# -*- coding: utf-8 -*-
"""Transform command: convert a coordinate between two CRSs."""

from __future__ import annotations

import argparse
import asyncio
import logging

from latlong_lib.constants import DEFAULT_CRS_CODE
from latlong_lib.crs import CrsCatalog
from latlong_lib.errors import CrsNotFoundError
from latlong_lib.errors import LatLongError
from latlong_lib.transform import transform_coordinate

logger = logging.getLogger(__name__)


async def _transform(
    catalog: CrsCatalog,
    source_code: str,
    target_code: str,
    x: float,
    y: float,
) -> tuple[float, float]:
    source = await catalog.get(source_code)
    target = await catalog.get(target_code)
    if source is None or target is None:
        raise CrsNotFoundError("Could not load CRS definitions.")
    return transform_coordinate(source.projection_params, target.projection_params, x, y)


def transform(args: list[str], catalog: CrsCatalog | None = None) -> int:
    """Entry point for the transform command."""
    parser = argparse.ArgumentParser(
        prog="latlong transform",
        description="Transform a coordinate from one CRS to another",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  latlong transform -t 7850 115.84702 -32.057381        # WGS84 -> MGA2020 zone 50
  latlong transform -s 7850 -t 4326 391159.52 6452622.73

Notes:
  - x is the longitude / easting, y the latitude / northing
  - CRS codes are EPSG codes, with or without the "EPSG:" prefix
""",
    )
    parser.add_argument(
        "-s",
        "--source",
        default=DEFAULT_CRS_CODE,
        help=f"Source CRS code (default: {DEFAULT_CRS_CODE})",
    )
    parser.add_argument(
        "-t",
        "--target",
        required=True,
        help="Target CRS code",
    )
    parser.add_argument("x", type=float, help="Longitude / easting")
    parser.add_argument("y", type=float, help="Latitude / northing")

    parsed_args = parser.parse_args(args)

    try:
        x, y = asyncio.run(
            _transform(
                catalog or CrsCatalog(),
                parsed_args.source,
                parsed_args.target,
                parsed_args.x,
                parsed_args.y,
            )
        )
    except LatLongError as e:
        logger.error("Transform failed: %s", e)  # noqa: TRY400
        return 1

    print(f"{x} {y}")  # noqa: T201
    return 0
