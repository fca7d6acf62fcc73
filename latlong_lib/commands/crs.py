# -*- coding: utf-8 -*-
"""CRS command: list or search the known coordinate reference systems."""

from __future__ import annotations

import argparse
import asyncio
import logging

from latlong_lib.crs import CrsCatalog
from latlong_lib.errors import LatLongError

logger = logging.getLogger(__name__)


def crs(args: list[str], catalog: CrsCatalog | None = None) -> int:
    """Entry point for the crs command."""
    parser = argparse.ArgumentParser(
        prog="latlong crs",
        description="List the known coordinate reference systems",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  latlong crs --search "GDA2020 / MGA"
  latlong crs --search 4326
""",
    )
    parser.add_argument(
        "-s",
        "--search",
        default="",
        help="Only list CRSs whose name or code contains this text",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=None,
        help="Maximum number of CRSs to list",
    )

    parsed_args = parser.parse_args(args)

    try:
        options = asyncio.run(
            (catalog or CrsCatalog()).search(parsed_args.search, parsed_args.limit)
        )
    except LatLongError as e:
        logger.error("CRS listing failed: %s", e)  # noqa: TRY400
        return 1

    for option in options:
        print(option.label)  # noqa: T201
    return 0
