# -*- coding: utf-8 -*-
"""CRS transform adapter.

Wraps a cartographic projection engine: validates the input coordinates,
delegates to the engine and reports engine failures as
``TransformFailureError``.  The default engine is pyproj.

Axis order follows PROJ strings: ``x`` is longitude / easting and ``y`` is
latitude / northing, whatever the authority axis order of the CRS is.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol

from pyproj import CRS
from pyproj import Transformer

from latlong_lib.errors import TransformFailureError
from latlong_lib.validation import validate_finite

logger = logging.getLogger(__name__)


class TransformEngine(Protocol):
    """Protocol for projection engines."""

    def __call__(
        self,
        source_params: str,
        target_params: str,
        x: float,
        y: float,
    ) -> tuple[float, float]:
        """Map ``(x, y)`` from the source definition to the target one."""
        ...


def pyproj_engine(
    source_params: str,
    target_params: str,
    x: float,
    y: float,
) -> tuple[float, float]:
    """Projection engine backed by pyproj.

    Args:
        source_params: Source CRS definition (PROJ string, WKT or "EPSG:xxxx")
        target_params: Target CRS definition
        x: Longitude / easting
        y: Latitude / northing

    Returns:
        ``(x, y)`` in the target CRS

    Raises:
        pyproj.exceptions.CRSError: If a definition cannot be parsed
        pyproj.exceptions.ProjError: If the coordinate is outside the domain
    """
    transformer = Transformer.from_crs(
        CRS.from_user_input(source_params),
        CRS.from_user_input(target_params),
        always_xy=True,
    )
    out_x, out_y = transformer.transform(x, y, errcheck=True)
    return float(out_x), float(out_y)


def transform_coordinate(
    source_params: str,
    target_params: str,
    x: float,
    y: float,
    *,
    engine: TransformEngine | None = None,
) -> tuple[float, float]:
    """Transform a coordinate from one CRS to another.

    Args:
        source_params: Projection definition of the source CRS
        target_params: Projection definition of the target CRS
        x: Longitude / easting in the source CRS
        y: Latitude / northing in the source CRS
        engine: Projection engine (default: pyproj)

    Returns:
        ``(x, y)`` in the target CRS

    Raises:
        InvalidArgumentError: If ``x`` or ``y`` is not a finite number
        TransformFailureError: If the engine rejects the coordinate pair or
            the definitions
    """
    validate_finite(x=x, y=y)
    engine = engine or pyproj_engine

    try:
        out_x, out_y = engine(source_params, target_params, x, y)
    except Exception as e:
        logger.warning("Transform of (%s, %s) failed: %s", x, y, e)
        raise TransformFailureError(f"Transform failed: {e}") from e

    if not (math.isfinite(out_x) and math.isfinite(out_y)):
        raise TransformFailureError(
            f"Transform failed: ({x}, {y}) is outside the domain of the target CRS."
        )
    return out_x, out_y
