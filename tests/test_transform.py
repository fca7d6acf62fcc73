# -*- coding: utf-8 -*-
"""Tests for the CRS transform adapter."""

import math

import pytest

from latlong_lib.constants import WGS84_PROJ4
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.errors import TransformFailureError
from latlong_lib.transform import pyproj_engine
from latlong_lib.transform import transform_coordinate
from tests.conftest import GRS80_LONGLAT
from tests.conftest import GRS80_UTM_50S
from tests.conftest import PERTH_LON_LAT
from tests.conftest import PERTH_UTM_50S


class TestTransformCoordinate:
    """Tests for transform_coordinate wiring."""

    def test_concrete_case(self):
        """Test WGS84 lon/lat to UTM zone 50 south."""
        x, y = transform_coordinate(GRS80_LONGLAT, GRS80_UTM_50S, *PERTH_LON_LAT)
        assert x == pytest.approx(PERTH_UTM_50S[0], abs=1e-6)
        assert y == pytest.approx(PERTH_UTM_50S[1], abs=1e-6)

    def test_inverse_transform(self):
        """Test UTM back to geographic."""
        lon, lat = transform_coordinate(GRS80_UTM_50S, GRS80_LONGLAT, *PERTH_UTM_50S)
        assert lon == pytest.approx(PERTH_LON_LAT[0], abs=1e-8)
        assert lat == pytest.approx(PERTH_LON_LAT[1], abs=1e-8)

    def test_wgs84_datum_to_utm(self):
        """Test the WGS84 datum definition against the same zone."""
        x, y = transform_coordinate(
            WGS84_PROJ4,
            "+proj=utm +zone=50 +south +datum=WGS84 +units=m +no_defs",
            *PERTH_LON_LAT,
        )
        assert x == pytest.approx(PERTH_UTM_50S[0], abs=1e-3)
        assert y == pytest.approx(PERTH_UTM_50S[1], abs=1e-3)

    def test_delegates_to_engine(self):
        """Test that the engine receives the definitions and the coordinates."""
        calls = []

        def engine(source, target, x, y):
            calls.append((source, target, x, y))
            return x + 1, y + 2

        assert transform_coordinate("A", "B", 10.0, 20.0, engine=engine) == (11.0, 22.0)
        assert calls == [("A", "B", 10.0, 20.0)]

    @pytest.mark.parametrize("bad_value", [math.nan, math.inf, -math.inf, "1"])
    def test_rejects_non_finite(self, bad_value):
        """Test that x and y are validated before calling the engine."""

        def engine(*_args):
            raise AssertionError("engine must not be called")

        with pytest.raises(InvalidArgumentError):
            transform_coordinate("A", "B", bad_value, 0.0, engine=engine)
        with pytest.raises(InvalidArgumentError):
            transform_coordinate("A", "B", 0.0, bad_value, engine=engine)

    def test_engine_failure_is_surfaced(self):
        """Test that engine exceptions become TransformFailureError."""

        def engine(*_args):
            raise RuntimeError("out of domain")

        with pytest.raises(TransformFailureError, match="out of domain") as exc_info:
            transform_coordinate("A", "B", 1.0, 2.0, engine=engine)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_non_finite_output_is_a_failure(self):
        """Test that an engine returning inf is reported."""
        with pytest.raises(TransformFailureError):
            transform_coordinate("A", "B", 1.0, 2.0, engine=lambda *_: (math.inf, 0.0))

    def test_malformed_definition(self):
        """Test that a malformed PROJ string fails with TransformFailureError."""
        with pytest.raises(TransformFailureError):
            transform_coordinate("+proj=nonsense", GRS80_UTM_50S, *PERTH_LON_LAT)


class TestPyprojEngine:
    """Tests for the default engine."""

    def test_axis_order_is_xy(self):
        """Test that x is the longitude even for EPSG:4326."""
        x, y = pyproj_engine("EPSG:4326", GRS80_UTM_50S, *PERTH_LON_LAT)
        assert x == pytest.approx(PERTH_UTM_50S[0], abs=1e-2)
        assert y == pytest.approx(PERTH_UTM_50S[1], abs=1e-2)
