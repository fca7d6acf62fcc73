# -*- coding: utf-8 -*-
"""Tests for the planar projection kernel."""

import math

import pytest

from latlong_lib.errors import InvalidArgumentError
from latlong_lib.models import BearingDistance
from latlong_lib.projection import bearing_distance_between
from latlong_lib.projection import format_bearing_note
from latlong_lib.projection import format_projection_note
from latlong_lib.projection import normalize_bearing
from latlong_lib.projection import project_from_bearing_distance

NON_FINITE = [math.nan, math.inf, -math.inf]


class TestProjectFromBearingDistance:
    """Tests for project_from_bearing_distance."""

    def test_concrete_case(self):
        """Test the reference projection from a UTM 50S point."""
        point = project_from_bearing_distance(391159.523179, 6452622.726701, 45, 100)
        assert point.easting == pytest.approx(391230.233857, abs=1e-6)
        assert point.northing == pytest.approx(6452693.437379, abs=1e-6)

    @pytest.mark.parametrize(
        ("bearing", "d_easting", "d_northing"),
        [
            (0, 0.0, 10.0),
            (90, 10.0, 0.0),
            (180, 0.0, -10.0),
            (270, -10.0, 0.0),
        ],
    )
    def test_cardinal_directions(self, bearing, d_easting, d_northing):
        """Test that 0° is +northing and 90° is +easting."""
        point = project_from_bearing_distance(100.0, 200.0, bearing, 10.0)
        assert point.easting == pytest.approx(100.0 + d_easting, abs=1e-9)
        assert point.northing == pytest.approx(200.0 + d_northing, abs=1e-9)

    def test_zero_distance_returns_start(self):
        """Test that a zero distance leaves the point unchanged."""
        point = project_from_bearing_distance(5.0, 6.0, 123.0, 0.0)
        assert point == (5.0, 6.0)

    def test_periodic_bearing(self):
        """Test that bearings outside [0, 360) are accepted."""
        a = project_from_bearing_distance(0.0, 0.0, 45.0, 10.0)
        b = project_from_bearing_distance(0.0, 0.0, 405.0, 10.0)
        c = project_from_bearing_distance(0.0, 0.0, -315.0, 10.0)
        assert b.easting == pytest.approx(a.easting)
        assert b.northing == pytest.approx(a.northing)
        assert c.easting == pytest.approx(a.easting)
        assert c.northing == pytest.approx(a.northing)

    @pytest.mark.parametrize("position", range(4))
    @pytest.mark.parametrize("bad_value", [*NON_FINITE, "1.0", None, True])
    def test_rejects_invalid_numbers(self, position, bad_value):
        """Test that every argument position rejects non-finite input."""
        args = [391159.5, 6452622.7, 45.0, 100.0]
        args[position] = bad_value
        with pytest.raises(InvalidArgumentError, match="finite"):
            project_from_bearing_distance(*args)

    def test_rejects_negative_distance(self):
        """Test that a negative distance is rejected."""
        with pytest.raises(InvalidArgumentError, match="non-negative"):
            project_from_bearing_distance(0.0, 0.0, 45.0, -1.0)

    def test_invalid_argument_is_value_error(self):
        """Test that InvalidArgumentError can be caught as ValueError."""
        with pytest.raises(ValueError):  # noqa: PT011
            project_from_bearing_distance(0.0, 0.0, 45.0, -1.0)


class TestBearingDistanceBetween:
    """Tests for bearing_distance_between."""

    def test_simple_case(self):
        """Test a 3-4-5 triangle."""
        result = bearing_distance_between(0.0, 0.0, 3.0, 4.0)
        assert isinstance(result, BearingDistance)
        assert result.distance == pytest.approx(5.0)
        assert result.bearing_deg == pytest.approx(math.degrees(math.atan2(3, 4)))

    def test_negative_angles_are_normalized(self):
        """Test that western bearings are reported in [180, 360)."""
        result = bearing_distance_between(0.0, 0.0, -10.0, 0.0)
        assert result.bearing_deg == pytest.approx(270.0)

    def test_identical_points(self):
        """Test that identical points give distance 0 and bearing 0."""
        result = bearing_distance_between(12.5, -7.25, 12.5, -7.25)
        assert result == (0.0, 0.0)

    @pytest.mark.parametrize("position", range(4))
    @pytest.mark.parametrize("bad_value", NON_FINITE)
    def test_rejects_non_finite(self, position, bad_value):
        """Test that every argument position rejects non-finite input."""
        args = [0.0, 0.0, 1.0, 1.0]
        args[position] = bad_value
        with pytest.raises(InvalidArgumentError):
            bearing_distance_between(*args)

    @pytest.mark.parametrize(
        ("easting", "northing"),
        [(0.0, 0.0), (391159.523179, 6452622.726701), (-1500.25, 2.5)],
    )
    @pytest.mark.parametrize("bearing", [0, 1.5, 45, 90, 179.9, 180, 270, 359.5, 360, -90, 765])
    @pytest.mark.parametrize("distance", [1.0, 100.0, 12345.678])
    def test_inverse_of_projection(self, easting, northing, bearing, distance):
        """Test that the inverse recovers (bearing mod 360, distance)."""
        point = project_from_bearing_distance(easting, northing, bearing, distance)
        result = bearing_distance_between(easting, northing, *point)

        assert result.distance == pytest.approx(distance, abs=1e-6)
        expected = bearing % 360
        # 359.9999999 and 0.0 are the same bearing
        delta = (result.bearing_deg - expected + 180) % 360 - 180
        assert delta == pytest.approx(0.0, abs=1e-6)
        assert 0.0 <= result.bearing_deg < 360.0


class TestNormalizeBearing:
    """Tests for normalize_bearing."""

    @pytest.mark.parametrize(
        ("bearing", "expected"),
        [(0, 0), (359.5, 359.5), (360, 0), (-90, 270), (765, 45), (-720, 0)],
    )
    def test_values(self, bearing, expected):
        assert normalize_bearing(bearing) == pytest.approx(expected)

    def test_tiny_negative_does_not_round_to_360(self):
        assert normalize_bearing(-1e-20) == 0.0


class TestNotes:
    """Tests for the note formatters."""

    def test_bearing_note(self):
        note = format_bearing_note("B", BearingDistance(45.04, 141.421))
        assert note == "Bearing to B: 45.0°, distance: 141.42 units"

    def test_projection_note(self):
        note = format_projection_note("A", 45, 100)
        assert note == "Projected from A: bearing 45.0°, distance 100.00 units"
