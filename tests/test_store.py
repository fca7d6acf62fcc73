# -*- coding: utf-8 -*-
"""Tests for the coordinate record store."""

import asyncio
import math

import pytest

from latlong_lib.crs import CrsCatalog
from latlong_lib.enums import RecordOrigin
from latlong_lib.errors import CrsNotFoundError
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.errors import RecordNotFoundError
from latlong_lib.errors import TransformFailureError
from latlong_lib.models import LocationSample
from latlong_lib.session import SessionResult
from latlong_lib.store import CoordinateStore
from tests.conftest import PERTH_LON_LAT
from tests.conftest import PERTH_UTM_50S


@pytest.fixture
def store():
    return CoordinateStore()


class TestAdd:
    """Tests for adding records."""

    def test_numeric_names(self, store):
        first = store.add("4326", 115.0, -32.0)
        second = store.add("EPSG:4326", 115.1, -32.1)
        assert (first.name, second.name) == ("1", "2")
        assert second.crs_code == "4326"
        assert first.origin is RecordOrigin.MANUAL
        assert store.next_suggested_name() == "3"

    def test_name_override_is_made_unique(self, store):
        store.add("4326", 0.0, 0.0, name="Camp")
        record = store.add("4326", 1.0, 1.0, name="Camp")
        assert record.name == "Camp_2"

    def test_ids_are_unique(self, store):
        ids = {store.add("4326", 0.0, 0.0).id for _ in range(10)}
        assert len(ids) == 10

    @pytest.mark.parametrize("bad_value", [math.nan, math.inf])
    def test_rejects_non_finite(self, store, bad_value):
        with pytest.raises(InvalidArgumentError):
            store.add("4326", bad_value, 0.0)
        assert len(store) == 0

    def test_iteration_keeps_insertion_order(self, store):
        names = [store.add("4326", 0.0, 0.0, name=n).name for n in ("C", "A", "B")]
        assert [record.name for record in store] == names


class TestProject:
    """Tests for bearing/distance projection of records."""

    def test_project(self, store):
        source = store.add("7850", *PERTH_UTM_50S, name="Entrance")
        record = store.project(source.id, 45, 100)

        assert record.name == "Entrance_Project"
        assert record.crs_code == "7850"
        assert record.origin is RecordOrigin.PROJECTED
        assert record.x == pytest.approx(391230.233857, abs=1e-6)
        assert record.y == pytest.approx(6452693.437379, abs=1e-6)
        assert record.notes == "Projected from Entrance: bearing 45.0°, distance 100.00 units"

    def test_negative_distance(self, store):
        source = store.add("7850", *PERTH_UTM_50S)
        with pytest.raises(InvalidArgumentError):
            store.project(source.id, 45, -1)
        assert len(store) == 1


class TestFindBearing:
    """Tests for the bearing lookup between records."""

    def test_appends_note(self, store):
        a = store.add("7850", 1000.0, 1000.0, name="A")
        b = store.add("7850", 1100.0, 1100.0, name="B")
        result = store.find_bearing(a.id, b.id)

        assert result.bearing_deg == pytest.approx(45.0)
        assert result.distance == pytest.approx(141.4213562)
        assert a.notes == "Bearing to B: 45.0°, distance: 141.42 units"

        store.find_bearing(a.id, b.id)
        assert len(a.notes.splitlines()) == 2

    def test_requires_same_crs(self, store):
        a = store.add("7850", 0.0, 0.0)
        b = store.add("4326", 115.0, -32.0)
        with pytest.raises(InvalidArgumentError, match="same CRS"):
            store.find_bearing(a.id, b.id)


class TestTransform:
    """Tests for CRS transforms of records."""

    def test_transform(self, store, fake_registry):
        source = store.add("4326", *PERTH_LON_LAT, name="Entrance")
        record = asyncio.run(store.transform(source.id, "7850", CrsCatalog(fake_registry)))

        assert record.name == "Entrance_Transform"
        assert record.crs_code == "7850"
        assert record.origin is RecordOrigin.TRANSFORMED
        assert record.x == pytest.approx(PERTH_UTM_50S[0], abs=1e-6)
        assert record.y == pytest.approx(PERTH_UTM_50S[1], abs=1e-6)

    def test_missing_definition(self, store, fake_registry):
        source = store.add("4326", *PERTH_LON_LAT)
        with pytest.raises(CrsNotFoundError, match="Could not load CRS definitions."):
            asyncio.run(store.transform(source.id, "9999", CrsCatalog(fake_registry)))
        assert len(store) == 1

    def test_engine_failure(self, store, fake_registry):
        source = store.add("4326", *PERTH_LON_LAT)

        def engine(*_args):
            raise RuntimeError("boom")

        with pytest.raises(TransformFailureError):
            asyncio.run(
                store.transform(source.id, "7850", CrsCatalog(fake_registry), engine=engine)
            )


class TestSessionResult:
    """Tests for records created from sampling sessions."""

    def test_add_from_session_result(self, store):
        samples = (
            LocationSample(latitude=-32.0, longitude=115.0, accuracy=4.0),
            LocationSample(latitude=-32.1, longitude=115.1, accuracy=4.0),
        )
        result = SessionResult(
            latitude=-32.05,
            longitude=115.05,
            samples_used=2,
            samples_discarded=0,
            duration_ms=60_000,
            samples=samples,
        )
        record = store.add_from_session_result(result)

        assert record.origin is RecordOrigin.GPS
        assert (record.x, record.y) == (115.05, -32.05)
        assert record.crs_code == "4326"
        assert record.notes.startswith("GPS Averaging:\n1. 115.0, -32.0 (±4 m)")


class TestEdits:
    """Tests for rename, notes, delete and reset."""

    def test_rename_keeps_names_unique(self, store):
        a = store.add("4326", 0.0, 0.0, name="A")
        b = store.add("4326", 0.0, 0.0, name="B")

        assert store.rename(b.id, "A").name == "A_2"
        assert store.rename(a.id, "A").name == "A"
        assert store.rename(a.id, "Cave").name == "Cave"

    def test_id_is_immutable(self, store):
        a = store.add("4326", 0.0, 0.0)
        with pytest.raises(ValueError):  # noqa: PT011
            a.id = "other"

    def test_update_note(self, store):
        a = store.add("4326", 0.0, 0.0)
        store.update_note(a.id, "Near the big tree")
        assert store.get(a.id).notes == "Near the big tree"
        store.update_note(a.id, "")
        assert store.get(a.id).notes is None

    def test_delete_and_reset(self, store):
        a = store.add("4326", 0.0, 0.0)
        store.add("4326", 1.0, 1.0)
        assert store.delete(a.id) is a
        assert a.id not in store
        assert len(store) == 1

        store.reset()
        assert len(store) == 0

    @pytest.mark.parametrize("operation", ["get", "delete", "project", "rename"])
    def test_unknown_id(self, store, operation):
        args = {"get": (), "delete": (), "project": (45, 10), "rename": ("X",)}
        with pytest.raises(RecordNotFoundError):
            getattr(store, operation)("missing", *args[operation])

    def test_record_not_found_is_key_error(self, store):
        with pytest.raises(KeyError):
            store.get("missing")
