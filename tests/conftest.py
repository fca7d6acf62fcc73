# -*- coding: utf-8 -*-
"""Pytest configuration and fixtures.

This module provides the shared test doubles: a virtual-time scheduler, a
host-fed location provider, recording session callbacks and a fake CRS
registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field

import pytest

from latlong_lib.location import FeedLocationProvider
from latlong_lib.models import CRSDefinition
from latlong_lib.models import CRSOption
from latlong_lib.models import LocationFix
from latlong_lib.scheduling import ManualScheduler
from latlong_lib.session import SamplingSessionController
from latlong_lib.session import SessionCallbacks

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

#: WGS84 position of the concrete transform case (lon, lat)
PERTH_LON_LAT = (115.84702, -32.057381)

#: Same position in UTM zone 50 south (easting, northing)
PERTH_UTM_50S = (391159.523179, 6452622.726701)

GRS80_LONGLAT = "+proj=longlat +ellps=GRS80 +no_defs"
GRS80_UTM_50S = "+proj=utm +zone=50 +south +ellps=GRS80 +units=m +no_defs"


# =============================================================================
# Helpers
# =============================================================================


def make_fix(
    accuracy: float = 5.0,
    latitude: float = -32.0,
    longitude: float = 115.0,
) -> LocationFix:
    """Build a location fix."""
    return LocationFix(latitude=latitude, longitude=longitude, accuracy=accuracy)


@dataclass
class Recorder:
    """Records every session callback, in call order."""

    events: list[tuple[str, object]] = field(default_factory=list)

    def callbacks(self) -> SessionCallbacks:
        return SessionCallbacks(
            on_progress=lambda p: self.events.append(("progress", p)),
            on_sample_accepted=lambda f: self.events.append(("accepted", f)),
            on_success=lambda r: self.events.append(("success", r)),
            on_error=lambda e: self.events.append(("error", e)),
        )

    def of(self, kind: str) -> list:
        return [payload for name, payload in self.events if name == kind]

    @property
    def progress(self) -> list:
        return self.of("progress")

    @property
    def terminal(self) -> list[tuple[str, object]]:
        return [event for event in self.events if event[0] in ("success", "error")]

    def clear(self) -> None:
        self.events.clear()


class FakeCrsRegistry:
    """In-memory CRS registry counting its calls."""

    def __init__(self, definitions: dict[str, CRSDefinition] | None = None) -> None:
        self.definitions = definitions or {}
        self.list_calls = 0
        self.load_calls: list[str] = []

    async def list_all_known_crs(self) -> list[CRSOption]:
        self.list_calls += 1
        return [
            CRSOption(code=code, name=definition.name)
            for code, definition in self.definitions.items()
        ]

    async def load_crs_definition(self, code: str) -> CRSDefinition | None:
        self.load_calls.append(code)
        return self.definitions.get(code)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def provider(scheduler) -> FeedLocationProvider:
    return FeedLocationProvider(scheduler)


@pytest.fixture
def controller(scheduler, provider) -> SamplingSessionController:
    return SamplingSessionController(scheduler, provider)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def grs80_definitions() -> dict[str, CRSDefinition]:
    """Geographic and UTM 50S definitions on the same ellipsoid."""
    return {
        "4326": CRSDefinition(
            code="4326",
            name="WGS 84",
            kind="Geographic 2D CRS",
            projection_params=GRS80_LONGLAT,
        ),
        "7850": CRSDefinition(
            code="7850",
            name="GDA2020 / MGA zone 50",
            kind="Projected CRS",
            projection_params=GRS80_UTM_50S,
        ),
    }


@pytest.fixture
def fake_registry(grs80_definitions) -> FakeCrsRegistry:
    return FakeCrsRegistry(grs80_definitions)
