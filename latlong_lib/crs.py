# -*- coding: utf-8 -*-
"""CRS registry access and the CRS catalog cache.

The registry is the external source of CRS definitions (the PROJ database by
default).  Both registry operations are asynchronous: the PROJ database
queries run in a worker thread so that the caller's event loop never
blocks.

``CrsCatalog`` is the cache owned by whoever composes the transform
adapter.  The full CRS list is potentially large, so it is only loaded on
first request, exactly once, and never changes afterwards.  Loaded
definitions are memoised per code.

Usage::

    catalog = CrsCatalog()
    wgs84 = await catalog.get("4326")
    mga50 = await catalog.get("7850")
    x, y = transform_coordinate(
        wgs84.projection_params, mga50.projection_params, 115.84702, -32.057381
    )
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from typing import TYPE_CHECKING
from typing import Protocol

import utm
from pyproj import CRS
from pyproj.database import query_crs_info
from pyproj.enums import PJType
from pyproj.exceptions import CRSError

from latlong_lib.constants import CRS_AUTHORITY
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.models import CRSDefinition
from latlong_lib.models import CRSOption
from latlong_lib.validation import validate_finite

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

#: CRS types offered in the CRS list
LISTED_CRS_TYPES: tuple[PJType, ...] = (
    PJType.GEOGRAPHIC_2D_CRS,
    PJType.GEOGRAPHIC_3D_CRS,
    PJType.PROJECTED_CRS,
)


def normalize_crs_code(code: str | int) -> str:
    """Normalize ``"EPSG:4326"``, ``" 4326 "`` or ``4326`` to ``"4326"``.

    Raises:
        InvalidArgumentError: If the code is empty
    """
    text = str(code).strip()
    if text.upper().startswith(f"{CRS_AUTHORITY}:"):
        text = text[len(CRS_AUTHORITY) + 1 :].strip()
    if not text:
        raise InvalidArgumentError("CRS code must not be empty.")
    return text


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class CrsRegistry(Protocol):
    """Protocol for CRS registries."""

    async def list_all_known_crs(self) -> Sequence[CRSOption]:
        """Return every CRS the registry knows (code and name)."""
        ...

    async def load_crs_definition(self, code: str) -> CRSDefinition | None:
        """Return the definition of ``code``, or None if unknown."""
        ...


class PyprojCrsRegistry:
    """CRS registry backed by the PROJ database shipped with pyproj."""

    def __init__(self, auth_name: str = CRS_AUTHORITY) -> None:
        self.auth_name = auth_name

    async def list_all_known_crs(self) -> list[CRSOption]:
        return await asyncio.to_thread(self._query_options)

    async def load_crs_definition(self, code: str) -> CRSDefinition | None:
        return await asyncio.to_thread(self._load_definition, normalize_crs_code(code))

    def _query_options(self) -> list[CRSOption]:
        infos = query_crs_info(
            auth_name=self.auth_name,
            pj_types=list(LISTED_CRS_TYPES),
            allow_deprecated=False,
        )
        return [CRSOption(code=info.code, name=info.name) for info in infos]

    def _load_definition(self, code: str) -> CRSDefinition | None:
        try:
            crs = CRS.from_authority(self.auth_name, code)
        except CRSError:
            logger.warning("Unknown CRS: %s:%s", self.auth_name, code)
            return None

        # Lossy PROJ4 export is expected, the PROJ string is what gets stored
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            projection_params = crs.to_proj4()

        if not projection_params:
            logger.warning(
                "CRS %s:%s has no PROJ string representation", self.auth_name, code
            )
            return None

        return CRSDefinition(
            code=code,
            name=crs.name,
            kind=crs.type_name,
            projection_params=projection_params,
        )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CrsCatalog:
    """Load-once cache in front of a ``CrsRegistry``.

    Attributes:
        registry: The registry queried on cache misses
    """

    def __init__(self, registry: CrsRegistry | None = None) -> None:
        self.registry: CrsRegistry = registry or PyprojCrsRegistry()
        self._options: tuple[CRSOption, ...] | None = None
        self._definitions: dict[str, CRSDefinition] = {}
        self._load_lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        """Whether the full CRS list has been loaded."""
        return self._options is not None

    async def list_all(self) -> tuple[CRSOption, ...]:
        """Return the full CRS list, loading it on first call.

        Concurrent first calls share a single registry query.
        """
        if self._options is not None:
            return self._options

        async with self._load_lock:
            if self._options is None:
                options = await self.registry.list_all_known_crs()
                self._options = tuple(options)
                logger.info("Loaded %d CRS definitions", len(self._options))
        return self._options

    async def get(self, code: str | int) -> CRSDefinition | None:
        """Return the definition of ``code``, or None if it cannot be loaded."""
        code = normalize_crs_code(code)
        if (definition := self._definitions.get(code)) is not None:
            return definition

        definition = await self.registry.load_crs_definition(code)
        if definition is not None:
            definition = self._definitions.setdefault(code, definition)
        return definition

    async def search(self, text: str, limit: int | None = None) -> list[CRSOption]:
        """Case-insensitive search on the CRS label (name and code)."""
        needle = text.strip().lower()
        matches = [
            option
            for option in await self.list_all()
            if needle in option.label.lower()
        ]
        return matches[:limit] if limit is not None else matches


# ---------------------------------------------------------------------------
# UTM helpers
# ---------------------------------------------------------------------------


def utm_zone_for(latitude: float, longitude: float) -> int:
    """UTM zone number (1-60) of a WGS84 position."""
    validate_finite(latitude=latitude, longitude=longitude)
    return utm.latlon_to_zone_number(latitude, longitude)


def utm_projection_params(zone: int, south: bool) -> str:
    """PROJ definition of a WGS84 UTM zone.

    Use with ``transform_coordinate(WGS84_PROJ4, params, lon, lat)`` to get
    ``(easting, northing)``.

    Raises:
        InvalidArgumentError: If the zone is outside 1-60
    """
    if not 1 <= zone <= 60:  # noqa: PLR2004
        raise InvalidArgumentError(f"UTM zone must be between 1 and 60, got {zone}")
    hemisphere = "+south " if south else ""
    return f"+proj=utm +zone={zone} {hemisphere}+datum=WGS84 +units=m +no_defs"
