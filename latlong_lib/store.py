# -*- coding: utf-8 -*-
"""In-memory store of the working set of coordinate records.

The store keeps records in insertion order and enforces that record names
stay unique.  Derived records (transform, projection, GPS session) are
appended by the store itself; the projection kernel, the transform adapter
and the estimator never touch it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from latlong_lib.constants import DEFAULT_CRS_CODE
from latlong_lib.constants import PROJECT_NAME_SUFFIX
from latlong_lib.constants import TRANSFORM_NAME_SUFFIX
from latlong_lib.crs import normalize_crs_code
from latlong_lib.enums import RecordOrigin
from latlong_lib.errors import CrsNotFoundError
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.errors import RecordNotFoundError
from latlong_lib.estimator import format_samples_note
from latlong_lib.models import CoordinateRecord
from latlong_lib.naming import derive_unique_name
from latlong_lib.naming import generate_record_id
from latlong_lib.naming import next_numeric_suggested_name
from latlong_lib.projection import bearing_distance_between
from latlong_lib.projection import format_bearing_note
from latlong_lib.projection import format_projection_note
from latlong_lib.projection import project_from_bearing_distance
from latlong_lib.transform import transform_coordinate
from latlong_lib.validation import validate_finite

if TYPE_CHECKING:
    from collections.abc import Iterator

    from latlong_lib.crs import CrsCatalog
    from latlong_lib.models import BearingDistance
    from latlong_lib.session import SessionResult
    from latlong_lib.transform import TransformEngine

logger = logging.getLogger(__name__)


def _append_line(notes: str | None, line: str) -> str:
    return f"{notes}\n{line}" if notes else line


class CoordinateStore:
    """Ordered collection of coordinate records with unique names."""

    def __init__(self) -> None:
        self._records: dict[str, CoordinateRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CoordinateRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    @property
    def names(self) -> list[str]:
        return [record.name for record in self._records.values()]

    def get(self, record_id: str) -> CoordinateRecord:
        """Return the record with the given id.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFoundError(f"No coordinate record with id {record_id!r}") from None

    def find_by_name(self, name: str) -> CoordinateRecord | None:
        return next(
            (record for record in self._records.values() if record.name == name),
            None,
        )

    def next_suggested_name(self) -> str:
        """Name proposed for the next manually entered record."""
        return next_numeric_suggested_name(self._records.values())

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def add(
        self,
        crs_code: str | int,
        x: float,
        y: float,
        name: str | None = None,
        notes: str | None = None,
        origin: RecordOrigin = RecordOrigin.MANUAL,
    ) -> CoordinateRecord:
        """Append a new record.

        Args:
            crs_code: CRS the coordinates are expressed in
            x: Longitude / easting
            y: Latitude / northing
            name: Requested name, made unique if taken. Defaults to the next
                numeric name.
            notes: Optional note
            origin: How the record was created

        Returns:
            The new record

        Raises:
            InvalidArgumentError: If ``x`` or ``y`` is not a finite number
        """
        validate_finite(x=x, y=y)
        if name is None or not name.strip():
            record_name = self.next_suggested_name()
        else:
            record_name = derive_unique_name(self.names, name)

        record = CoordinateRecord(
            id=generate_record_id(),
            name=record_name,
            crs_code=normalize_crs_code(crs_code),
            x=x,
            y=y,
            origin=origin,
            notes=notes or None,
        )
        self._records[record.id] = record
        logger.debug("Added record %s", record)
        return record

    async def transform(
        self,
        record_id: str,
        target_crs_code: str | int,
        catalog: CrsCatalog,
        engine: TransformEngine | None = None,
    ) -> CoordinateRecord:
        """Transform a record into another CRS, appending ``<name>_Transform``.

        Raises:
            RecordNotFoundError: If no record has this id
            CrsNotFoundError: If either CRS definition cannot be loaded
            TransformFailureError: If the projection engine fails
        """
        source = self.get(record_id)
        source_definition = await catalog.get(source.crs_code)
        target_definition = await catalog.get(target_crs_code)
        if source_definition is None or target_definition is None:
            raise CrsNotFoundError("Could not load CRS definitions.")

        x, y = transform_coordinate(
            source_definition.projection_params,
            target_definition.projection_params,
            source.x,
            source.y,
            engine=engine,
        )
        return self.add(
            target_definition.code,
            x,
            y,
            name=f"{source.name}{TRANSFORM_NAME_SUFFIX}",
            origin=RecordOrigin.TRANSFORMED,
        )

    def project(
        self,
        record_id: str,
        bearing_deg: float,
        distance: float,
    ) -> CoordinateRecord:
        """Project a record by bearing and distance, appending ``<name>_Project``.

        The new record stays in the source CRS.

        Raises:
            RecordNotFoundError: If no record has this id
            InvalidArgumentError: If an argument is not finite or the
                distance is negative
        """
        source = self.get(record_id)
        point = project_from_bearing_distance(source.x, source.y, bearing_deg, distance)
        return self.add(
            source.crs_code,
            point.easting,
            point.northing,
            name=f"{source.name}{PROJECT_NAME_SUFFIX}",
            notes=format_projection_note(source.name, bearing_deg, distance),
            origin=RecordOrigin.PROJECTED,
        )

    def add_from_session_result(
        self,
        result: SessionResult,
        crs_code: str | int = DEFAULT_CRS_CODE,
        name: str | None = None,
    ) -> CoordinateRecord:
        """Append the position refined by a sampling session."""
        return self.add(
            crs_code,
            result.longitude,
            result.latitude,
            name=name,
            notes=format_samples_note(result.samples),
            origin=RecordOrigin.GPS,
        )

    # -------------------------------------------------------------------------
    # Queries and edits
    # -------------------------------------------------------------------------

    def find_bearing(self, source_id: str, target_id: str) -> BearingDistance:
        """Bearing and distance from one record to another.

        The result is also appended as a line to the source record's notes.

        Raises:
            RecordNotFoundError: If either id is unknown
            InvalidArgumentError: If the records are not in the same CRS
        """
        source = self.get(source_id)
        target = self.get(target_id)
        if source.crs_code != target.crs_code:
            raise InvalidArgumentError(
                "Both coordinates must be in the same CRS "
                f"(EPSG:{source.crs_code} vs EPSG:{target.crs_code})."
            )

        result = bearing_distance_between(source.x, source.y, target.x, target.y)
        source.notes = _append_line(source.notes, format_bearing_note(target.name, result))
        return result

    def rename(self, record_id: str, new_name: str) -> CoordinateRecord:
        """Rename a record. The name is made unique among the other records."""
        record = self.get(record_id)
        others = [r.name for r in self._records.values() if r.id != record_id]
        record.name = derive_unique_name(others, new_name)
        return record

    def update_note(self, record_id: str, notes: str | None) -> CoordinateRecord:
        record = self.get(record_id)
        record.notes = notes or None
        return record

    def delete(self, record_id: str) -> CoordinateRecord:
        """Remove a record and return it.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        record = self.get(record_id)
        del self._records[record_id]
        return record

    def reset(self) -> None:
        """Remove every record."""
        logger.info("Clearing %d coordinate records", len(self._records))
        self._records.clear()
