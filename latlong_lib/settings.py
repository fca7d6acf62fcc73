# -*- coding: utf-8 -*-
"""User settings.

Settings come from the process environment, optionally overlaid by a
``.env`` file:

- ``LATLONG_GPS_WARMUP_SECONDS`` (default 30)
- ``LATLONG_GPS_AVERAGING_DURATION_SECONDS`` (default 60)
- ``LATLONG_DEFAULT_CRS`` (default 4326)

Durations are clamped into [1, 600] seconds.  Missing or unparsable values
fall back to the defaults, a bad setting never prevents the library from
working.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated

from dotenv import dotenv_values
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from latlong_lib.constants import DEFAULT_COLLECTION_MS
from latlong_lib.constants import DEFAULT_CRS_CODE
from latlong_lib.constants import DEFAULT_WARMUP_MS
from latlong_lib.constants import SETTINGS_ENV_PREFIX
from latlong_lib.constants import SETTINGS_MAX_SECONDS
from latlong_lib.constants import SETTINGS_MIN_SECONDS
from latlong_lib.crs import normalize_crs_code
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.session import SessionConfig

logger = logging.getLogger(__name__)

WARMUP_ENV_VAR = f"{SETTINGS_ENV_PREFIX}GPS_WARMUP_SECONDS"
DURATION_ENV_VAR = f"{SETTINGS_ENV_PREFIX}GPS_AVERAGING_DURATION_SECONDS"
CRS_ENV_VAR = f"{SETTINGS_ENV_PREFIX}DEFAULT_CRS"

Seconds = Annotated[int, Field(ge=SETTINGS_MIN_SECONDS, le=SETTINGS_MAX_SECONDS)]


class LatLongSettings(BaseModel):
    """Library settings.

    Attributes:
        warmup_seconds: Warm-up duration of GPS averaging sessions
        averaging_duration_seconds: Collection duration of GPS averaging
        default_crs_code: CRS selected by default for new coordinates
    """

    model_config = ConfigDict(frozen=True)

    warmup_seconds: Seconds = DEFAULT_WARMUP_MS // 1000
    averaging_duration_seconds: Seconds = DEFAULT_COLLECTION_MS // 1000
    default_crs_code: Annotated[str, Field(min_length=1)] = DEFAULT_CRS_CODE

    def to_session_config(self, **overrides) -> SessionConfig:
        """Session configuration using these durations."""
        return SessionConfig(
            warmup_ms=self.warmup_seconds * 1000,
            collection_ms=self.averaging_duration_seconds * 1000,
            **overrides,
        )


def parse_seconds(raw: str | None, default: int) -> int:
    """Parse a duration setting, clamped into the allowed range.

    Args:
        raw: Raw setting value
        default: Value used when ``raw`` is missing or not an integer

    Returns:
        The duration in seconds
    """
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid duration setting: %r", raw)
        return default
    return min(SETTINGS_MAX_SECONDS, max(SETTINGS_MIN_SECONDS, value))


def parse_crs_code(raw: str | None) -> str:
    """Parse the default CRS setting, falling back to EPSG:4326."""
    if raw is None or not raw.strip():
        return DEFAULT_CRS_CODE
    try:
        return normalize_crs_code(raw)
    except InvalidArgumentError:
        logger.warning("Ignoring invalid CRS setting: %r", raw)
        return DEFAULT_CRS_CODE


def load_settings(env_file: str | Path | None = None) -> LatLongSettings:
    """Load settings from the environment and an optional ``.env`` file.

    Values of the ``.env`` file take precedence over the environment.

    Raises:
        FileNotFoundError: If ``env_file`` is given but does not exist
    """
    values: dict[str, str | None] = dict(os.environ)
    if env_file is not None:
        if not (env_path := Path(env_file)).exists():
            raise FileNotFoundError(f"Impossible to find: `{env_path}`.")
        values.update(dotenv_values(env_path))
        logger.info("Loaded settings from: `%s`", env_path)

    defaults = LatLongSettings()
    crs_code = parse_crs_code(values.get(CRS_ENV_VAR))
    return LatLongSettings(
        warmup_seconds=parse_seconds(values.get(WARMUP_ENV_VAR), defaults.warmup_seconds),
        averaging_duration_seconds=parse_seconds(
            values.get(DURATION_ENV_VAR), defaults.averaging_duration_seconds
        ),
        default_crs_code=crs_code,
    )
