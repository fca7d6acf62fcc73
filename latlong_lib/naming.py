# -*- coding: utf-8 -*-
"""Unique naming and identity utilities for coordinate records."""

from __future__ import annotations

import itertools
import logging
import os
import random
import time
import uuid
from typing import TYPE_CHECKING

from latlong_lib.constants import FALLBACK_RECORD_NAME

if TYPE_CHECKING:
    from collections.abc import Iterable

    from latlong_lib.models import CoordinateRecord

logger = logging.getLogger(__name__)

_fallback_counter = itertools.count(1)


def derive_unique_name(existing_names: Iterable[str], base_name: str) -> str:
    """Return ``base_name`` if free, else the first free ``base_name_N`` (N >= 2).

    Args:
        existing_names: Names already in use
        base_name: Requested name. Surrounding whitespace is dropped and a
            blank name falls back to ``"1"``.

    Returns:
        A name not in ``existing_names``

    Examples:
        >>> derive_unique_name([], "A")
        'A'
        >>> derive_unique_name(["A", "A_2"], "A")
        'A_3'
    """
    base = base_name.strip() or FALLBACK_RECORD_NAME
    taken = set(existing_names)
    if base not in taken:
        return base

    for suffix in itertools.count(2):
        candidate = f"{base}_{suffix}"
        if candidate not in taken:
            return candidate

    raise AssertionError("unreachable")  # pragma: no cover


def next_numeric_suggested_name(records: Iterable[CoordinateRecord]) -> str:
    """Suggest the next numeric name: highest purely-numeric name + 1."""
    names = [record.name for record in records]
    highest = max(
        (int(name) for name in names if name.isascii() and name.isdigit()),
        default=0,
    )
    return derive_unique_name(names, str(highest + 1))


def generate_record_id() -> str:
    """Return a new opaque record identifier.

    Identifiers are random UUIDs.  If the OS randomness source is not
    available, falls back to ``<time_ns hex>-<counter>-<random suffix>``,
    which stays unique across rapid successive calls in the process.
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        logger.warning("OS randomness unavailable, using fallback record id")

    counter = next(_fallback_counter)
    suffix = random.Random(time.perf_counter_ns() ^ os.getpid()).getrandbits(32)  # noqa: S311
    return f"{time.time_ns():x}-{counter:x}-{suffix:08x}"
