# -*- coding: utf-8 -*-
"""Inverse-squared-accuracy weighted position estimator.

Each sample contributes with weight ``1 / accuracy**2``: a fix reported at
5 m counts four times as much as a fix reported at 10 m.

The estimate is a pure function of the sample list.  Recomputing it after
every new sample gives exactly the same value as computing it once on the
final list, so callers never need to carry running sums around.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from latlong_lib.errors import InvalidArgumentError
from latlong_lib.models import GeoLocation

if TYPE_CHECKING:
    from collections.abc import Iterable

    from latlong_lib.models import LocationSample


def _validate_accuracy(accuracy: float) -> None:
    if math.isnan(accuracy) or accuracy <= 0:
        raise InvalidArgumentError(
            f"Sample accuracy must be a positive radius, got {accuracy}"
        )


def sample_weight(accuracy: float) -> float:
    """Weight of a sample with the given accuracy radius (meters).

    Infinite (unknown) accuracy yields a weight of 0.  Radii so small that
    their square underflows yield an infinite weight, use
    :func:`compute_weighted_average` to combine such samples.

    Raises:
        InvalidArgumentError: If the accuracy is 0, negative or NaN
    """
    _validate_accuracy(accuracy)
    return 1.0 / accuracy / accuracy


def _relative_weights(accuracies: list[float]) -> list[float]:
    """Weights ``1 / accuracy**2`` scaled so the best sample weighs 1.

    Every ratio is at most 1, so the weights neither overflow nor underflow
    to a zero total for any positive accuracy.
    """
    for accuracy in accuracies:
        _validate_accuracy(accuracy)
    best = min(accuracies)
    if math.isinf(best):
        return [0.0] * len(accuracies)
    return [(best / accuracy) ** 2 for accuracy in accuracies]


def compute_weighted_average(
    samples: Iterable[LocationSample],
) -> GeoLocation | None:
    """Weighted average position of the samples.

    Args:
        samples: Accuracy-tagged samples

    Returns:
        The weighted average, or None if there is no sample or the total
        weight is zero (e.g. every accuracy is infinite)

    Raises:
        InvalidArgumentError: If a sample has a zero accuracy
    """
    samples = list(samples)
    if not samples:
        return None

    weights = _relative_weights([sample.accuracy for sample in samples])
    sum_weight = math.fsum(weights)
    if sum_weight == 0:
        return None

    # Accumulate offsets from the first sample
    ref_lat = samples[0].latitude
    ref_lon = samples[0].longitude
    d_lat = math.fsum(w * (s.latitude - ref_lat) for w, s in zip(weights, samples))
    d_lon = math.fsum(w * (s.longitude - ref_lon) for w, s in zip(weights, samples))

    return GeoLocation(
        latitude=ref_lat + d_lat / sum_weight,
        longitude=ref_lon + d_lon / sum_weight,
    )


def format_samples_note(samples: Iterable[LocationSample]) -> str:
    """Note listing the samples behind an averaged position (lon, lat order)."""
    lines = [
        f"{i}. {sample.longitude}, {sample.latitude} (±{sample.accuracy:g} m)"
        for i, sample in enumerate(samples, start=1)
    ]
    return "\n".join(["GPS Averaging:", *lines])
