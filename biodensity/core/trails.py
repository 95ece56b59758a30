"""
Trail Scorer

Counts observations within a buffer distance of each trail and normalizes
the counts against the busiest trail.

Unlike watershed aggregation, a single observation counts towards every
trail whose buffer it falls in; trail buffers overlap.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List

from biodensity.core.geometry import nearest_point_on_polyline
from biodensity.core.models import Coordinate, Observation, Trail
from biodensity.utils.constants import METERS_PER_KM, SCORE_DECIMALS
from biodensity.utils.error_handling import ConfigurationError, InvalidGeometry

logger = logging.getLogger(__name__)


def validate_buffer_distance(buffer_distance_km) -> float:
    """Return the buffer as float, or raise ConfigurationError unless finite and > 0."""
    try:
        value = float(buffer_distance_km)
    except (TypeError, ValueError):
        raise ConfigurationError(f"buffer_distance_km must be a number, got {buffer_distance_km!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"buffer_distance_km must be a positive finite number, got {value}")
    return value


def trail_distance_km(trail: Trail, point: Coordinate) -> float:
    """
    Shortest distance from a point to any part of the trail.

    Malformed parts are ignored; a trail with no usable part is infinitely far.
    """
    best = math.inf
    for part in trail.parts:
        try:
            best = min(best, nearest_point_on_polyline(point, part).distance_km)
        except InvalidGeometry as e:
            logger.debug(f"Skipping part of trail {trail.trail_id}: {e}")
    return best


def score(
    trails: List[Trail],
    observations: Iterable[Observation],
    buffer_distance_km: float,
) -> List[Trail]:
    """
    Recompute nearby counts and normalized scores for every trail.

    Args:
        trails: Trails to score (metrics reset first)
        observations: Observation points for this run
        buffer_distance_km: Radius around a trail that counts as "nearby"

    Returns:
        The trails list with fresh metrics

    Raises:
        ConfigurationError: If the buffer is not a positive finite number
            (raised before any metric is touched)
    """
    buffer_km = validate_buffer_distance(buffer_distance_km)

    for trail in trails:
        trail.reset_metrics()

    for observation in observations:
        for trail in trails:
            if trail_distance_km(trail, observation.coordinate) <= buffer_km:
                trail.metrics.nearby_count += 1

    max_count = max([1] + [t.metrics.nearby_count for t in trails])
    for trail in trails:
        trail.metrics.normalized_score = round(
            trail.metrics.nearby_count / max_count, SCORE_DECIMALS
        )

    logger.info(
        f"Scored {len(trails)} trails with {buffer_km * METERS_PER_KM:.0f} m buffer "
        f"(max nearby count {max_count})"
    )
    return trails
