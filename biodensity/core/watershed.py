"""
Watershed Aggregator

Counts observations per watershed and derives observation density.

Each observation is assigned to at most one region: regions are checked in
the order supplied and the first containing region wins, even when regions
overlap. Observations outside every region are dropped from the counts.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from biodensity.core.geometry import point_in_polygon, polygon_area
from biodensity.core.models import Coordinate, Observation, Region
from biodensity.utils.error_handling import InvalidGeometry

logger = logging.getLogger(__name__)


def region_contains(region: Region, point: Coordinate) -> bool:
    """
    True if any polygon part of the region contains the point.

    Malformed parts are skipped; InvalidGeometry is raised only when no part
    could be tested.
    """
    error = None
    usable = False
    for part in region.parts:
        try:
            if point_in_polygon(point, part):
                return True
            usable = True
        except InvalidGeometry as e:
            error = e
    if not usable and error is not None:
        raise error
    return False


def region_area(region: Region) -> float:
    """
    Total area of the usable polygon parts in km².

    Raises:
        InvalidGeometry: If the region has parts but none of them is usable
    """
    error = None
    usable = False
    total = 0.0
    for part in region.parts:
        try:
            total += polygon_area(part)
            usable = True
        except InvalidGeometry as e:
            logger.debug(f"Skipping malformed part of region {region.region_id}: {e}")
            error = e
    if not usable and error is not None:
        raise error
    return total


def assign_region(regions: List[Region], observation: Observation) -> Optional[int]:
    """
    Index of the first region containing the observation, or None.

    A region whose geometry is malformed, or an observation with a malformed
    coordinate, is skipped for that comparison only.
    """
    for index, region in enumerate(regions):
        try:
            if region_contains(region, observation.coordinate):
                return index
        except InvalidGeometry as e:
            logger.debug(
                f"Skipping region {region.region_id} for observation "
                f"{observation.observation_id}: {e}"
            )
    return None


def aggregate(regions: List[Region], observations: Iterable[Observation]) -> List[Region]:
    """
    Recompute observation count and density for every region.

    Mutates region metrics in place (full reset first) and returns the same list.

    Args:
        regions: Watersheds in their fixed checking order
        observations: Observation points for this run

    Returns:
        The regions list with fresh metrics
    """
    for region in regions:
        region.reset_metrics()

    assigned = 0
    total = 0
    for observation in observations:
        total += 1
        index = assign_region(regions, observation)
        if index is not None:
            regions[index].metrics.observation_count += 1
            assigned += 1

    for region in regions:
        try:
            area_km2 = region_area(region)
        except InvalidGeometry as e:
            logger.debug(f"Area unavailable for region {region.region_id}: {e}")
            area_km2 = 0.0
        count = region.metrics.observation_count
        region.metrics.density = count / area_km2 if area_km2 > 0 else 0.0

    logger.info(
        f"Aggregated {assigned}/{total} observations into {len(regions)} regions"
    )
    return regions
